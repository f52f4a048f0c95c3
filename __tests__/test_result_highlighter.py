"""
Tests for wrapping search terms in highlight markers.
"""

from sitesearch.services.search import ResultHighlighter


def test_wraps_every_case_insensitive_occurrence():
    highlighter = ResultHighlighter()

    result = highlighter.highlight_text("Remote work, remote jobs, REMOTE teams", ["remote"])

    assert result == (
        "<mark>Remote</mark> work, <mark>remote</mark> jobs, <mark>REMOTE</mark> teams"
    )


def test_terms_of_two_characters_or_less_are_skipped():
    highlighter = ResultHighlighter()

    assert highlighter.highlight_text("IT jobs in the UK", ["it", "uk", "jobs"]) == (
        "IT <mark>jobs</mark> in the UK"
    )


def test_regex_metacharacters_are_literal():
    highlighter = ResultHighlighter()

    assert highlighter.highlight_text("nothing special here", [".*"]) == "nothing special here"
    assert highlighter.highlight_text("match a.*b literally", ["a.*b"]) == (
        "match <mark>a.*b</mark> literally"
    )
    assert highlighter.highlight_text("salary (GBP) guide", ["(gbp)"]) == (
        "salary <mark>(GBP)</mark> guide"
    )


def test_overlapping_terms_are_wrapped_once():
    highlighter = ResultHighlighter()

    result = highlighter.highlight_text("Engineering roles", ["engineer", "engineering"])

    assert result == "<mark>Engineering</mark> roles"
    assert result.count("<mark>") == 1


def test_duplicate_terms_do_not_double_wrap():
    highlighter = ResultHighlighter()

    assert highlighter.highlight_text("remote", ["remote", "remote", "REMOTE"]) == "<mark>remote</mark>"


def test_custom_markers_and_disabled_highlighting():
    custom = ResultHighlighter(open_tag="[", close_tag="]")
    disabled = ResultHighlighter(enabled=False)

    assert custom.highlight_text("remote jobs", ["jobs"]) == "remote [jobs]"
    assert disabled.highlight_text("remote jobs", ["jobs"]) == "remote jobs"


def test_empty_inputs():
    highlighter = ResultHighlighter()

    assert highlighter.highlight_text("", ["remote"]) == ""
    assert highlighter.highlight_text("remote jobs", []) == "remote jobs"
