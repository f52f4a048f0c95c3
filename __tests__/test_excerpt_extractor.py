"""
Tests for cutting result excerpts around term matches.
"""

import pytest

from sitesearch.services.search import ExcerptExtractor

from conftest import make_item

FILLER = " ".join(["lorem"] * 80)


@pytest.fixture
def extractor():
    return ExcerptExtractor(max_length=250, lead=100, ellipsis="...")


def test_short_body_with_match_is_returned_whole(extractor):
    item = make_item(1, body="We offer remote jobs across the globe.")

    assert extractor.extract(item, ["remote", "jobs"]) == "We offer remote jobs across the globe."


def test_window_starts_before_the_match_and_is_marked_on_both_sides(extractor):
    body = f"{FILLER} the remote jobs board {FILLER}"
    item = make_item(1, body=body)

    excerpt = extractor.extract(item, ["remote"])

    assert excerpt.startswith("...")
    assert excerpt.endswith("...")
    assert "remote jobs board" in excerpt
    # Roughly the lead-in is kept before the match
    assert 80 <= excerpt.index("remote") <= 110


def test_window_ends_on_a_word_boundary(extractor):
    body = f"remote {FILLER}"
    item = make_item(1, body=body)

    excerpt = extractor.extract(item, ["remote"])

    assert not excerpt.startswith("...")
    assert excerpt.endswith("lorem...")


def test_earliest_match_across_terms_wins(extractor):
    body = f"jobs appear first {FILLER} and remote appears late"
    item = make_item(1, body=body)

    excerpt = extractor.extract(item, ["remote", "jobs"])

    assert excerpt.startswith("jobs appear first")


def test_override_used_when_there_are_no_terms(extractor):
    item = make_item(1, body="Body text", excerpt_override="Hand written summary")

    assert extractor.extract(item, []) == "Hand written summary"


def test_override_is_truncated(extractor):
    item = make_item(1, body="Body", excerpt_override="word " * 100)

    excerpt = extractor.extract(item, [])

    assert excerpt.endswith("...")
    assert len(excerpt) <= 250 + len("...")


def test_body_match_beats_override(extractor):
    item = make_item(1, body="We offer remote jobs.", excerpt_override="Summary")

    assert extractor.extract(item, ["remote"]) == "We offer remote jobs."


@pytest.mark.parametrize("body,expected", [
    ('<p class="lead">Prepare <strong>well</strong>.</p>', "Prepare well."),
    ("<p>First paragraph.</p><p>Second well paragraph.</p>", "First paragraph. Second well paragraph."),
    ("Line one<br>well, line two", "Line one well, line two"),
    ("un<em>well</em>come", "unwellcome"),
])
def test_inline_tags_leave_no_gaps_and_block_tags_separate(extractor, body, expected):
    item = make_item(1, body=body)

    assert extractor.extract(item, ["well"]) == expected


def test_override_used_when_body_has_no_match(extractor):
    item = make_item(1, body="Nothing relevant here.", excerpt_override="Summary")

    assert extractor.extract(item, ["remote"]) == "Summary"


def test_no_match_and_no_override_falls_back_to_body_start(extractor):
    item = make_item(1, body=FILLER)

    excerpt = extractor.extract(item, ["remote"])

    assert excerpt.startswith("lorem lorem")
    assert excerpt.endswith("...")


def test_markup_is_removed_from_body(extractor):
    item = make_item(1, body="<p>We offer <strong>remote</strong>\n\n jobs.</p>")

    assert extractor.extract(item, ["remote"]) == "We offer remote jobs."


@pytest.mark.parametrize("body,terms", [
    ("", []),
    ("", ["remote"]),
    ("short", ["a much longer term than the body"]),
    ("ab", ["ab"]),
])
def test_degenerate_inputs_never_raise(extractor, body, terms):
    item = make_item(1, body=body)

    assert isinstance(extractor.extract(item, terms), str)


@pytest.mark.parametrize("position", [0, 50, 150, 390, 460])
def test_excerpt_length_is_bounded(extractor, position):
    words = ["alpha"] * 100
    words[position // 6] = "target"
    item = make_item(1, body=" ".join(words))

    excerpt = extractor.extract(item, ["target"])

    assert "target" in excerpt
    assert len(excerpt) <= 250 + 2 * len("...")
