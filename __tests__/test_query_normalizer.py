"""
Tests for turning raw request parameters into search queries.
"""

from urllib.parse import parse_qs

import pytest

from sitesearch.models.search import JobFilters, SearchQuery
from sitesearch.services.search import QueryNormalizer, SearchValidator

CATEGORIES = {"career-advice": "Career Advice", "remote-work": "Remote Work"}


@pytest.fixture
def normalizer():
    validator = SearchValidator(["article", "job", "page"], CATEGORIES, max_page=50)
    return QueryNormalizer(validator=validator, page_size=10)


def test_all_parameters_missing_gives_defaults(normalizer):
    query = normalizer.normalize()

    assert query == SearchQuery(page_size=10)
    assert query.terms == ()
    assert query.effective_sort_key == "date-desc"


def test_terms_are_lowercased_and_keep_duplicates(normalizer):
    query = normalizer.normalize("  Remote   remote JOBS ")

    assert query.raw_text == "Remote remote JOBS"
    assert query.terms == ("remote", "remote", "jobs")
    assert query.highlight_terms == ("remote", "jobs")


def test_short_terms_match_but_are_not_highlighted(normalizer):
    query = normalizer.normalize("uk it jobs")

    assert query.terms == ("uk", "it", "jobs")
    assert query.highlight_terms == ("jobs",)


def test_markup_is_stripped_from_text(normalizer):
    query = normalizer.normalize("<b>remote</b> jobs<script>")

    assert query.raw_text == "remote jobs"


@pytest.mark.parametrize("raw_type,expected", [
    ("job", "job"),
    ("JOB", "job"),
    ("podcast", None),
    ("", None),
    (None, None),
])
def test_type_filter(normalizer, raw_type, expected):
    assert normalizer.normalize("x", type_filter=raw_type).type_filter == expected


@pytest.mark.parametrize("raw_category,expected", [
    ("remote-work", "remote-work"),
    ("Remote Work", "remote-work"),
    ("unknown", None),
])
def test_category_filter_accepts_slug_or_label(normalizer, raw_category, expected):
    assert normalizer.normalize("x", category_filter=raw_category).category_filter == expected


@pytest.mark.parametrize("raw_sort,expected", [
    ("date-asc", "date-asc"),
    ("TITLE-ASC", "title-asc"),
    ("popularity", "relevance"),
    (None, "relevance"),
])
def test_sort_key_falls_back_to_relevance(normalizer, raw_sort, expected):
    assert normalizer.normalize("x", sort_key=raw_sort).sort_key == expected


@pytest.mark.parametrize("raw_page,expected", [
    ("3", 3),
    ("0", 1),
    ("-4", 1),
    ("abc", 1),
    ("2.5", 1),
    ("99999", 50),
    ("9" * 5000, 50),
    (None, 1),
])
def test_page_is_clamped(normalizer, raw_page, expected):
    assert normalizer.normalize("x", page=raw_page).page == expected


def test_normalize_params_uses_first_list_value(normalizer):
    query = normalizer.normalize_params(parse_qs("q=sales&q=ignored&type=job&page=2"))

    assert query.raw_text == "sales"
    assert query.type_filter == "job"
    assert query.page == 2


def test_normalizing_the_canonical_form_is_identity(normalizer):
    query = normalizer.normalize(
        "Remote  <i>Jobs</i>", type_filter="Job", category_filter="Career Advice",
        sort_key="date-asc", page="4",
    )

    again = normalizer.normalize_params(parse_qs(query.to_query_string()))

    assert again == query


def test_search_hash_tracks_every_parameter(normalizer):
    base = normalizer.normalize("remote jobs")

    assert normalizer.generate_search_hash(base) == normalizer.generate_search_hash(
        normalizer.normalize(" remote   jobs ")
    )
    assert normalizer.generate_search_hash(base) != normalizer.generate_search_hash(
        base.with_type("job")
    )
    assert normalizer.generate_search_hash(base) != normalizer.generate_search_hash(base.with_page(2))
    assert normalizer.generate_search_hash(base, include_page=False) == normalizer.generate_search_hash(
        base.with_page(2), include_page=False
    )


def test_job_filters_are_read_from_params(normalizer):
    query = normalizer.normalize_params(parse_qs(
        "q=engineer&job_location=+London+&job_type=Full-Time&job_category=Software Engineering"
        "&salary_min=40,000&salary_max=90000"
    ))

    assert query.job_filters == JobFilters(
        location="London",
        job_type="full-time",
        category="software-engineering",
        salary_min=40000,
        salary_max=90000,
    )
    assert query.has_filters


@pytest.mark.parametrize("raw_salary", ["", "abc", "-5", "0", "12.5", "1" * 40])
def test_malformed_salary_bounds_are_dropped(normalizer, raw_salary):
    query = normalizer.normalize_params({"salary_min": raw_salary, "salary_max": raw_salary})

    assert query.job_filters.salary_min is None
    assert query.job_filters.salary_max is None
    assert not query.has_filters


def test_blank_job_filters_are_dropped(normalizer):
    query = normalizer.normalize_params({"job_location": "   ", "job_type": "<b></b>", "job_category": "--"})

    assert query.job_filters.is_empty


def test_job_filters_survive_the_canonical_form(normalizer):
    query = normalizer.normalize_params({
        "q": "consultant", "job_location": "Leeds", "job_type": "Permanent",
        "job_category": "recruitment", "salary_min": "25000",
    })

    again = normalizer.normalize_params(parse_qs(query.to_query_string()))

    assert again == query
    assert normalizer.generate_search_hash(query) != normalizer.generate_search_hash(
        query.without_filters()
    )
