"""
Tests for per-type and per-category facet counts.
"""

import pytest

from sitesearch.services.search import FacetCounter, InMemoryContentStore, QueryNormalizer

from conftest import CONTENT_TYPES, make_item

CATEGORIES = {"career-advice": "Career Advice", "remote-work": "Remote Work"}


@pytest.fixture
def counter(cache_manager):
    return FacetCounter(cache_manager, content_types=CONTENT_TYPES, categories=CATEGORIES)


@pytest.fixture
def normalizer():
    return QueryNormalizer()


async def test_all_facet_comes_first_then_configured_types(counter, content_store, normalizer):
    query = normalizer.normalize("remote")

    facets = await counter.count_facets(query, content_store.count)

    assert [f.type for f in facets] == ["all", "article", "job", "page"]
    assert [f.label for f in facets] == ["All", "Articles", "Jobs", "Pages"]
    assert {f.type: f.count for f in facets} == {"all": 2, "article": 1, "job": 1, "page": 0}


async def test_type_facets_sum_to_all(counter, content_store, normalizer):
    for text in ["", "remote", "career", "nothing-matches-this"]:
        facets = await counter.count_facets(normalizer.normalize(text), content_store.count)

        assert sum(f.count for f in facets[1:]) == facets[0].count


async def test_filters_are_ignored_when_counting(counter, content_store, normalizer):
    unfiltered = await counter.count_facets(normalizer.normalize("remote"), content_store.count)
    filtered = await counter.count_facets(
        normalizer.normalize("remote", type_filter="job", category_filter="career-advice"),
        content_store.count,
    )

    assert filtered == unfiltered


async def test_one_single_count_per_facet_without_batching(counter, normalizer):
    calls = []

    async def count_matches(query):
        calls.append(query.type_filter)
        return 0

    await counter.count_facets(normalizer.normalize("x"), count_matches)

    assert calls == [None, "article", "job", "page"]


async def test_batched_count_used_when_available(counter, normalizer):
    batches = []

    async def count_matches(query):
        raise AssertionError("single count must not be called")

    async def count_many(queries):
        batches.append([q.type_filter for q in queries])
        return [6, 3, 2, 1]

    facets = await counter.count_facets(normalizer.normalize("x"), count_matches, count_many)

    assert batches == [[None, "article", "job", "page"]]
    assert [f.count for f in facets] == [6, 3, 2, 1]


async def test_batched_count_length_mismatch_raises(counter, normalizer):
    async def count_many(queries):
        return [1]

    with pytest.raises(ValueError):
        await counter.count_facets(normalizer.normalize("x"), None, count_many)


async def test_category_facets_may_overlap(counter, content_store, normalizer):
    facets = await counter.count_category_facets(normalizer.normalize(""), content_store.count)

    assert [(f.slug, f.label, f.count) for f in facets] == [
        ("career-advice", "Career Advice", 2),
        ("remote-work", "Remote Work", 2),
    ]


async def test_category_facets_can_be_disabled(cache_manager, content_store, normalizer):
    counter = FacetCounter(cache_manager, content_types=CONTENT_TYPES, categories=CATEGORIES,
                           include_categories=False)

    facets, category_facets = await counter.count_all(
        normalizer.normalize(""), "hash", content_store.version, content_store.count
    )

    assert category_facets == []
    assert facets[0].count == 4


async def test_count_all_is_cached_per_store_version(counter, normalizer, fake_redis):
    store = InMemoryContentStore([make_item(1, "job", "Remote role")], CONTENT_TYPES)
    query = normalizer.normalize("remote")
    query_hash = normalizer.generate_search_hash(query)

    first, _ = await counter.count_all(query, query_hash, store.version, store.count)
    store.upsert(make_item(2, "article", "Remote teams"))

    # Same version key: served from cache, so the new item is not counted
    cached, _ = await counter.count_all(query, query_hash, 0, store.count)
    fresh, _ = await counter.count_all(query, query_hash, store.version, store.count)

    assert first[0].count == 1
    assert cached == first
    assert fresh[0].count == 2
    assert any(key.startswith("sitesearch:search:facets:v1:") for key in fake_redis.values)
