"""
Pytest configuration and shared fixtures for the search tests.
"""

import fnmatch
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from sitesearch.models.content import ContentItem
from sitesearch.services.search import (
    InMemoryContentStore,
    InMemorySearchTracker,
    SearchCacheManager,
    SearchEngine,
)

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)

CONTENT_TYPES = ["article", "job", "page"]


class FakeRedis:
    """In-process stand-in for the subset of redis.asyncio the app uses."""

    def __init__(self):
        self.values = {}
        self.sorted_sets = {}
        self.lists = {}
        self.fail = False

    def _check(self):
        if self.fail:
            raise ConnectionError("Redis is down")

    async def ping(self):
        self._check()
        return True

    async def get(self, key):
        self._check()
        return self.values.get(key)

    async def set(self, key, value, ex=None):
        self._check()
        self.values[key] = value
        return True

    async def delete(self, *keys):
        self._check()
        removed = 0
        for key in keys:
            for store in (self.values, self.sorted_sets, self.lists):
                if key in store:
                    del store[key]
                    removed += 1
        return removed

    async def exists(self, key):
        self._check()
        return int(key in self.values)

    async def keys(self, pattern):
        self._check()
        return [key for key in self.values if fnmatch.fnmatch(key, pattern)]

    async def zincrby(self, key, amount, member):
        self._check()
        scores = self.sorted_sets.setdefault(key, {})
        scores[member] = scores.get(member, 0) + amount
        return scores[member]

    def _ranked(self, key):
        return sorted(self.sorted_sets.get(key, {}).items(), key=lambda pair: (pair[1], pair[0]))

    async def zremrangebyrank(self, key, start, stop):
        self._check()
        ranked = self._ranked(key)
        size = len(ranked)
        start = start + size if start < 0 else start
        stop = stop + size if stop < 0 else stop
        doomed = ranked[max(start, 0):stop + 1] if stop >= 0 else []
        for member, _ in doomed:
            del self.sorted_sets[key][member]
        return len(doomed)

    async def zrevrange(self, key, start, stop, withscores=False):
        self._check()
        ranked = list(reversed(self._ranked(key)))
        selected = ranked[start:stop + 1]
        if withscores:
            return [(member, float(score)) for member, score in selected]
        return [member for member, _ in selected]

    async def lpush(self, key, *values):
        self._check()
        items = self.lists.setdefault(key, [])
        for value in values:
            items.insert(0, value)
        return len(items)

    async def ltrim(self, key, start, stop):
        self._check()
        self.lists[key] = self.lists.get(key, [])[start:stop + 1]
        return True

    async def lrange(self, key, start, stop):
        self._check()
        return self.lists.get(key, [])[start:stop + 1]


def make_item(item_id, content_type="article", title="Untitled", body="",
              days=0, **kwargs):
    """Build a content item published ``days`` after the base time."""
    published_at = BASE_TIME + timedelta(days=days)
    return ContentItem(
        id=item_id,
        type=content_type,
        title=title,
        body=body,
        published_at=published_at,
        modified_at=kwargs.pop("modified_at", published_at),
        **kwargs,
    )


@pytest.fixture
def item_factory():
    return make_item


@pytest.fixture
def sample_items():
    return [
        make_item(1, "job", "Remote Software Engineer",
                  "Join our platform team. We offer remote jobs across the globe with flexible hours.",
                  days=10, categories={"Remote Work"}),
        make_item(2, "article", "Career Tips",
                  "How to prepare for your next interview and negotiate an offer.",
                  days=5, categories={"Career Advice"}),
        make_item(3, "article", "Working Remote: A Guide",
                  "Remote teams need clear written communication.",
                  days=3, categories={"Remote Work", "Career Advice"}),
        make_item(4, "page", "About Us",
                  "We are a recruitment agency founded in 2012.", days=1),
    ]


@pytest.fixture
def content_store(sample_items):
    return InMemoryContentStore(sample_items, CONTENT_TYPES)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def cache_manager(fake_redis):
    return SearchCacheManager(fake_redis)


@pytest.fixture
def tracker():
    return InMemorySearchTracker()


@pytest.fixture
def search_engine(content_store, tracker):
    return SearchEngine(content_store, tracker=tracker)


@pytest.fixture
def client(search_engine, content_store):
    """FastAPI test client wired to the sample search engine, without Redis."""
    from main import app
    from sitesearch.routers.search_routes import get_search_engine

    app.state.redis = None
    app.state.content_store = content_store
    app.state.search_engine = search_engine
    app.dependency_overrides[get_search_engine] = lambda: search_engine
    yield TestClient(app)
    app.dependency_overrides.clear()
