"""
Search analytics for site search.
Records performed searches and keeps the popular-search counter used by
autocomplete and the popular searches endpoint.
"""

import json
import logging
import time
from abc import ABC, abstractmethod
from collections import Counter, deque
from typing import Dict, List, Optional, Tuple

from redis.asyncio import Redis

from ...core.config import settings

logger = logging.getLogger(__name__)

# Only the most searched terms are kept
POPULAR_LIMIT = 100
# Recent searches older than this are not reported
RECENT_MAX_AGE = 30 * 24 * 60 * 60

POPULAR_KEY = "sitesearch:analytics:popular"
RECENT_KEY = "sitesearch:analytics:recent"


def normalize_term(query: str) -> str:
    return " ".join((query or "").lower().split())


class SearchTracker(ABC):
    """Records searches and reports popular and recent ones."""

    @abstractmethod
    async def record(self, query: str, content_type: str = "all", results: int = 0) -> None:
        pass

    @abstractmethod
    async def popular(self, limit: int = 10) -> List[Tuple[str, int]]:
        """
        Get the most searched terms.

        Returns:
            List[Tuple[str, int]]: (term, count) pairs, most popular first
        """
        pass

    @abstractmethod
    async def recent(self, limit: int = 20) -> List[Dict]:
        pass

    def _entry(self, query: str, content_type: str, results: int) -> Dict:
        return {
            "query": query,
            "type": content_type,
            "results": results,
            "timestamp": int(time.time()),
        }


class RedisSearchTracker(SearchTracker):
    """
    Search tracker backed by Redis.
    Popularity lives in a sorted set, recent searches in a capped list.
    """

    def __init__(self, redis_client: Redis, recent_limit: Optional[int] = None):
        self.redis = redis_client
        self.recent_limit = recent_limit or settings.recent_limit
        logger.info("Search tracker initialized with Redis backend")

    async def record(self, query: str, content_type: str = "all", results: int = 0) -> None:
        term = normalize_term(query)
        if not term:
            return
        try:
            await self.redis.zincrby(POPULAR_KEY, 1, term)
            # Drop everything below the top POPULAR_LIMIT
            await self.redis.zremrangebyrank(POPULAR_KEY, 0, -(POPULAR_LIMIT + 1))
            await self.redis.lpush(RECENT_KEY, json.dumps(self._entry(term, content_type, results)))
            await self.redis.ltrim(RECENT_KEY, 0, self.recent_limit - 1)
        except Exception as e:
            # Analytics never fail a search
            logger.error(f"Redis search tracking error: {str(e)}")

    async def popular(self, limit: int = 10) -> List[Tuple[str, int]]:
        if limit < 1:
            return []
        try:
            entries = await self.redis.zrevrange(POPULAR_KEY, 0, limit - 1, withscores=True)
        except Exception as e:
            logger.error(f"Redis popular searches error: {str(e)}")
            return []
        return [(_decode(term), int(score)) for term, score in entries]

    async def recent(self, limit: int = 20) -> List[Dict]:
        if limit < 1:
            return []
        try:
            entries = await self.redis.lrange(RECENT_KEY, 0, limit - 1)
        except Exception as e:
            logger.error(f"Redis recent searches error: {str(e)}")
            return []
        cutoff = int(time.time()) - RECENT_MAX_AGE
        recent = [json.loads(_decode(entry)) for entry in entries]
        return [entry for entry in recent if entry.get("timestamp", 0) >= cutoff]


class InMemorySearchTracker(SearchTracker):
    """Search tracker for a single process, used when Redis is unavailable."""

    def __init__(self, recent_limit: Optional[int] = None):
        self.counts: Counter = Counter()
        self.history: deque = deque(maxlen=recent_limit or settings.recent_limit)
        logger.info("Search tracker initialized with in-memory backend")

    async def record(self, query: str, content_type: str = "all", results: int = 0) -> None:
        term = normalize_term(query)
        if not term:
            return
        self.counts[term] += 1
        if len(self.counts) > POPULAR_LIMIT:
            self.counts = Counter(dict(self.counts.most_common(POPULAR_LIMIT)))
        self.history.appendleft(self._entry(term, content_type, results))

    async def popular(self, limit: int = 10) -> List[Tuple[str, int]]:
        if limit < 1:
            return []
        return self.counts.most_common(limit)

    async def recent(self, limit: int = 20) -> List[Dict]:
        cutoff = int(time.time()) - RECENT_MAX_AGE
        return [entry for entry in self.history if entry["timestamp"] >= cutoff][:max(limit, 0)]


def _decode(value) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else value


def get_search_tracker(redis_client: Optional[Redis] = None) -> SearchTracker:
    """
    Get a search tracker for the available backend.

    Args:
        redis_client: Connected Redis client, or None when Redis is down

    Returns:
        SearchTracker: Redis-backed tracker if possible, in-memory otherwise
    """
    if redis_client is not None:
        return RedisSearchTracker(redis_client)
    return InMemorySearchTracker()
