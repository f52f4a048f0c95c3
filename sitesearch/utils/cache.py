from typing import Any, Optional
import json
import logging
from datetime import datetime

logger = logging.getLogger(__name__)

# Cache duration constants
MINUTE = 60
HOUR = MINUTE * 60
DAY = HOUR * 24


class CacheEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, (set, frozenset)):
            return sorted(obj)
        return super().default(obj)


class CacheManager:
    """
    JSON cache on top of an async Redis client.

    A missing client (Redis unavailable at startup) turns every operation into
    a miss or no-op, so callers never have to special-case it.
    """

    def __init__(self, redis_client, prefix: str = "cache"):
        self.redis = redis_client
        self.prefix = prefix

    @property
    def enabled(self) -> bool:
        return self.redis is not None

    def _get_key(self, key: str) -> str:
        """Generate prefixed cache key"""
        return f"{self.prefix}:{key}"

    async def get(self, key: str) -> Optional[Any]:
        """Get data from cache"""
        if not self.enabled:
            return None
        try:
            data = await self.redis.get(self._get_key(key))
            return json.loads(data) if data else None
        except Exception as e:
            logger.warning(f"Cache get error for {key}: {e}")
            return None

    async def set(
        self,
        key: str,
        data: Any,
        expire: int = HOUR,  # Default 1 hour
    ) -> bool:
        """Set data in cache with expiration"""
        if not self.enabled:
            return False
        try:
            serialized_data = json.dumps(data, cls=CacheEncoder)
            await self.redis.set(
                self._get_key(key),
                serialized_data,
                ex=expire
            )
            return True
        except Exception as e:
            logger.warning(f"Cache set error for {key}: {e}")
            return False

    async def clear_pattern(self, pattern: str) -> int:
        """Clear all cache entries matching a pattern

        Args:
            pattern: Pattern to match (e.g., "search:facets:*")

        Returns:
            int: Number of keys deleted
        """
        if not self.enabled:
            return 0
        try:
            keys = await self.redis.keys(self._get_key(pattern))
            if keys:
                return await self.redis.delete(*keys)
            return 0
        except Exception as e:
            logger.warning(f"Cache clear_pattern error for {pattern}: {e}")
            return 0

    async def health_check(self) -> bool:
        if not self.enabled:
            return False
        try:
            return bool(await self.redis.ping())
        except Exception as e:
            logger.warning(f"Cache health check failed: {e}")
            return False
