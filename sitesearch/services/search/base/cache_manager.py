"""
Cache manager for search services.
Extends the base cache manager with search-specific key layout.
"""

import logging

from ....utils.cache import CacheManager

logger = logging.getLogger(__name__)

# Search-specific cache key prefixes
CACHE_KEY_FACETS_PREFIX = "search:facets:"
CACHE_KEY_SEARCH_PREFIX = "search:"


class SearchCacheManager(CacheManager):
    """
    Cache manager for search services.

    Facet entries are keyed on the full normalized query hash plus the
    content store version, so a content mutation makes stale entries
    unreachable even before they are cleared.
    """

    def __init__(self, redis_client, prefix: str = "sitesearch"):
        super().__init__(redis_client, prefix)
        self.logger = logger

    @staticmethod
    def facets_key(query_hash: str, content_version: int) -> str:
        return f"{CACHE_KEY_FACETS_PREFIX}v{content_version}:{query_hash}"

    async def clear_search_cache(self) -> int:
        """Drop every cached search entry."""
        count = await self.clear_pattern(f"{CACHE_KEY_SEARCH_PREFIX}*")
        self.logger.info(f"Cleared {count} search cache entries")
        return count
