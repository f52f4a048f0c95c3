"""
Base service class for search services.
Provides common functionality and infrastructure.
"""

import logging
from typing import Optional
from abc import ABC, abstractmethod

from .cache_manager import SearchCacheManager
from .validators import SearchValidator
from ....core.config import settings

logger = logging.getLogger(__name__)


class BaseService(ABC):
    """
    Base class for all search services.
    Provides common functionality for caching, validation and error logging.
    """

    def __init__(self, cache_manager: Optional[SearchCacheManager] = None,
                 validator: Optional[SearchValidator] = None):
        """
        Initialize the base service.

        Args:
            cache_manager: Optional SearchCacheManager; without one caching is off
            validator: Optional validator instance
        """
        self.cache = cache_manager or SearchCacheManager(None)
        self.validator = validator or SearchValidator(
            settings.content_types, settings.categories, settings.max_page
        )
        self.logger = logger

    @abstractmethod
    def get_service_name(self) -> str:
        """
        Get the service name for logging and caching.

        Returns:
            str: The service name
        """
        pass

    async def _cache_get(self, cache_key: str) -> Optional[dict]:
        """
        Get data from cache with error handling.

        Args:
            cache_key: The cache key to retrieve

        Returns:
            Optional[dict]: Cached data or None if not found
        """
        try:
            cached_data = await self.cache.get(cache_key)
            if cached_data:
                self.logger.info(f"[{self.get_service_name()}] Cache hit for key: {cache_key}")
                return cached_data
            return None
        except Exception as e:
            self.logger.error(f"[{self.get_service_name()}] Cache get error for key {cache_key}: {str(e)}")
            return None

    async def _cache_set(self, cache_key: str, data: dict, expire: int):
        """
        Set data in cache with error handling.

        Args:
            cache_key: The cache key
            data: The data to cache
            expire: Expiration time in seconds
        """
        try:
            if await self.cache.set(cache_key, data, expire):
                self.logger.info(f"[{self.get_service_name()}] Data cached with key: {cache_key}")
        except Exception as e:
            self.logger.error(f"[{self.get_service_name()}] Cache set error for key {cache_key}: {str(e)}")

    def _handle_service_error(self, error: Exception, context: str = ""):
        """
        Handle service errors with proper logging.

        Args:
            error: The exception that occurred
            context: Context information about the error
        """
        error_msg = f"[{self.get_service_name()}] {context}: {str(error)}"
        self.logger.error(error_msg)

        # Re-raise the error for upstream handling
        raise error

    async def health_check(self) -> dict:
        """
        Perform health check for the service.

        Returns:
            dict: Health check results
        """
        cache_healthy = await self.cache.health_check()
        return {
            "service": self.get_service_name(),
            "healthy": True,
            "cache_enabled": self.cache.enabled,
            "cache_healthy": cache_healthy,
        }
