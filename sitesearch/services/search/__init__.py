"""
Search module for site content.
Handles query normalization, faceting, ranking, excerpts, highlighting,
suggestions and search analytics.
"""

from .base import BaseService, SearchCacheManager, SearchValidator, ValidationError
from .content_store import ContentStore, InMemoryContentStore
from .excerpt_extractor import ExcerptExtractor
from .exceptions import SearchError, SearchUnavailable
from .facet_counter import FacetCounter
from .query_normalizer import QueryNormalizer
from .result_highlighter import ResultHighlighter
from .result_ranker import ResultRanker
from .search_engine import SearchEngine
from .search_tracker import (
    InMemorySearchTracker,
    RedisSearchTracker,
    SearchTracker,
    get_search_tracker,
)
from .suggestion_engine import SuggestionEngine

__all__ = [
    'BaseService',
    'SearchCacheManager',
    'SearchValidator',
    'ValidationError',
    'ContentStore',
    'InMemoryContentStore',
    'ExcerptExtractor',
    'SearchError',
    'SearchUnavailable',
    'FacetCounter',
    'QueryNormalizer',
    'ResultHighlighter',
    'ResultRanker',
    'SearchEngine',
    'SearchTracker',
    'RedisSearchTracker',
    'InMemorySearchTracker',
    'get_search_tracker',
    'SuggestionEngine'
]
