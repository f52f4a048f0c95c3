"""
Search engine for site content.
Coordinates normalization, store lookup, faceting, ranking, excerpts,
highlighting and suggestions into one result page.
"""

import asyncio
from typing import Any, Awaitable, Dict, List, Mapping, Optional, TypeVar

from fastapi import BackgroundTasks

from .base import BaseService, SearchCacheManager
from .content_store import ContentStore
from .excerpt_extractor import ExcerptExtractor
from .exceptions import SearchUnavailable
from .facet_counter import FacetCounter
from .query_normalizer import QueryNormalizer
from .result_highlighter import ResultHighlighter
from .result_ranker import ResultRanker
from .search_tracker import InMemorySearchTracker, SearchTracker
from .suggestion_engine import MAX_TITLE_SUGGESTIONS, SuggestionEngine
from ...core.config import settings
from ...models.content import ContentItem
from ...models.search import RenderedResult, SearchQuery, SearchResultPage

T = TypeVar("T")


class SearchEngine(BaseService):
    """
    Main search engine for site content.

    A request either yields a complete SearchResultPage or raises: store
    failures and timeouts become SearchUnavailable, and a set cancel event
    raises asyncio.CancelledError. There is no retry and no partial page.
    """

    def __init__(self, content_store: ContentStore,
                 cache_manager: Optional[SearchCacheManager] = None,
                 tracker: Optional[SearchTracker] = None,
                 query_normalizer: Optional[QueryNormalizer] = None,
                 facet_counter: Optional[FacetCounter] = None,
                 result_ranker: Optional[ResultRanker] = None,
                 excerpt_extractor: Optional[ExcerptExtractor] = None,
                 result_highlighter: Optional[ResultHighlighter] = None,
                 suggestion_engine: Optional[SuggestionEngine] = None,
                 store_timeout: Optional[float] = None):
        """
        Initialize the search engine.

        Args:
            content_store: Store answering search and count queries
            cache_manager: Cache manager instance
            tracker: Search analytics backend
            query_normalizer: Query normalizer instance
            facet_counter: Facet counter instance
            result_ranker: Result ranker instance
            excerpt_extractor: Excerpt extractor instance
            result_highlighter: Result highlighter instance
            suggestion_engine: Suggestion engine instance
            store_timeout: Seconds allowed for each store call
        """
        super().__init__(cache_manager)
        self.store = content_store
        self.tracker = tracker or InMemorySearchTracker()
        self.query_normalizer = query_normalizer or QueryNormalizer(self.cache)
        self.facet_counter = facet_counter or FacetCounter(self.cache)
        self.result_ranker = result_ranker or ResultRanker(self.cache)
        self.excerpt_extractor = excerpt_extractor or ExcerptExtractor(self.cache)
        self.result_highlighter = result_highlighter or ResultHighlighter(self.cache)
        self.suggestion_engine = suggestion_engine or SuggestionEngine(self.cache)
        self.store_timeout = store_timeout or settings.store_timeout

    def get_service_name(self) -> str:
        """Get the service name."""
        return "search_engine"

    async def search(self, params: Optional[Mapping[str, Any]] = None,
                     cancel_event: Optional[asyncio.Event] = None,
                     background_tasks: Optional[BackgroundTasks] = None,
                     track: bool = True) -> SearchResultPage:
        """
        Run a search request.

        Args:
            params: Raw request parameters (``q``, ``type``, ``category``,
                ``sort``, ``page``); any may be missing or malformed
            cancel_event: Set by the caller to abandon the request
            background_tasks: Optional background tasks for analytics
            track: Whether the search is recorded for analytics

        Returns:
            SearchResultPage: The requested page with facets and, when
            nothing matched, suggestions

        Raises:
            SearchUnavailable: If the content store fails or times out
            asyncio.CancelledError: If cancel_event is set mid-request
        """
        query = self.query_normalizer.normalize_params(params or {})
        self.logger.info(
            f"[{self.get_service_name()}] Searching q={query.raw_text!r} "
            f"type={query.type_filter} category={query.category_filter} "
            f"sort={query.sort_key} page={query.page}"
        )

        self._check_cancelled(cancel_event)
        matches, _ = await self._call_store(self.store.search(query), "search")

        query_hash = self.query_normalizer.generate_search_hash(query)
        self._check_cancelled(cancel_event)
        facets, category_facets = await self._call_store(
            self.facet_counter.count_all(
                query,
                query_hash,
                self.store.version,
                self.store.count,
                self.store.count_many if self.store.supports_batch_count else None,
            ),
            "facet counting",
        )

        page_items, total = self.result_ranker.rank(matches, query)
        results = []
        for item in page_items:
            self._check_cancelled(cancel_event)
            results.append(self.render_result(item, query))

        suggestions = self.suggestion_engine.suggest(query) if total == 0 else None

        if track and query.raw_text:
            await self._track(query, total, background_tasks)

        return SearchResultPage(
            query=query,
            items=tuple(results),
            total=total,
            page=query.page,
            page_size=query.page_size,
            facets=tuple(facets),
            category_facets=tuple(category_facets),
            suggestions=suggestions,
        )

    def render_result(self, item: ContentItem, query: SearchQuery) -> RenderedResult:
        """
        Build the display form of one matching item.

        Excerpts are cut from raw text first and highlighted afterwards, so
        markers never end up inside a cut.
        """
        excerpt = self.excerpt_extractor.extract(item, query.terms)
        return RenderedResult(
            item=item,
            highlighted_title=self.result_highlighter.highlight_text(item.title, query.terms),
            highlighted_excerpt=self.result_highlighter.highlight_text(excerpt, query.terms),
            type_label=settings.type_label(item.type),
        )

    async def autocomplete(self, text: Any) -> List[Dict]:
        """
        Get live-search suggestions for a partial query.

        Args:
            text: Raw partial query

        Returns:
            List[Dict]: Suggestions, empty when the text is too short

        Raises:
            SearchUnavailable: If the content store fails or times out
        """
        partial = self.validator.validate_search_text(text)
        if len(partial) < self.suggestion_engine.min_chars:
            return []

        title_matches = await self._call_store(
            self.store.title_matches(partial, MAX_TITLE_SUGGESTIONS), "title suggestions"
        )
        try:
            popular = await self.tracker.popular(100)
            return self.suggestion_engine.autocomplete(partial, title_matches, popular)
        except Exception as e:
            self._handle_service_error(e, f"Error building suggestions for {partial!r}")

    async def popular_searches(self, limit: int = 10) -> List[Dict]:
        """
        Get the most searched terms.

        Args:
            limit: Maximum number of terms

        Returns:
            List[Dict]: ``{"query", "count"}`` entries, most popular first
        """
        try:
            popular = await self.tracker.popular(limit)
            return [{"query": term, "count": count} for term, count in popular]
        except Exception as e:
            self._handle_service_error(e, "Error getting popular searches")

    async def record_interaction(self, query: Any, action: Any = "click") -> bool:
        """
        Record a click or view on a search result.

        Returns:
            bool: False when there was no query to record
        """
        text = self.validator.validate_search_text(query)
        if not text:
            return False
        action = self.validator.validate_search_text(action) or "click"
        await self.tracker.record(text, action, 0)
        return True

    async def invalidate_cache(self) -> int:
        """Drop cached facet counts, e.g. after a bulk content change."""
        return await self.cache.clear_search_cache()

    async def health_check(self) -> dict:
        health = await super().health_check()
        health["content_version"] = self.store.version
        return health

    async def _call_store(self, call: Awaitable[T], context: str) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self.store_timeout)
        except asyncio.TimeoutError as e:
            self.logger.error(
                f"[{self.get_service_name()}] Content store timed out after {self.store_timeout}s during {context}"
            )
            raise SearchUnavailable(f"Content store timed out during {context}") from e
        except SearchUnavailable:
            raise
        except Exception as e:
            self.logger.error(f"[{self.get_service_name()}] Content store failed during {context}: {str(e)}")
            raise SearchUnavailable(f"Content store failed during {context}: {e}") from e

    async def _track(self, query: SearchQuery, total: int,
                     background_tasks: Optional[BackgroundTasks]) -> None:
        content_type = query.type_filter or "all"
        if background_tasks is not None:
            background_tasks.add_task(self.tracker.record, query.raw_text, content_type, total)
        else:
            await self.tracker.record(query.raw_text, content_type, total)

    @staticmethod
    def _check_cancelled(cancel_event: Optional[asyncio.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise asyncio.CancelledError()
