"""
Facet counter for site search.
Counts matches per content type and per category for the filter pivots.
"""

from typing import Awaitable, Callable, List, Mapping, Optional, Sequence, Tuple

from .base import BaseService, SearchCacheManager
from ...core.config import settings
from ...models.search import ALL_TYPES, CategoryCount, FacetCount, SearchQuery

CountFunction = Callable[[SearchQuery], Awaitable[int]]
BatchCountFunction = Callable[[Sequence[SearchQuery]], Awaitable[List[int]]]


class FacetCounter(BaseService):
    """
    Service for computing facet counts.

    Facets describe the query as if no type or category filter were applied,
    so users can pivot between them. The ``all`` facet comes first, followed
    by the configured types in configuration order.
    """

    def __init__(self, cache_manager: Optional[SearchCacheManager] = None,
                 content_types: Optional[Sequence[str]] = None,
                 categories: Optional[Mapping[str, str]] = None,
                 include_categories: Optional[bool] = None,
                 cache_ttl: Optional[int] = None):
        """
        Initialize the facet counter.

        Args:
            cache_manager: Cache manager instance
            content_types: Content type slugs in display order
            categories: Category slug -> label mapping in display order
            include_categories: Whether category facets are computed
            cache_ttl: Lifetime of cached facet counts in seconds
        """
        super().__init__(cache_manager)
        self.content_types = list(content_types if content_types is not None else settings.content_types)
        self.categories = dict(categories if categories is not None else settings.categories)
        self.include_categories = (
            settings.category_facets if include_categories is None else include_categories
        )
        self.cache_ttl = cache_ttl or settings.facet_cache_ttl

    def get_service_name(self) -> str:
        """Get the service name."""
        return "facet_counter"

    def build_facet_queries(self, query: SearchQuery) -> Tuple[List[SearchQuery], List[SearchQuery]]:
        """
        Build the per-facet count queries.

        Returns:
            Tuple: ([unfiltered, one per type], [one per category])
        """
        base = query.without_filters().with_page(1)
        type_queries = [base] + [base.with_type(t) for t in self.content_types]
        category_queries = []
        if self.include_categories:
            category_queries = [base.with_category(slug) for slug in self.categories]
        return type_queries, category_queries

    async def count_facets(self, query: SearchQuery, count_matches: CountFunction,
                           count_many: Optional[BatchCountFunction] = None) -> List[FacetCount]:
        """
        Count matches per content type.

        Args:
            query: Normalized query; its type/category filters are ignored
            count_matches: Store-backed single count
            count_many: Optional store-backed batched count

        Returns:
            List[FacetCount]: ``all`` first, then configured types
        """
        type_queries, _ = self.build_facet_queries(query)
        counts = await self._run_counts(type_queries, count_matches, count_many)
        return self._type_facets(counts)

    async def count_category_facets(self, query: SearchQuery, count_matches: CountFunction,
                                    count_many: Optional[BatchCountFunction] = None) -> List[CategoryCount]:
        """
        Count matches per configured category (type filter cleared).

        Returns:
            List[CategoryCount]: Categories in configuration order
        """
        _, category_queries = self.build_facet_queries(query)
        if not category_queries:
            return []
        counts = await self._run_counts(category_queries, count_matches, count_many)
        return self._category_facets(counts)

    async def count_all(self, query: SearchQuery, query_hash: str, content_version: int,
                        count_matches: CountFunction,
                        count_many: Optional[BatchCountFunction] = None
                        ) -> Tuple[List[FacetCount], List[CategoryCount]]:
        """
        Count type and category facets in one go, through the cache.

        Args:
            query: Normalized query
            query_hash: Hash of the full normalized query
            content_version: Store version the counts belong to
            count_matches: Store-backed single count
            count_many: Optional store-backed batched count

        Returns:
            Tuple: (type facets, category facets)
        """
        cache_key = self.cache.facets_key(query_hash, content_version)
        cached = await self._cache_get(cache_key)
        if cached:
            return (
                [FacetCount(**facet) for facet in cached["facets"]],
                [CategoryCount(**facet) for facet in cached["category_facets"]],
            )

        type_queries, category_queries = self.build_facet_queries(query)
        counts = await self._run_counts(type_queries + category_queries, count_matches, count_many)
        facets = self._type_facets(counts[:len(type_queries)])
        category_facets = self._category_facets(counts[len(type_queries):])

        await self._cache_set(cache_key, {
            "facets": [facet.to_dict() for facet in facets],
            "category_facets": [facet.to_dict() for facet in category_facets],
        }, self.cache_ttl)

        return facets, category_facets

    async def _run_counts(self, queries: List[SearchQuery], count_matches: CountFunction,
                          count_many: Optional[BatchCountFunction]) -> List[int]:
        if count_many is not None:
            counts = list(await count_many(queries))
            if len(counts) != len(queries):
                raise ValueError(
                    f"Batched count returned {len(counts)} values for {len(queries)} queries"
                )
        else:
            # One round trip per facet; fine for a handful of types
            counts = [await count_matches(q) for q in queries]
        return [max(0, int(count or 0)) for count in counts]

    def _type_facets(self, counts: List[int]) -> List[FacetCount]:
        facets = [FacetCount(ALL_TYPES, settings.type_label(ALL_TYPES, plural=True), counts[0])]
        for content_type, count in zip(self.content_types, counts[1:]):
            facets.append(FacetCount(content_type, settings.type_label(content_type, plural=True), count))

        type_total = sum(facet.count for facet in facets[1:])
        if type_total != facets[0].count:
            self.logger.warning(
                f"[{self.get_service_name()}] Type facets sum to {type_total} "
                f"but the unfiltered count is {facets[0].count}"
            )
        return facets

    def _category_facets(self, counts: List[int]) -> List[CategoryCount]:
        return [
            CategoryCount(slug, label, count)
            for (slug, label), count in zip(self.categories.items(), counts)
        ]

