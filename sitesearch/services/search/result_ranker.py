"""
Result ranker for site search.
Handles sorting of the full match set and slicing out the requested page.
"""

from typing import List, Sequence, Tuple

from .base import BaseService
from ...models.content import ContentItem, ItemId
from ...models.search import (
    SORT_DATE_ASC,
    SORT_DATE_DESC,
    SORT_RELEVANCE,
    SORT_TITLE_ASC,
    SearchQuery,
)


def _id_key(item_id: ItemId) -> Tuple[int, object]:
    # Numeric ids order numerically and before string ids
    if isinstance(item_id, int) and not isinstance(item_id, bool):
        return (0, item_id)
    return (1, str(item_id))


class ResultRanker(BaseService):
    """
    Service for ordering and paginating search results.
    Every ordering except relevance is total, with ties broken by item id.
    """

    def get_service_name(self) -> str:
        """Get the service name."""
        return "result_ranker"

    def sort_items(self, items: Sequence[ContentItem], sort_key: str) -> List[ContentItem]:
        """
        Sort matches by the given key.

        Args:
            items: Matches in store relevance order
            sort_key: Effective sort key

        Returns:
            List[ContentItem]: Sorted copy of the matches
        """
        if sort_key == SORT_RELEVANCE:
            return list(items)

        by_id = sorted(items, key=lambda item: _id_key(item.id))
        if sort_key == SORT_DATE_DESC:
            # Stable sort keeps id order among equal timestamps
            return sorted(by_id, key=lambda item: item.published_at, reverse=True)
        if sort_key == SORT_DATE_ASC:
            return sorted(by_id, key=lambda item: item.published_at)
        if sort_key == SORT_TITLE_ASC:
            return sorted(by_id, key=lambda item: item.title.casefold())

        self.logger.warning(f"[{self.get_service_name()}] Unknown sort key {sort_key!r}, keeping store order")
        return list(items)

    def paginate(self, items: Sequence[ContentItem], page: int, page_size: int) -> List[ContentItem]:
        """
        Slice one page out of sorted matches.

        Args:
            items: Sorted matches
            page: 1-based page number
            page_size: Items per page

        Returns:
            List[ContentItem]: The page; empty when past the end
        """
        start = (page - 1) * page_size
        if start >= len(items):
            return []
        return list(items[start:start + page_size])

    def rank(self, items: Sequence[ContentItem], query: SearchQuery) -> Tuple[List[ContentItem], int]:
        """
        Sort and paginate matches for a query.

        Args:
            items: All matches in store relevance order
            query: Normalized query

        Returns:
            Tuple[List[ContentItem], int]: (page items, total before pagination)
        """
        ordered = self.sort_items(items, query.effective_sort_key)
        return self.paginate(ordered, query.page, query.page_size), len(ordered)
