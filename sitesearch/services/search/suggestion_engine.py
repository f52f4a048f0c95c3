"""
Suggestion engine for site search.
Handles the zero-result fallback payload and live-search autocomplete.
"""

from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
from urllib.parse import urlencode

from .base import BaseService, SearchCacheManager
from ...core.config import settings
from ...models.content import ContentItem
from ...models.search import CategoryShortcut, SearchQuery, Suggestions

SEARCH_TIPS = (
    "Check your spelling and try again",
    "Try different or more general keywords",
    "Use fewer keywords for broader results",
    "Try searching without filters",
)

# Autocomplete section sizes
MAX_TITLE_SUGGESTIONS = 5
MAX_CATEGORY_SUGGESTIONS = 3
MAX_POPULAR_SUGGESTIONS = 3
MAX_SUGGESTIONS = 10


class SuggestionEngine(BaseService):
    """
    Service for search suggestions.

    The zero-result payload depends only on configuration; it never looks at
    the content store. Autocomplete merges candidates the caller gathered.
    """

    def __init__(self, cache_manager: Optional[SearchCacheManager] = None,
                 alternative_queries: Optional[Sequence[str]] = None,
                 categories: Optional[Mapping[str, str]] = None,
                 base_path: Optional[str] = None,
                 suggest_filter_removal: Optional[bool] = None,
                 min_chars: Optional[int] = None):
        """
        Initialize the suggestion engine.

        Args:
            cache_manager: Cache manager instance
            alternative_queries: Queries offered when nothing matched
            categories: Category slug -> label mapping for browse shortcuts
            base_path: Search page path used to build shortcut links
            suggest_filter_removal: Offer the failed text without its filters first
            min_chars: Shortest partial query that gets autocomplete suggestions
        """
        super().__init__(cache_manager)
        self.alternative_queries = list(
            alternative_queries if alternative_queries is not None else settings.alternative_queries
        )
        self.categories = dict(categories if categories is not None else settings.categories)
        self.base_path = base_path or settings.search_base_path
        self.suggest_filter_removal = (
            settings.suggest_filter_removal if suggest_filter_removal is None else suggest_filter_removal
        )
        self.min_chars = settings.min_search_chars if min_chars is None else min_chars

    def get_service_name(self) -> str:
        """Get the service name."""
        return "suggestion_engine"

    def suggest(self, query: SearchQuery) -> Suggestions:
        """
        Build the fallback payload for a query with no results.

        Args:
            query: The normalized query that matched nothing

        Returns:
            Suggestions: Alternative queries, category shortcuts and tips
        """
        alternatives = list(self.alternative_queries)
        if self.suggest_filter_removal and query.has_filters and query.raw_text:
            alternatives = [query.raw_text] + [
                q for q in alternatives if q.lower() != query.raw_text.lower()
            ]

        return Suggestions(
            alternative_queries=tuple(alternatives),
            category_shortcuts=self.category_shortcuts(),
            tips=SEARCH_TIPS,
            filters_applied=query.has_filters,
        )

    def category_shortcuts(self) -> Tuple[CategoryShortcut, ...]:
        return tuple(
            CategoryShortcut(label=label, slug=slug, url=self.category_url(slug))
            for slug, label in self.categories.items()
        )

    def category_url(self, slug: str) -> str:
        return f"{self.base_path}?{urlencode({'category': slug})}"

    def autocomplete(self, text: str, title_matches: Iterable[ContentItem],
                     popular: Iterable[Tuple[str, int]]) -> List[Dict]:
        """
        Merge autocomplete candidates for a partial query.

        Args:
            text: Sanitized partial query
            title_matches: Items whose title contains the text
            popular: (search term, count) pairs, most popular first

        Returns:
            List[Dict]: At most ten suggestions: titles, then categories,
            then popular searches, without repeated text
        """
        text = (text or "").strip()
        if len(text) < self.min_chars:
            return []
        needle = text.lower()

        titles = sorted(
            (item for item in title_matches if needle in item.title.lower()),
            key=lambda item: item.title.casefold(),
        )[:MAX_TITLE_SUGGESTIONS]
        candidates = [
            {"text": item.title, "type": "post", "post_type": item.type, "id": item.id}
            for item in titles
        ]

        matching_categories = [
            (slug, label) for slug, label in self.categories.items() if needle in label.lower()
        ][:MAX_CATEGORY_SUGGESTIONS]
        candidates.extend(
            {"text": label, "type": "taxonomy", "slug": slug, "url": self.category_url(slug)}
            for slug, label in matching_categories
        )

        popular_matches = sorted(
            ((term, count) for term, count in popular if needle in term.lower()),
            key=lambda pair: pair[1],
            reverse=True,
        )[:MAX_POPULAR_SUGGESTIONS]
        candidates.extend(
            {"text": term, "type": "popular", "count": count} for term, count in popular_matches
        )

        suggestions = []
        seen = set()
        for candidate in candidates:
            key = candidate["text"].lower()
            if key in seen:
                continue
            seen.add(key)
            suggestions.append(candidate)

        return suggestions[:MAX_SUGGESTIONS]
