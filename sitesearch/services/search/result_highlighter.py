"""
Result highlighter for site search.
Handles highlighting of search terms in titles and excerpts.
"""

import re
from typing import Iterable, List, Optional, Pattern

from .base import BaseService, SearchCacheManager
from ...core.config import settings
from ...models.search import MIN_HIGHLIGHT_TERM_LENGTH


class ResultHighlighter(BaseService):
    """
    Service for highlighting search terms in result text.

    Terms are literal text: they are escaped before a pattern is built, so
    input such as ``.*`` only ever matches itself. All terms are matched in
    a single left-to-right pass, which keeps overlapping terms from being
    wrapped twice.
    """

    def __init__(self, cache_manager: Optional[SearchCacheManager] = None,
                 open_tag: Optional[str] = None, close_tag: Optional[str] = None,
                 enabled: Optional[bool] = None):
        """
        Initialize the result highlighter.

        Args:
            cache_manager: Cache manager instance
            open_tag: Marker inserted before a match (default ``<mark>``)
            close_tag: Marker inserted after a match (default ``</mark>``)
            enabled: Whether highlighting is applied at all
        """
        super().__init__(cache_manager)
        self.open_tag = open_tag if open_tag is not None else settings.highlight_open
        self.close_tag = close_tag if close_tag is not None else settings.highlight_close
        self.enabled = settings.highlighting if enabled is None else enabled

    def get_service_name(self) -> str:
        """Get the service name."""
        return "result_highlighter"

    def highlight_text(self, text: str, terms: Iterable[str]) -> str:
        """
        Highlight search terms in text.

        Args:
            text: Raw, not yet highlighted text
            terms: Query terms; terms shorter than three characters are skipped

        Returns:
            str: Text with every case-insensitive occurrence wrapped
        """
        if not text or not self.enabled:
            return text or ""

        pattern = self._build_pattern(terms)
        if pattern is None:
            return text

        return pattern.sub(
            lambda match: f"{self.open_tag}{match.group(0)}{self.close_tag}", text
        )

    def _extract_highlight_terms(self, terms: Iterable[str]) -> List[str]:
        """
        Filter and order terms for highlighting.

        Args:
            terms: Query terms

        Returns:
            List[str]: Unique terms, longest first
        """
        unique = []
        for term in terms:
            if not term or len(term) < MIN_HIGHLIGHT_TERM_LENGTH:
                continue
            if term.lower() not in (t.lower() for t in unique):
                unique.append(term)

        # Longest first so the alternation prefers "remote" over "rem"
        unique.sort(key=len, reverse=True)
        return unique

    def _build_pattern(self, terms: Iterable[str]) -> Optional[Pattern]:
        highlight_terms = self._extract_highlight_terms(terms)
        if not highlight_terms:
            return None
        alternation = "|".join(re.escape(term) for term in highlight_terms)
        return re.compile(alternation, re.IGNORECASE)
