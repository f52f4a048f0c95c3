"""
Excerpt extractor for site search.
Cuts a bounded snippet of an item's body around the first term match.
"""

import re
from typing import Iterable, Optional, Tuple

from .base import BaseService, SearchCacheManager
from .base.validators import strip_markup
from ...core.config import settings
from ...models.content import ContentItem
from ...models.search import MIN_HIGHLIGHT_TERM_LENGTH


class ExcerptExtractor(BaseService):
    """
    Service for extracting result excerpts.

    The window starts ``lead`` characters before the earliest match and
    spans ``max_length`` characters, pulled in to word boundaries. Ellipsis
    markers are added on the sides where text was cut, so an excerpt is never
    longer than ``max_length`` plus two markers.
    """

    def __init__(self, cache_manager: Optional[SearchCacheManager] = None,
                 max_length: Optional[int] = None, lead: Optional[int] = None,
                 ellipsis: Optional[str] = None):
        """
        Initialize the excerpt extractor.

        Args:
            cache_manager: Cache manager instance
            max_length: Maximum excerpt length, markers excluded (default 250)
            lead: Characters kept before the match (default 100)
            ellipsis: Marker for cut text (default ``...``)
        """
        super().__init__(cache_manager)
        self.max_length = max_length or settings.excerpt_length
        self.lead = settings.excerpt_lead if lead is None else lead
        self.ellipsis = settings.ellipsis if ellipsis is None else ellipsis

    def get_service_name(self) -> str:
        """Get the service name."""
        return "excerpt_extractor"

    def extract(self, item: ContentItem, terms: Iterable[str]) -> str:
        """
        Extract the excerpt for one item.

        Args:
            item: Matching content item
            terms: Query terms

        Returns:
            str: Plain-text excerpt, not yet highlighted
        """
        scan_terms = [t for t in terms if t and len(t) >= MIN_HIGHLIGHT_TERM_LENGTH]
        override = item.excerpt_override or ""

        if override and not scan_terms:
            return self.truncate(override)

        body = strip_markup(item.body)
        match = self._find_first_match(body, scan_terms)
        if match is not None:
            position, length = match
            return self._window(body, position, length)

        # No term in the body: the author's excerpt beats the opening lines
        if override:
            return self.truncate(override)
        return self.truncate(body)

    def truncate(self, text: str) -> str:
        """
        Cut text to the maximum length at a word boundary.

        Args:
            text: Text to shorten

        Returns:
            str: Text, with a trailing ellipsis if anything was dropped
        """
        if len(text) <= self.max_length:
            return text

        cut = text[:self.max_length]
        if not text[self.max_length].isspace():
            boundary = cut.rfind(" ")
            if boundary > 0:
                cut = cut[:boundary]
        return cut.rstrip() + self.ellipsis

    def _find_first_match(self, body: str, terms: Iterable[str]) -> Optional[Tuple[int, int]]:
        """
        Locate the earliest occurrence of any term.

        Matching runs on the original text case-insensitively, so offsets stay
        valid even where lower-casing would change string length.

        Returns:
            Optional[Tuple[int, int]]: (offset, match length) or None
        """
        terms = sorted(set(terms), key=len, reverse=True)
        if not body or not terms:
            return None
        pattern = re.compile("|".join(re.escape(term) for term in terms), re.IGNORECASE)
        match = pattern.search(body)
        if match is None:
            return None
        return match.start(), match.end() - match.start()

    def _window(self, body: str, position: int, match_length: int) -> str:
        start = max(0, position - self.lead)
        end = min(len(body), start + self.max_length)

        # Start mid-word: move to the next word, never past the match
        if start > 0 and not body[start - 1].isspace():
            boundary = body.find(" ", start, position)
            if boundary != -1:
                start = boundary + 1

        # End mid-word: fall back to the previous word, keeping the match
        if end < len(body) and not body[end].isspace():
            boundary = body.rfind(" ", min(position + match_length, end), end)
            if boundary != -1:
                end = boundary

        excerpt = body[start:end].strip()
        if start > 0:
            excerpt = self.ellipsis + excerpt
        if end < len(body):
            excerpt = excerpt + self.ellipsis
        return excerpt
