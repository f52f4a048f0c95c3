"""
Validators for search service inputs.
Request parameters are coerced to the nearest valid value instead of rejected;
only data coming from a content source can fail validation.
"""

import re
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ....models.search import SORT_KEYS, SORT_RELEVANCE

logger = logging.getLogger(__name__)

TAG_PATTERN = re.compile(r"<[^>]*>")
# Tags that break text flow; removing them must not glue words together
BLOCK_TAG_PATTERN = re.compile(
    r"</?(?:p|div|br|hr|li|ul|ol|dl|dt|dd|h[1-6]|table|tr|td|th|section|article|blockquote|pre|header|footer)\b[^>]*>",
    re.IGNORECASE,
)
WHITESPACE_PATTERN = re.compile(r"\s+")
SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


class ValidationError(Exception):
    """Custom exception for validation errors."""
    pass


def strip_markup(text: str) -> str:
    """Remove tags and collapse whitespace runs to single spaces.

    Block-level tags become a space, inline tags vanish without a trace.
    """
    if not text:
        return ""
    text = BLOCK_TAG_PATTERN.sub(" ", text)
    text = TAG_PATTERN.sub("", text)
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def slugify(label: str) -> str:
    return SLUG_PATTERN.sub("-", label.lower()).strip("-")


class SearchValidator:
    """
    Validator class for search service inputs.
    Provides coercion methods for every raw request parameter.
    """

    def __init__(self, content_types: Iterable[str], categories: Mapping[str, str],
                 max_page: int = 1000):
        """
        Args:
            content_types: Configured content type slugs
            categories: Configured category slug -> label mapping
            max_page: Largest page number honoured
        """
        self.content_types = [t.lower() for t in content_types]
        self.categories = dict(categories)
        self._category_by_label = {slugify(label): slug for slug, label in self.categories.items()}
        self.max_page = max_page
        self.logger = logger

    def validate_required_fields(self, data: Dict, required_fields: List[str]) -> bool:
        """
        Validate that all required fields are present in the data.

        Raises:
            ValidationError: If any required field is missing
        """
        missing_fields = [f for f in required_fields if data.get(f) in (None, "")]

        if missing_fields:
            error_msg = f"Missing required fields: {', '.join(missing_fields)}"
            self.logger.error(error_msg)
            raise ValidationError(error_msg)

        return True

    def validate_search_text(self, text: Any) -> str:
        """
        Sanitize raw search text.

        Non-string input becomes the empty string, markup is dropped and
        whitespace collapsed. Applying this twice is a no-op.
        """
        if not isinstance(text, str):
            return ""
        return strip_markup(text)

    def validate_content_type(self, value: Any) -> Optional[str]:
        if not isinstance(value, str):
            return None
        value = value.strip().lower()
        if value in self.content_types:
            return value
        if value:
            self.logger.debug(f"Discarding unknown content type filter: {value!r}")
        return None

    def validate_category(self, value: Any) -> Optional[str]:
        """Accept a configured slug, or a label that slugifies to one."""
        if not isinstance(value, str):
            return None
        value = value.strip().lower()
        if value in self.categories:
            return value
        slug = self._category_by_label.get(slugify(value))
        if slug is None and value:
            self.logger.debug(f"Discarding unknown category filter: {value!r}")
        return slug

    def validate_sort_key(self, value: Any) -> str:
        if isinstance(value, str) and value.strip().lower() in SORT_KEYS:
            return value.strip().lower()
        return SORT_RELEVANCE

    def validate_page(self, value: Any) -> int:
        """Non-numeric, zero and negative pages clamp to 1."""
        if isinstance(value, bool):
            return 1
        if isinstance(value, int):
            page = value
        else:
            text = str(value).strip()
            try:
                page = int(text)
            except (TypeError, ValueError):
                # Digit strings past the int conversion limit are still huge pages
                if text.isascii() and text.isdigit():
                    return self.max_page
                return 1
        if page < 1:
            return 1
        return min(page, self.max_page)

    def validate_filter_text(self, value: Any, max_length: int = 100) -> Optional[str]:
        """Free-text filter value, or None when absent or blank."""
        if not isinstance(value, str):
            return None
        text = strip_markup(value)[:max_length].strip()
        return text or None

    def validate_slug(self, value: Any) -> Optional[str]:
        if not isinstance(value, str):
            return None
        return slugify(value) or None

    def validate_salary(self, value: Any) -> Optional[int]:
        """
        Whole, positive salary bound.

        Anything else (blank, zero, negative, non-numeric) means no bound.
        """
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value if value > 0 else None
        if not isinstance(value, str):
            return None
        text = value.strip().replace(",", "")
        if not (text.isascii() and text.isdigit()) or len(text) > 12:
            if text:
                self.logger.debug(f"Discarding salary filter: {value!r}")
            return None
        salary = int(text)
        return salary if salary > 0 else None
