"""
Content store for site search.
Defines the query primitive the search engine consumes and ships an
in-memory reference store loaded from a JSON file.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .base.validators import SearchValidator, ValidationError, slugify, strip_markup
from ...core.config import settings
from ...models.content import ContentItem, ItemId
from ...models.search import JobFilters, SearchQuery

logger = logging.getLogger(__name__)

# Where a term hit counts for relevance
FIELD_WEIGHTS = {
    "title": 3.0,
    "excerpt": 2.0,
    "body": 1.0,
}

REQUIRED_ITEM_FIELDS = ["id", "type", "published_at"]


class ContentStore(ABC):
    """
    Query primitive over the searchable corpus.

    ``search`` and ``count`` honour the query's type and category filters and
    its terms, and ignore sort and pagination. ``version`` changes whenever
    content changes.
    """

    @property
    @abstractmethod
    def version(self) -> int:
        pass

    @abstractmethod
    async def search(self, query: SearchQuery) -> Tuple[List[ContentItem], int]:
        """
        Find all items matching the query.

        Returns:
            Tuple[List[ContentItem], int]: (matches in relevance order, total)
        """
        pass

    @abstractmethod
    async def count(self, query: SearchQuery) -> int:
        pass

    @property
    def supports_batch_count(self) -> bool:
        return False

    async def count_many(self, queries: Sequence[SearchQuery]) -> List[int]:
        """Count several queries in one round trip."""
        return [await self.count(query) for query in queries]

    async def title_matches(self, text: str, limit: int = 5) -> List[ContentItem]:
        """Items whose title contains the text; stores without a title lookup return none."""
        return []


class InMemoryContentStore(ContentStore):
    """
    Reference content store holding every item in memory.

    This is a scan, not an index: every term has to occur in the title,
    excerpt or body (case-insensitive substring of the markup-free text), and
    relevance is the weighted number of term occurrences.
    """

    def __init__(self, items: Iterable[ContentItem] = (),
                 content_types: Optional[Sequence[str]] = None):
        """
        Initialize the store.

        Args:
            items: Initial content
            content_types: Searchable types; items of other types are stored
                but never returned
        """
        self.content_types = [
            t.lower() for t in (content_types if content_types is not None else settings.content_types)
        ]
        self._items: Dict[ItemId, ContentItem] = {}
        self._search_text: Dict[ItemId, Dict[str, str]] = {}
        self._version = 0
        for item in items:
            self._index(item)
        self.logger = logger

    @classmethod
    def from_json_file(cls, file_path: Union[str, Path],
                       content_types: Optional[Sequence[str]] = None) -> "InMemoryContentStore":
        """
        Load a store from a JSON file holding a list of items (or an object
        with an ``items`` list). Invalid entries are skipped with a warning.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file isn't valid JSON or has the wrong shape
        """
        file_path = Path(file_path)
        if not os.path.exists(file_path):
            error_msg = f"Content data file not found at {file_path}"
            logger.error(error_msg)
            raise FileNotFoundError(error_msg)

        try:
            with open(file_path, "r", encoding="utf-8") as file:
                data = json.load(file)
        except json.JSONDecodeError as e:
            error_msg = f"Error parsing content JSON data: {e}"
            logger.error(error_msg)
            raise ValueError(error_msg)

        if isinstance(data, dict):
            data = data.get("items")
        if not isinstance(data, list):
            raise ValueError("Content data must be a list of items")

        validator = SearchValidator(content_types or settings.content_types, settings.categories)
        items = []
        for index, entry in enumerate(data):
            try:
                if not isinstance(entry, dict):
                    raise ValidationError("Item must be an object")
                validator.validate_required_fields(entry, REQUIRED_ITEM_FIELDS)
                items.append(ContentItem.from_dict(entry))
            except (ValidationError, ValueError, TypeError, KeyError, AttributeError) as e:
                logger.warning(f"Skipping content item #{index} in {file_path}: {e}")

        store = cls(items, content_types)
        logger.info(f"Loaded {len(items)} content items from {file_path}")
        return store

    @property
    def version(self) -> int:
        return self._version

    @property
    def supports_batch_count(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._items)

    def get(self, item_id: ItemId) -> Optional[ContentItem]:
        return self._items.get(item_id)

    def upsert(self, item: ContentItem) -> None:
        self._index(item)
        self._version += 1

    def remove(self, item_id: ItemId) -> bool:
        if self._items.pop(item_id, None) is None:
            return False
        self._search_text.pop(item_id, None)
        self._version += 1
        return True

    def _index(self, item: ContentItem) -> None:
        self._items[item.id] = item
        self._search_text[item.id] = {
            "title": strip_markup(item.title).lower(),
            "excerpt": strip_markup(item.excerpt_override or "").lower(),
            "body": strip_markup(item.body).lower(),
        }

    async def search(self, query: SearchQuery) -> Tuple[List[ContentItem], int]:
        scored = []
        for position, item in enumerate(self._items.values()):
            if not self._passes_filters(item, query):
                continue
            score = self._calculate_relevance_score(item, query.terms)
            if score is None:
                continue
            scored.append((score, position, item))

        ranked = self._rank_results(scored)
        return ranked, len(ranked)

    async def count(self, query: SearchQuery) -> int:
        return sum(
            1 for item in self._items.values()
            if self._passes_filters(item, query)
            and self._calculate_relevance_score(item, query.terms) is not None
        )

    async def count_many(self, queries: Sequence[SearchQuery]) -> List[int]:
        return [await self.count(query) for query in queries]

    async def title_matches(self, text: str, limit: int = 5) -> List[ContentItem]:
        needle = (text or "").lower()
        if not needle:
            return []
        matches = [
            item for item in self._items.values()
            if item.type in self.content_types and needle in self._search_text[item.id]["title"]
        ]
        matches.sort(key=lambda item: item.title.casefold())
        return matches[:limit]

    def _passes_filters(self, item: ContentItem, query: SearchQuery) -> bool:
        if item.type not in self.content_types:
            return False
        if query.type_filter and item.type != query.type_filter:
            return False
        if query.category_filter:
            slugs = {slugify(label) for label in item.categories}
            if query.category_filter not in slugs:
                return False
        if not query.job_filters.is_empty:
            return self._passes_job_filters(item, query.job_filters)
        return True

    def _passes_job_filters(self, item: ContentItem, filters: JobFilters) -> bool:
        """Items without listing metadata never satisfy a job refinement."""
        job = item.job
        if job is None:
            return False
        if filters.location and filters.location.casefold() not in job.location.casefold():
            return False
        if filters.job_type and filters.job_type != job.job_type.strip().lower():
            return False
        if filters.category and filters.category != slugify(job.category):
            return False
        if filters.salary_min and (job.salary_min is None or job.salary_min < filters.salary_min):
            return False
        if filters.salary_max and (job.salary_max is None or job.salary_max > filters.salary_max):
            return False
        return True

    def _calculate_relevance_score(self, item: ContentItem, terms: Sequence[str]) -> Optional[float]:
        """
        Score an item against the query terms.

        Returns:
            Optional[float]: Weighted hit count, or None when a term is missing
            everywhere. With no terms every item matches with score 0.
            Markup never matches; only the text a reader sees does.
        """
        fields = self._search_text[item.id]

        score = 0.0
        for term in terms:
            term_hits = 0.0
            for name, text in fields.items():
                occurrences = text.count(term)
                term_hits += occurrences * FIELD_WEIGHTS[name]
            if term_hits == 0:
                return None
            score += term_hits
        return score

    def _rank_results(self, scored: List[Tuple[float, int, ContentItem]]) -> List[ContentItem]:
        # Higher score first, newer first among equals, then insertion order
        scored.sort(key=lambda entry: (-entry[0], -entry[2].published_at.timestamp(), entry[1]))
        return [item for _, _, item in scored]
