"""
Search request and result models.
All of these are request-scoped values; nothing here is persisted.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlencode

from .content import ContentItem

SORT_RELEVANCE = "relevance"
SORT_DATE_DESC = "date-desc"
SORT_DATE_ASC = "date-asc"
SORT_TITLE_ASC = "title-asc"

SORT_KEYS = (SORT_RELEVANCE, SORT_DATE_DESC, SORT_DATE_ASC, SORT_TITLE_ASC)

# Terms this short still match content but are never highlighted
MIN_HIGHLIGHT_TERM_LENGTH = 3

ALL_TYPES = "all"


@dataclass(frozen=True)
class JobFilters:
    """
    Refinements that only job listings can satisfy.

    ``location`` is a case-insensitive substring, ``job_type`` an exact
    (case-insensitive) value, ``category`` a slug. The salary bounds keep
    listings whose minimum is at least ``salary_min`` and whose maximum is at
    most ``salary_max``.
    """
    location: Optional[str] = None
    job_type: Optional[str] = None
    category: Optional[str] = None
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return not any((self.location, self.job_type, self.category,
                        self.salary_min, self.salary_max))

    def to_params(self) -> Dict[str, str]:
        params = {}
        if self.location:
            params["job_location"] = self.location
        if self.job_type:
            params["job_type"] = self.job_type
        if self.category:
            params["job_category"] = self.category
        if self.salary_min:
            params["salary_min"] = str(self.salary_min)
        if self.salary_max:
            params["salary_max"] = str(self.salary_max)
        return params

    def to_dict(self) -> Dict[str, Any]:
        return {
            "location": self.location,
            "job_type": self.job_type,
            "category": self.category,
            "salary_min": self.salary_min,
            "salary_max": self.salary_max,
        }


@dataclass(frozen=True)
class SearchQuery:
    raw_text: str = ""
    terms: Tuple[str, ...] = ()
    type_filter: Optional[str] = None
    category_filter: Optional[str] = None
    sort_key: str = SORT_RELEVANCE
    page: int = 1
    page_size: int = 10
    job_filters: JobFilters = field(default_factory=JobFilters)

    def __post_init__(self):
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if self.page_size < 1:
            raise ValueError(f"page_size must be positive, got {self.page_size}")
        if self.sort_key not in SORT_KEYS:
            raise ValueError(f"Unknown sort key: {self.sort_key}")

    @property
    def highlight_terms(self) -> Tuple[str, ...]:
        """Unique terms long enough to highlight, in query order."""
        seen = []
        for term in self.terms:
            if len(term) >= MIN_HIGHLIGHT_TERM_LENGTH and term not in seen:
                seen.append(term)
        return tuple(seen)

    @property
    def effective_sort_key(self) -> str:
        # Without terms there is nothing to score, so relevance means newest first
        if self.sort_key == SORT_RELEVANCE and not self.terms:
            return SORT_DATE_DESC
        return self.sort_key

    @property
    def has_filters(self) -> bool:
        return (self.type_filter is not None or self.category_filter is not None
                or not self.job_filters.is_empty)

    def without_filters(self) -> "SearchQuery":
        return replace(self, type_filter=None, category_filter=None, job_filters=JobFilters())

    def with_type(self, content_type: Optional[str]) -> "SearchQuery":
        return replace(self, type_filter=content_type)

    def with_category(self, category: Optional[str]) -> "SearchQuery":
        return replace(self, category_filter=category)

    def with_page(self, page: int) -> "SearchQuery":
        return replace(self, page=page)

    def to_params(self) -> Dict[str, str]:
        """Canonical request parameters; defaults are omitted."""
        params = {}
        if self.raw_text:
            params["q"] = self.raw_text
        if self.type_filter:
            params["type"] = self.type_filter
        if self.category_filter:
            params["category"] = self.category_filter
        params.update(self.job_filters.to_params())
        if self.sort_key != SORT_RELEVANCE:
            params["sort"] = self.sort_key
        if self.page != 1:
            params["page"] = str(self.page)
        return params

    def to_query_string(self) -> str:
        return urlencode(self.to_params())


@dataclass(frozen=True)
class FacetCount:
    type: str
    label: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "label": self.label, "count": self.count}


@dataclass(frozen=True)
class CategoryCount:
    slug: str
    label: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"slug": self.slug, "label": self.label, "count": self.count}


@dataclass(frozen=True)
class RenderedResult:
    item: ContentItem
    highlighted_title: str
    highlighted_excerpt: str
    type_label: str

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "id": self.item.id,
            "type": self.item.type,
            "type_label": self.type_label,
            "title": self.item.title,
            "highlighted_title": self.highlighted_title,
            "highlighted_excerpt": self.highlighted_excerpt,
            "published_at": self.item.published_at.isoformat(),
            "modified_at": self.item.modified_at.isoformat(),
            "categories": sorted(self.item.categories),
            "author_id": self.item.author_id,
            "comment_count": self.item.comment_count,
            "view_count": self.item.view_count,
        }
        if self.item.job is not None:
            result.update({
                "job_location": self.item.job.location,
                "job_type": self.item.job.job_type,
                "company": self.item.job.company,
            })
        return result


@dataclass(frozen=True)
class CategoryShortcut:
    label: str
    slug: str
    url: str

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "slug": self.slug, "url": self.url}


@dataclass(frozen=True)
class Suggestions:
    alternative_queries: Tuple[str, ...]
    category_shortcuts: Tuple[CategoryShortcut, ...]
    tips: Tuple[str, ...] = ()
    filters_applied: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.alternative_queries and not self.category_shortcuts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "alternative_queries": list(self.alternative_queries),
            "category_shortcuts": [s.to_dict() for s in self.category_shortcuts],
            "tips": list(self.tips),
            "filters_applied": self.filters_applied,
        }


@dataclass(frozen=True)
class SearchResultPage:
    query: SearchQuery
    items: Tuple[RenderedResult, ...]
    total: int
    page: int
    page_size: int
    facets: Tuple[FacetCount, ...]
    category_facets: Tuple[CategoryCount, ...] = ()
    suggestions: Optional[Suggestions] = None

    @property
    def total_pages(self) -> int:
        return (self.total + self.page_size - 1) // self.page_size

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query.raw_text,
            "terms": list(self.query.terms),
            "filters": {
                "type": self.query.type_filter,
                "category": self.query.category_filter,
            },
            "job_filters": self.query.job_filters.to_dict(),
            "sort": self.query.sort_key,
            "results": [result.to_dict() for result in self.items],
            "facets": [facet.to_dict() for facet in self.facets],
            "category_facets": [facet.to_dict() for facet in self.category_facets],
            "pagination": {
                "total": self.total,
                "page": self.page,
                "page_size": self.page_size,
                "total_pages": self.total_pages,
                "has_next": self.has_next,
                "has_previous": self.has_previous,
            },
            "suggestions": self.suggestions.to_dict() if self.suggestions else None,
        }
