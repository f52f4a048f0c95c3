"""
Query normalizer for site search.
Handles parsing of raw request parameters, tokenization and hash generation.
"""

import hashlib
import json
from typing import Any, List, Mapping, Optional

from .base import BaseService, SearchCacheManager, SearchValidator
from ...core.config import settings
from ...models.search import JobFilters, SearchQuery

JOB_FILTER_PARAMS = ("job_location", "job_type", "job_category", "salary_min", "salary_max")


class QueryNormalizer(BaseService):
    """
    Service for turning raw request input into a SearchQuery.
    Never fails: every malformed value degrades to its default.
    """

    def __init__(self, cache_manager: Optional[SearchCacheManager] = None,
                 validator: Optional[SearchValidator] = None,
                 page_size: Optional[int] = None):
        """
        Initialize the query normalizer.

        Args:
            cache_manager: Cache manager instance
            validator: Validator holding the configured types and categories
            page_size: Default page size (server configuration when omitted)
        """
        super().__init__(cache_manager, validator)
        self.page_size = page_size or settings.page_size

    def get_service_name(self) -> str:
        """Get the service name."""
        return "query_normalizer"

    def normalize(self, raw_text: Any = None, type_filter: Any = None,
                  category_filter: Any = None, sort_key: Any = None,
                  page: Any = None, page_size: Optional[int] = None,
                  job_filters: Optional[Mapping[str, Any]] = None) -> SearchQuery:
        """
        Build a well-formed SearchQuery from raw parameters.

        Args:
            raw_text: The ``q`` parameter, possibly absent
            type_filter: The ``type`` parameter
            category_filter: The ``category`` parameter
            sort_key: The ``sort`` parameter
            page: The ``page`` parameter
            page_size: Override for the configured page size
            job_filters: Raw ``job_location``, ``job_type``, ``job_category``,
                ``salary_min`` and ``salary_max`` values

        Returns:
            SearchQuery: Normalized query
        """
        text = self.validator.validate_search_text(raw_text)
        size = page_size if isinstance(page_size, int) and page_size > 0 else self.page_size

        return SearchQuery(
            raw_text=text,
            terms=tuple(self.extract_query_terms(text)),
            type_filter=self.validator.validate_content_type(type_filter),
            category_filter=self.validator.validate_category(category_filter),
            sort_key=self.validator.validate_sort_key(sort_key),
            page=self.validator.validate_page(page if page is not None else 1),
            page_size=size,
            job_filters=self.normalize_job_filters(job_filters or {}),
        )

    def normalize_params(self, params: Mapping[str, Any],
                         page_size: Optional[int] = None) -> SearchQuery:
        """
        Normalize a mapping of request parameters (``q``, ``type``,
        ``category``, ``sort``, ``page`` and the job filters). List values,
        as produced by ``urllib.parse.parse_qs``, use their first element.
        """
        def first(name):
            value = params.get(name)
            if isinstance(value, (list, tuple)):
                return value[0] if value else None
            return value

        return self.normalize(
            raw_text=first("q"),
            type_filter=first("type"),
            category_filter=first("category"),
            sort_key=first("sort"),
            page=first("page"),
            page_size=page_size,
            job_filters={name: first(name) for name in JOB_FILTER_PARAMS},
        )

    def normalize_job_filters(self, raw: Mapping[str, Any]) -> JobFilters:
        """
        Build job refinements from raw values.

        Blank or malformed values are dropped rather than rejected.
        """
        job_type = self.validator.validate_filter_text(raw.get("job_type"), max_length=50)
        return JobFilters(
            location=self.validator.validate_filter_text(raw.get("job_location")),
            job_type=job_type.lower() if job_type else None,
            category=self.validator.validate_slug(raw.get("job_category")),
            salary_min=self.validator.validate_salary(raw.get("salary_min")),
            salary_max=self.validator.validate_salary(raw.get("salary_max")),
        )

    def extract_query_terms(self, text: str) -> List[str]:
        """
        Extract individual terms from sanitized text.

        Terms are lower-cased; duplicates are kept since they weigh into
        relevance, and short terms are kept since they still match.

        Args:
            text: Sanitized query text

        Returns:
            List[str]: List of query terms
        """
        return [term.lower() for term in text.split() if term]

    def generate_search_hash(self, query: SearchQuery, include_page: bool = True) -> str:
        """
        Generate a consistent hash for a normalized query.

        Args:
            query: Normalized query
            include_page: Whether pagination takes part in the key

        Returns:
            str: Hash string for cache keys
        """
        params = query.to_params()
        if include_page:
            params["page_size"] = str(query.page_size)
        else:
            params.pop("page", None)
        params_str = json.dumps(params, sort_keys=True)
        return hashlib.md5(params_str.encode()).hexdigest()
