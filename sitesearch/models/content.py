"""
Content item model.
A read-only snapshot of one searchable document handed out by a content store.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, Optional, Union

ItemId = Union[int, str]


@dataclass(frozen=True)
class JobDetails:
    """Listing metadata carried by job items."""
    location: str = ""
    job_type: str = ""
    company: str = ""
    category: str = ""
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None

    def __post_init__(self):
        for bound in (self.salary_min, self.salary_max):
            if bound is not None and bound < 0:
                raise ValueError("Salary bounds must be non-negative")
        if (self.salary_min is not None and self.salary_max is not None
                and self.salary_min > self.salary_max):
            raise ValueError("salary_min exceeds salary_max")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JobDetails":
        return cls(
            location=data.get("location") or "",
            job_type=data.get("job_type") or "",
            company=data.get("company") or "",
            category=data.get("category") or "",
            salary_min=_optional_int(data.get("salary_min")),
            salary_max=_optional_int(data.get("salary_max")),
        )


@dataclass(frozen=True)
class ContentItem:
    id: ItemId
    type: str
    title: str
    body: str
    published_at: datetime
    modified_at: datetime
    excerpt_override: Optional[str] = None
    categories: FrozenSet[str] = field(default_factory=frozenset)
    author_id: Optional[ItemId] = None
    comment_count: int = 0
    view_count: int = 0
    job: Optional[JobDetails] = None

    def __post_init__(self):
        object.__setattr__(self, "published_at", _parse_timestamp(self.published_at))
        object.__setattr__(self, "modified_at", _parse_timestamp(self.modified_at))
        if self.modified_at < self.published_at:
            raise ValueError(
                f"Content item {self.id}: modified_at precedes published_at"
            )
        if self.comment_count < 0 or self.view_count < 0:
            raise ValueError(f"Content item {self.id}: counters must be non-negative")
        # Accept any iterable of labels but store an immutable set
        if not isinstance(self.categories, frozenset):
            object.__setattr__(self, "categories", frozenset(self.categories))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContentItem":
        """
        Build an item from a JSON-style mapping.

        Timestamps are ISO-8601 strings; a missing ``modified_at`` defaults to
        ``published_at``.
        """
        published_at = data["published_at"]
        modified_at = data.get("modified_at") or published_at
        return cls(
            id=data["id"],
            type=str(data["type"]).lower(),
            title=data.get("title") or "",
            body=data.get("body") or "",
            published_at=published_at,
            modified_at=modified_at,
            excerpt_override=data.get("excerpt_override") or None,
            categories=frozenset(data.get("categories") or ()),
            author_id=data.get("author_id"),
            comment_count=int(data.get("comment_count") or 0),
            view_count=int(data.get("view_count") or 0),
            job=JobDetails.from_dict(data["job"]) if data.get("job") else None,
        )


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def _parse_timestamp(value: Union[str, datetime]) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    # Naive timestamps are taken as UTC so that all items compare
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
