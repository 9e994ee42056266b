from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timezone
from typing import Any, Dict, Generic, List, Optional, TypeVar

from dateutil import parser as dateparse

RecordID = str
T = TypeVar("T")

MODE_NORMAL = "normal"
MODE_PREVIEWS = "previews"
MODES = (MODE_NORMAL, MODE_PREVIEWS)


def date_to_millis(date: str) -> Optional[int]:
    """Epoch milliseconds for an ISO date string; date-only and naive values count as UTC."""
    if not date:
        return None
    try:
        dt = dateparse.isoparse(date)
    except (ValueError, OverflowError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


@dataclass
class PostRecord:
    id: RecordID
    title: str
    slug: str
    published: bool = False
    date: str = ""                      # ISO date, "" when unset
    authors: List[str] = field(default_factory=list)
    preview: Optional[list] = None

    def to_dict(self) -> Dict[str, Any]:
        # Legacy keys are derived here so they always mirror the canonical ones
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "published": self.published,
            "date": self.date,
            "authors": list(self.authors),
            "preview": self.preview,
            "Page": self.title,
            "Slug": self.slug,
            "Published": "Yes" if self.published else "No",
            "Date": date_to_millis(self.date),
            "Authors": list(self.authors),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PostRecord":
        date = data.get("date") or ""
        if not isinstance(date, str):
            raise TypeError(f"date must be a string, got {type(date).__name__}")
        authors = data.get("authors") or []
        if not isinstance(authors, list):
            raise TypeError(f"authors must be a list, got {type(authors).__name__}")
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            slug=str(data["slug"]),
            published=bool(data.get("published", False)),
            date=date,
            authors=[str(a) for a in authors],
            preview=data.get("preview"),
        )


Index = Dict[str, PostRecord]


@dataclass
class RenderNode:
    id: RecordID
    type: str
    properties: Dict[str, Any] = field(default_factory=dict)
    format: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"id": self.id, "type": self.type, "properties": self.properties}
        if self.format is not None:
            out["format"] = self.format
        return out

    def as_block(self) -> Dict[str, Any]:
        """Envelope expected by the page renderer."""
        return {"value": self.to_dict()}


@dataclass
class Outcome(Generic[T]):
    """Result of a boundary operation; on failure ``value`` is the empty fallback."""

    value: T
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, value: T, error: BaseException | str) -> "Outcome[T]":
        return cls(value=value, error=str(error) or type(error).__name__)
