"""Shared dataclasses and type definitions for the briefing pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

SOURCE_TYPES = ("rss", "reddit", "twitter", "hackernews", "bluesky")
CATEGORIES = ("releases", "tools", "workflows", "research", "industry")
TAG_TYPES = ("model", "tool", "topic")
LINK_TYPES = ("paper", "repository", "article", "blog")

PERIODS = ("morning", "afternoon", "evening")
PERIOD_ORDER = {period: index for index, period in enumerate(PERIODS)}
SCHEDULED_TIMES = {"morning": "07:30", "afternoon": "13:30", "evening": "20:30"}


def _mapping(value: Any, name: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"{name} must be an object, got {type(value).__name__}")
    return value


def _iso_date(value: Any) -> str:
    """Return ``value`` unchanged if it is a YYYY-MM-DD string, else raise ValueError."""

    if not isinstance(value, str):
        raise ValueError(f"date must be a string, got {value!r}")
    date.fromisoformat(value)
    return value


@dataclass(frozen=True)
class SourceOrigin:
    """One contributing story recorded on a merged raw item."""

    source: str
    title: str
    url: str


@dataclass(frozen=True)
class RawNewsItem:
    """Normalized candidate story produced by a fetcher."""

    id: str
    title: str
    content: str
    url: str
    source: str
    source_type: str
    category: str
    published_at: str
    author: Optional[str] = None
    origins: Tuple[SourceOrigin, ...] = ()

    def __post_init__(self) -> None:
        if self.source_type not in SOURCE_TYPES:
            raise ValueError(f"Unknown source type: {self.source_type!r}")
        if self.category not in CATEGORIES:
            raise ValueError(f"Unknown category: {self.category!r}")

    @property
    def is_merged(self) -> bool:
        return len(self.origins) > 1


@dataclass
class BriefingSource:
    id: str
    title: str
    url: str
    domain: str
    type: str = "article"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "domain": self.domain,
            "type": self.type,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BriefingSource":
        data = _mapping(data, "source")
        link_type = data.get("type")
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            url=data.get("url", ""),
            domain=data.get("domain", ""),
            type=link_type if link_type in LINK_TYPES else "article",
        )


@dataclass
class BriefingTag:
    id: str
    label: str
    type: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "label": self.label, "type": self.type}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BriefingTag":
        data = _mapping(data, "tag")
        return cls(id=data["id"], label=data["label"], type=data["type"])


@dataclass
class WhatToTry:
    description: str
    code: Optional[str] = None
    note: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"description": self.description}
        if self.code:
            data["code"] = self.code
        if self.note:
            data["note"] = self.note
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WhatToTry":
        data = _mapping(data, "whatToTry")
        return cls(
            description=data.get("description", ""),
            code=data.get("code"),
            note=data.get("note"),
        )


@dataclass
class BriefingItem:
    """A curated, user-facing story."""

    id: str
    title: str
    tldr: str
    why_it_matters: List[str]
    what_to_try: WhatToTry
    sources: List[BriefingSource]
    tags: List[BriefingTag]
    category: str
    read_time_minutes: int
    published_at: str
    is_read: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "tldr": self.tldr,
            "whyItMatters": list(self.why_it_matters),
            "whatToTry": self.what_to_try.to_dict(),
            "sources": [source.to_dict() for source in self.sources],
            "tags": [tag.to_dict() for tag in self.tags],
            "category": self.category,
            "readTimeMinutes": self.read_time_minutes,
            "isRead": self.is_read,
            "publishedAt": self.published_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BriefingItem":
        data = _mapping(data, "item")
        category = data.get("category")
        return cls(
            id=data["id"],
            title=data["title"],
            tldr=data.get("tldr", ""),
            why_it_matters=list(data.get("whyItMatters", [])),
            what_to_try=WhatToTry.from_dict(data.get("whatToTry") or {}),
            sources=[BriefingSource.from_dict(s) for s in data.get("sources", [])],
            tags=[BriefingTag.from_dict(t) for t in data.get("tags", [])],
            category=category if category in CATEGORIES else "industry",
            read_time_minutes=int(data.get("readTimeMinutes", 0)),
            published_at=data.get("publishedAt", ""),
            is_read=bool(data.get("isRead", False)),
        )


@dataclass
class Briefing:
    """One period's worth of curated items for a date."""

    id: str
    period: str
    date: str
    scheduled_time: str
    executive_summary: str
    items: List[BriefingItem]
    total_read_time_minutes: int
    is_available: bool = True
    is_read: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "period": self.period,
            "date": self.date,
            "scheduledTime": self.scheduled_time,
            "executiveSummary": self.executive_summary,
            "items": [item.to_dict() for item in self.items],
            "totalReadTimeMinutes": self.total_read_time_minutes,
            "isAvailable": self.is_available,
            "isRead": self.is_read,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Briefing":
        data = _mapping(data, "briefing")
        if data["period"] not in PERIOD_ORDER:
            raise ValueError(f"Unknown briefing period: {data['period']!r}")
        return cls(
            id=data["id"],
            period=data["period"],
            date=_iso_date(data["date"]),
            scheduled_time=data.get("scheduledTime", SCHEDULED_TIMES[data["period"]]),
            executive_summary=data.get("executiveSummary", ""),
            items=[BriefingItem.from_dict(item) for item in data.get("items", [])],
            total_read_time_minutes=int(data.get("totalReadTimeMinutes", 0)),
            is_available=bool(data.get("isAvailable", True)),
            is_read=bool(data.get("isRead", False)),
        )


@dataclass
class DailyBriefings:
    """All briefings for one calendar day, ordered morning to evening."""

    date: str
    display_date: str
    briefings: List[Briefing] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "displayDate": self.display_date,
            "briefings": [briefing.to_dict() for briefing in self.briefings],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DailyBriefings":
        data = _mapping(data, "day")
        return cls(
            date=_iso_date(data["date"]),
            display_date=data.get("displayDate", ""),
            briefings=[Briefing.from_dict(b) for b in data.get("briefings", [])],
        )


__all__ = [
    "Briefing",
    "BriefingItem",
    "BriefingSource",
    "BriefingTag",
    "CATEGORIES",
    "DailyBriefings",
    "LINK_TYPES",
    "PERIODS",
    "PERIOD_ORDER",
    "RawNewsItem",
    "SCHEDULED_TIMES",
    "SOURCE_TYPES",
    "SourceOrigin",
    "TAG_TYPES",
    "WhatToTry",
]
