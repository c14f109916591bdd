"""Shared fixtures for the briefing pipeline tests."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Union

import pytest

from pulse_briefing.errors import CompletionError
from pulse_briefing.models import (
    Briefing,
    BriefingItem,
    BriefingSource,
    DailyBriefings,
    RawNewsItem,
    WhatToTry,
)

NOW_UTC = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


def make_raw_item(
    id: str = "item-1",
    title: str = "OpenAI ships a new model",
    content: str = "",
    source: str = "TechCrunch AI",
    url: Optional[str] = None,
    source_type: str = "rss",
    category: str = "industry",
    published_at: str = "2026-10-17T08:00:00+00:00",
) -> RawNewsItem:
    return RawNewsItem(
        id=id,
        title=title,
        content=content,
        url=url or f"https://example.com/{id}",
        source=source,
        source_type=source_type,
        category=category,
        published_at=published_at,
    )


def make_briefing_item(id: str = "item-1", title: str = "Headline", read_time: int = 2) -> BriefingItem:
    return BriefingItem(
        id=id,
        title=title,
        tldr="Something happened.",
        why_it_matters=["It matters."],
        what_to_try=WhatToTry(description="Try it."),
        sources=[BriefingSource(id=f"src-{id}", title=title, url="https://example.com", domain="example.com")],
        tags=[],
        category="industry",
        read_time_minutes=read_time,
        published_at="2026-10-17T08:00:00+00:00",
    )


def make_briefing(day: str, period: str = "morning", titles: tuple = ("Headline",)) -> Briefing:
    items = [make_briefing_item(id=f"{day}-{period}-{n}", title=title) for n, title in enumerate(titles)]
    return Briefing(
        id=f"briefing-{day}-{period}",
        period=period,
        date=day,
        scheduled_time={"morning": "07:30", "afternoon": "13:30", "evening": "20:30"}[period],
        executive_summary="Today's highlights: Headline.",
        items=items,
        total_read_time_minutes=sum(item.read_time_minutes for item in items),
    )


def make_day(day: str, *periods: str) -> DailyBriefings:
    return DailyBriefings(date=day, display_date="", briefings=[make_briefing(day, period) for period in periods])


def curation_reply(title: str = "Curated headline", score: float = 7, **overrides) -> str:
    payload = {
        "relevanceScore": score,
        "title": title,
        "tldr": "A short summary.",
        "whyItMatters": ["Business impact", "Technical impact"],
        "whatToTry": {"description": "Read the announcement.", "note": "Pricing may change."},
        "tags": [{"label": "GPT-4o", "type": "model"}, {"label": "Pricing", "type": "topic"}],
        "readTimeMinutes": 3,
    }
    payload.update(overrides)
    return json.dumps(payload)


Reply = Union[str, Exception]


class FakeCompletionClient:
    """Answers by the raw item title found in the user prompt."""

    def __init__(self, replies: Optional[Dict[str, Reply]] = None, default: Optional[Callable[[str], Reply]] = None):
        self.replies = replies or {}
        self.default = default or (lambda title: curation_reply(title=f"Curated: {title}"))
        self.prompts: List[str] = []

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        self.prompts.append(user_prompt)
        title = user_prompt.split("Title: ", 1)[1].split("\n", 1)[0]
        reply = self.replies.get(title)
        if reply is None:
            reply = self.default(title)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def fake_client() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture
def failing_reply() -> CompletionError:
    return CompletionError("request timed out after 30s")
