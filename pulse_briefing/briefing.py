"""Assemble ranked items into a period briefing."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import List, Sequence

from .models import SCHEDULED_TIMES, Briefing, BriefingItem

MAX_ITEMS_PER_BRIEFING = 10
EMPTY_SUMMARY = "No significant AI news this period."


def current_period(now: datetime) -> str:
    """Map the wall-clock hour to morning, afternoon or evening."""

    if now.hour < 12:
        return "morning"
    if now.hour < 18:
        return "afternoon"
    return "evening"


def scheduled_time(period: str) -> str:
    return SCHEDULED_TIMES[period]


def briefing_id(day: str, period: str) -> str:
    return f"briefing-{day}-{period}"


def executive_summary(items: Sequence[BriefingItem]) -> str:
    if not items:
        return EMPTY_SUMMARY
    highlights = [item.title for item in items[:3]]
    return f"Today's highlights: {', '.join(highlights)}."


def assemble_briefing(
    items: Sequence[BriefingItem],
    now: datetime,
    max_items: int = MAX_ITEMS_PER_BRIEFING,
) -> Briefing:
    """Build the briefing for the period ``now`` falls in.

    ``items`` must already be in priority order; only the first
    ``max_items`` are kept.
    """

    day = now.date().isoformat()
    period = current_period(now)
    selected: List[BriefingItem] = list(items[:max_items])
    return Briefing(
        id=briefing_id(day, period),
        period=period,
        date=day,
        scheduled_time=scheduled_time(period),
        executive_summary=executive_summary(selected),
        items=selected,
        total_read_time_minutes=sum(item.read_time_minutes for item in selected),
        is_available=True,
        is_read=False,
    )


def display_label(day: str, today: date) -> str:
    """Human label for a YYYY-MM-DD date relative to ``today``."""

    value = date.fromisoformat(day)
    if value == today:
        return "Today"
    if value == today - timedelta(days=1):
        return "Yesterday"
    return f"{value:%A}, {value:%b} {value.day}"


__all__ = [
    "assemble_briefing",
    "briefing_id",
    "current_period",
    "display_label",
    "executive_summary",
    "scheduled_time",
]
