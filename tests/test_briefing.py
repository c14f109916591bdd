"""Tests for period detection and briefing assembly."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from conftest import make_briefing_item

from pulse_briefing.briefing import (
    EMPTY_SUMMARY,
    assemble_briefing,
    briefing_id,
    current_period,
    display_label,
    executive_summary,
)


@pytest.mark.parametrize(
    "hour, period",
    [(0, "morning"), (11, "morning"), (12, "afternoon"), (17, "afternoon"), (18, "evening"), (23, "evening")],
)
def test_current_period(hour, period):
    assert current_period(datetime(2026, 10, 17, hour, 30)) == period


def test_briefing_id():
    assert briefing_id("2026-10-17", "evening") == "briefing-2026-10-17-evening"


class TestAssembleBriefing:
    def test_afternoon_run(self):
        items = [make_briefing_item(id=f"i{n}", title=f"Story {n}", read_time=n + 1) for n in range(3)]

        briefing = assemble_briefing(items, datetime(2026, 10, 17, 14, 5))

        assert briefing.id == "briefing-2026-10-17-afternoon"
        assert briefing.period == "afternoon"
        assert briefing.date == "2026-10-17"
        assert briefing.scheduled_time == "13:30"
        assert briefing.total_read_time_minutes == 6
        assert briefing.is_available is True
        assert briefing.is_read is False

    def test_keeps_the_first_max_items(self):
        items = [make_briefing_item(id=f"i{n}") for n in range(14)]

        briefing = assemble_briefing(items, datetime(2026, 10, 17, 7, 0), max_items=10)

        assert [item.id for item in briefing.items] == [f"i{n}" for n in range(10)]
        assert briefing.total_read_time_minutes == 20

    def test_empty_briefing_is_still_valid(self):
        briefing = assemble_briefing([], datetime(2026, 10, 17, 21, 0))

        assert briefing.period == "evening"
        assert briefing.items == []
        assert briefing.total_read_time_minutes == 0
        assert briefing.executive_summary == EMPTY_SUMMARY

    def test_serialized_keys(self):
        data = assemble_briefing([make_briefing_item()], datetime(2026, 10, 17, 7, 0)).to_dict()

        assert set(data) == {
            "id",
            "period",
            "date",
            "scheduledTime",
            "executiveSummary",
            "items",
            "totalReadTimeMinutes",
            "isAvailable",
            "isRead",
        }
        assert data["items"][0]["whyItMatters"] == ["It matters."]
        assert data["items"][0]["whatToTry"] == {"description": "Try it."}


class TestExecutiveSummary:
    def test_first_three_titles(self):
        items = [make_briefing_item(title=title) for title in ("A", "B", "C", "D")]

        assert executive_summary(items) == "Today's highlights: A, B, C."

    def test_fewer_than_three(self):
        assert executive_summary([make_briefing_item(title="Only one")]) == "Today's highlights: Only one."


class TestDisplayLabel:
    TODAY = date(2026, 10, 17)

    def test_today(self):
        assert display_label("2026-10-17", self.TODAY) == "Today"

    def test_yesterday(self):
        assert display_label("2026-10-16", self.TODAY) == "Yesterday"

    def test_older_days_use_weekday_and_month(self):
        assert display_label("2026-10-14", self.TODAY) == "Wednesday, Oct 14"
        assert display_label("2026-10-05", self.TODAY) == "Monday, Oct 5"
