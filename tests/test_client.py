"""Tests for the cached briefings feed reader."""

from __future__ import annotations

from datetime import date
from unittest.mock import MagicMock, patch

import requests

from conftest import make_briefing, make_day

from pulse_briefing.archive import merge_briefing, save_archive
from pulse_briefing.client import BriefingsFeed

FEED_URL = "https://example.com/data/live/briefings.json"
TODAY = date(2026, 10, 17)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def _archive():
    archive = merge_briefing([make_day("2026-10-16", "evening")], make_briefing("2026-10-17", "morning"), TODAY)
    return merge_briefing(archive, make_briefing("2026-10-17", "afternoon", titles=("A", "B")), TODAY)


def _response(payload):
    response = MagicMock()
    response.json.return_value = payload
    return response


@patch("pulse_briefing.client.requests.get")
class TestBriefingsFeed:
    def test_fetches_and_parses(self, mock_get):
        mock_get.return_value = _response([day.to_dict() for day in _archive()])
        feed = BriefingsFeed(FEED_URL)

        days = feed.fetch()

        assert days == _archive()
        assert feed.is_using_live_data
        args, kwargs = mock_get.call_args
        assert args == (FEED_URL,)
        assert kwargs["headers"] == {"Cache-Control": "no-cache"}

    def test_serves_from_cache_within_ttl(self, mock_get):
        mock_get.return_value = _response([day.to_dict() for day in _archive()])
        clock = FakeClock()
        feed = BriefingsFeed(FEED_URL, ttl=300, clock=clock)

        feed.fetch()
        clock.now += 299
        feed.fetch()
        assert mock_get.call_count == 1

        clock.now += 1
        feed.fetch()
        assert mock_get.call_count == 2

    def test_clear_cache_forces_refetch(self, mock_get):
        mock_get.return_value = _response([])
        feed = BriefingsFeed(FEED_URL)

        feed.fetch()
        feed.clear_cache()

        assert not feed.is_using_live_data
        feed.fetch()
        assert mock_get.call_count == 2

    def test_falls_back_to_bundled_file(self, mock_get, tmp_path):
        bundled = tmp_path / "briefings.json"
        save_archive(bundled, _archive())
        mock_get.side_effect = requests.ConnectionError("offline")
        feed = BriefingsFeed(FEED_URL, fallback_path=bundled)

        assert feed.fetch() == _archive()
        assert not feed.is_using_live_data

    def test_malformed_payload_falls_back_to_empty(self, mock_get):
        mock_get.return_value = _response([{"date": "2026-10-17", "briefings": [{"id": "x", "period": "night"}]}])

        assert BriefingsFeed(FEED_URL).fetch() == []

    def test_lookups(self, mock_get):
        mock_get.return_value = _response([day.to_dict() for day in _archive()])
        feed = BriefingsFeed(FEED_URL)

        assert [briefing.period for briefing in feed.todays_briefings()] == ["morning", "afternoon"]
        assert feed.briefing_by_id("briefing-2026-10-16-evening").date == "2026-10-16"
        assert feed.briefing_by_id("briefing-2026-10-10-morning") is None
        assert feed.item_by_id("2026-10-17-afternoon-1").title == "B"
        assert feed.item_by_id("missing") is None
        assert mock_get.call_count == 1
