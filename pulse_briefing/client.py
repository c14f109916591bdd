"""Read-only client for the published briefings feed.

Mirrors what the mobile app does: fetch the JSON document over HTTP, keep a
short-lived cache, and fall back to bundled data when the fetch fails.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

import requests

from .archive import load_archive
from .models import Briefing, BriefingItem, DailyBriefings

LOGGER = logging.getLogger(__name__)

CACHE_TTL_SECONDS = 5 * 60


@dataclass
class FeedCache:
    data: List[DailyBriefings]
    fetched_at: float
    ttl: float = CACHE_TTL_SECONDS

    def is_fresh(self, now: float) -> bool:
        return now - self.fetched_at < self.ttl


class BriefingsFeed:
    """Cached reader for a published briefings.json URL."""

    def __init__(
        self,
        url: str,
        ttl: float = CACHE_TTL_SECONDS,
        fallback_path: Optional[Path] = None,
        timeout: float = 10,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.url = url
        self.ttl = ttl
        self.fallback_path = fallback_path
        self.timeout = timeout
        self._clock = clock
        self.cache: Optional[FeedCache] = None

    @property
    def is_using_live_data(self) -> bool:
        return self.cache is not None

    def clear_cache(self) -> None:
        self.cache = None

    def fetch(self) -> List[DailyBriefings]:
        now = self._clock()
        if self.cache is not None and self.cache.is_fresh(now):
            return self.cache.data

        try:
            response = requests.get(self.url, headers={"Cache-Control": "no-cache"}, timeout=self.timeout)
            response.raise_for_status()
            data = [DailyBriefings.from_dict(day) for day in response.json()]
        except (requests.RequestException, ValueError, KeyError, TypeError) as exc:
            LOGGER.warning("Falling back to bundled briefings: %s", exc)
            return self._fallback()

        self.cache = FeedCache(data=data, fetched_at=now, ttl=self.ttl)
        LOGGER.debug("Fetched live data: %d days", len(data))
        return data

    def _fallback(self) -> List[DailyBriefings]:
        if self.fallback_path is None:
            return []
        return load_archive(self.fallback_path)

    def archive(self) -> List[DailyBriefings]:
        return self.fetch()

    def todays_briefings(self) -> List[Briefing]:
        for day in self.fetch():
            if day.display_date == "Today":
                return day.briefings
        return []

    def briefing_by_id(self, briefing_id: str) -> Optional[Briefing]:
        for day in self.fetch():
            for briefing in day.briefings:
                if briefing.id == briefing_id:
                    return briefing
        return None

    def item_by_id(self, item_id: str) -> Optional[BriefingItem]:
        for day in self.fetch():
            for briefing in day.briefings:
                for item in briefing.items:
                    if item.id == item_id:
                        return item
        return None


__all__ = ["BriefingsFeed", "FeedCache"]
