"""Rolling multi-day archive of briefings, persisted as one JSON document."""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from datetime import date
from pathlib import Path
from typing import Dict, List, Sequence

from .briefing import display_label
from .errors import ArchiveWriteError
from .models import PERIOD_ORDER, Briefing, DailyBriefings

LOGGER = logging.getLogger(__name__)

MAX_DAYS_TO_KEEP = 7


def load_archive(path: Path) -> List[DailyBriefings]:
    """Read the archive; a missing or unreadable file counts as empty."""

    if not path.exists():
        return []
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(payload, list):
            raise ValueError("archive root is not a list")
        return [DailyBriefings.from_dict(day) for day in payload]
    except (OSError, ValueError, KeyError, TypeError) as exc:
        LOGGER.warning("Could not load existing archive %s: %s", path, exc)
        return []


def merge_briefing(
    archive: Sequence[DailyBriefings],
    briefing: Briefing,
    today: date,
    max_days: int = MAX_DAYS_TO_KEEP,
) -> List[DailyBriefings]:
    """Return a new archive with ``briefing`` merged in.

    The (date, period) pair is the identity of a briefing: an existing
    entry for the same pair is replaced, siblings on that day are kept.
    Days come back newest first, truncated to ``max_days`` and relabelled
    relative to ``today``.
    """

    by_date: Dict[str, DailyBriefings] = {day.date: copy.deepcopy(day) for day in archive}

    day = by_date.get(briefing.date)
    if day is None:
        by_date[briefing.date] = DailyBriefings(date=briefing.date, display_date="", briefings=[briefing])
    else:
        for index, existing in enumerate(day.briefings):
            if existing.period == briefing.period:
                day.briefings[index] = briefing
                break
        else:
            day.briefings.append(briefing)
        day.briefings.sort(key=lambda entry: PERIOD_ORDER[entry.period])

    merged = sorted(by_date.values(), key=lambda entry: entry.date, reverse=True)[:max_days]
    for entry in merged:
        entry.display_date = display_label(entry.date, today)
    return merged


def save_archive(path: Path, archive: Sequence[DailyBriefings]) -> None:
    """Replace the archive file atomically.

    Raises ArchiveWriteError; the previous file is left untouched on failure.
    """

    text = json.dumps([day.to_dict() for day in archive], indent=2, ensure_ascii=False)
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
        ) as handle:
            tmp_name = handle.name
            handle.write(text)
            handle.write("\n")
        os.replace(tmp_name, path)
    except OSError as exc:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise ArchiveWriteError(f"Could not write archive {path}: {exc}") from exc
    LOGGER.info("Saved %d days of briefings to %s", len(archive), path)


class ArchiveStore:
    """JSON-backed store for the briefing archive the app reads."""

    def __init__(self, path: Path, max_days: int = MAX_DAYS_TO_KEEP) -> None:
        self.path = path
        self.max_days = max_days
        self.days: List[DailyBriefings] = load_archive(path)

    def merge(self, briefing: Briefing, today: date) -> List[DailyBriefings]:
        self.days = merge_briefing(self.days, briefing, today, max_days=self.max_days)
        return self.days

    def save(self) -> None:
        save_archive(self.path, self.days)


__all__ = ["ArchiveStore", "MAX_DAYS_TO_KEEP", "load_archive", "merge_briefing", "save_archive"]
