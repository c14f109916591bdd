"""High-level orchestration for one briefing generation run."""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from .archive import ArchiveStore
from .briefing import assemble_briefing
from .config import Config, load_config
from .curator import CompletionClient, Curator, DeepSeekClient, filter_and_rank
from .dedupe import deduplicate_items
from .errors import ConfigError, NoItemsError
from .fetchers import NewsFetcher, build_fetchers, collect_raw_items, parse_timestamp
from .models import Briefing, DailyBriefings, RawNewsItem
from .sources import SOURCES, SourcesConfig

LOGGER = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class RunResult:
    briefing: Briefing
    raw_count: int
    unique_count: int
    curated_count: int
    archive: List[DailyBriefings] = field(default_factory=list)


def sort_by_recency(items: Sequence[RawNewsItem]) -> List[RawNewsItem]:
    """Newest first; items without a parseable date go last."""

    return sorted(items, key=lambda item: parse_timestamp(item.published_at) or _OLDEST, reverse=True)


def build_briefing(
    config: Config,
    sources: SourcesConfig = SOURCES,
    client: Optional[CompletionClient] = None,
    fetchers: Optional[Sequence[NewsFetcher]] = None,
    now: Optional[datetime] = None,
) -> RunResult:
    """Fetch, deduplicate, curate and assemble the briefing for ``now``."""

    now = now or datetime.now()
    if fetchers is None:
        if not sources.enabled_kinds():
            raise ConfigError("No news sources are enabled")
        fetchers = build_fetchers(sources)

    LOGGER.info("Fetching news from %d source kinds", len(fetchers))
    raw_items = collect_raw_items(fetchers)
    if not raw_items:
        raise NoItemsError("No items fetched. Check source configuration.")

    unique_items = sort_by_recency(deduplicate_items(raw_items, threshold=config.similarity_threshold))
    to_process = unique_items[: config.max_items_to_process]
    LOGGER.info(
        "Raw items: %d, after deduplication: %d, processing top %d",
        len(raw_items),
        len(unique_items),
        len(to_process),
    )

    client = client or DeepSeekClient(
        config.api_key,
        api_url=config.api_url,
        model=config.model,
        timeout=config.request_timeout,
    )
    curator = Curator(client, batch_size=config.batch_size, batch_delay=config.batch_delay_seconds)
    results = curator.process_items(to_process)
    ranked = filter_and_rank(results, min_score=config.min_relevance_score)

    briefing = assemble_briefing(ranked, now, max_items=config.max_items_per_briefing)
    LOGGER.info("Built %s briefing for %s with %d items", briefing.period, briefing.date, len(briefing.items))
    return RunResult(
        briefing=briefing,
        raw_count=len(raw_items),
        unique_count=len(unique_items),
        curated_count=len(results),
    )


def run(
    config: Optional[Config] = None,
    sources: SourcesConfig = SOURCES,
    client: Optional[CompletionClient] = None,
    fetchers: Optional[Sequence[NewsFetcher]] = None,
    now: Optional[datetime] = None,
) -> RunResult:
    """Generate a briefing and merge it into the persisted archive."""

    config = config or load_config()
    now = now or datetime.now()
    result = build_briefing(config, sources=sources, client=client, fetchers=fetchers, now=now)

    store = ArchiveStore(config.output_path, max_days=config.max_days_to_keep)
    archive = store.merge(result.briefing, today=now.date())
    store.save()
    return replace(result, archive=archive)


def _terminate() -> None:
    logging.shutdown()
    os._exit(1)


class RunWatchdog:
    """Terminates the process if the run outlives ``seconds``.

    In-flight requests are not cancelled; the whole process goes down.
    """

    def __init__(self, seconds: float, on_timeout: Callable[[], None] = _terminate) -> None:
        self.seconds = seconds
        self._on_timeout = on_timeout
        self._timer: Optional[threading.Timer] = None

    def _fire(self) -> None:
        LOGGER.critical(
            "Run exceeded maximum execution time of %g seconds; an external API is likely unresponsive",
            self.seconds,
        )
        self._on_timeout()

    def start(self) -> "RunWatchdog":
        self._timer = threading.Timer(self.seconds, self._fire)
        self._timer.daemon = True
        self._timer.start()
        return self

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def __enter__(self) -> "RunWatchdog":
        return self.start()

    def __exit__(self, *exc_info) -> None:
        self.cancel()


__all__ = [
    "RunResult",
    "RunWatchdog",
    "build_briefing",
    "run",
    "sort_by_recency",
]
