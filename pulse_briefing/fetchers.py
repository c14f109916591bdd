"""News source fetchers for AI coverage.

Every fetcher normalizes its source into ``RawNewsItem`` objects and never
raises: network, parse and timeout failures are logged and turn into an
empty contribution for the failing source only.
"""

from __future__ import annotations

import logging
import re
import time
import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List, Optional, Sequence, TypeVar

import feedparser
import requests
from bs4 import BeautifulSoup
from dateutil import parser as date_parser

from .models import RawNewsItem
from .sources import (
    BlueskyAccount,
    HackerNewsConfig,
    RedditSubreddit,
    RSSFeed,
    SourcesConfig,
    TwitterAccount,
)

LOGGER = logging.getLogger(__name__)

USER_AGENT = "Pulse News Aggregator/1.0"
REQUEST_TIMEOUT = 10
MAX_AGE_HOURS = 24
MAX_CONTENT_CHARS = 2000

IdFactory = Callable[[str], str]
Clock = Callable[[], datetime]
T = TypeVar("T")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def random_id(prefix: str) -> str:
    """Build a per-run unique id: ``<prefix>-<epoch ms>-<random suffix>``."""

    return f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


def slugify(value: str) -> str:
    return re.sub(r"\s+", "-", value.strip().lower())


def strip_html(raw_html: Optional[str]) -> str:
    """Remove markup and collapse whitespace."""

    if not raw_html:
        return ""
    text = BeautifulSoup(raw_html, "html.parser").get_text(" ")
    return " ".join(text.split())


def parse_timestamp(value: object) -> Optional[datetime]:
    """Parse a source timestamp into an aware UTC datetime."""

    if value is None or value == "":
        return None
    try:
        if isinstance(value, (int, float)):
            parsed = datetime.fromtimestamp(value, tz=timezone.utc)
        else:
            parsed = date_parser.parse(str(value))
    except (ValueError, TypeError, OverflowError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def is_recent(published_at: datetime, now: datetime, max_age_hours: int = MAX_AGE_HOURS) -> bool:
    """Return True when the item is at most ``max_age_hours`` old."""

    return now - published_at <= timedelta(hours=max_age_hours)


def _fetch_concurrently(
    fetch_one: Callable[[T], List[RawNewsItem]],
    configs: Sequence[T],
    describe: Callable[[T], str],
    max_workers: int = 8,
) -> List[RawNewsItem]:
    """Run ``fetch_one`` for every config on a thread pool.

    Results are concatenated in config order regardless of completion order.
    """

    if not configs:
        return []
    results: List[List[RawNewsItem]] = [[] for _ in configs]
    with ThreadPoolExecutor(max_workers=min(max_workers, len(configs))) as executor:
        future_to_index = {executor.submit(fetch_one, config): index for index, config in enumerate(configs)}
        for future in as_completed(future_to_index):
            index = future_to_index[future]
            try:
                results[index] = future.result()
            except Exception as exc:  # pylint: disable=broad-exception-caught
                LOGGER.error("%s failed unexpectedly: %s", describe(configs[index]), exc)
    return [item for batch in results for item in batch]


class NewsFetcher:
    """Abstract base class for source-specific fetchers."""

    name: str = "base"
    disabled: bool = False

    def fetch(self) -> List[RawNewsItem]:
        raise NotImplementedError


class RSSFetcher(NewsFetcher):
    name = "rss"

    MAX_ENTRIES = 10

    def __init__(
        self,
        feeds: Sequence[RSSFeed],
        id_factory: Optional[IdFactory] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.feeds = list(feeds)
        self._id_factory = id_factory or random_id
        self._clock = clock or utc_now

    def fetch(self) -> List[RawNewsItem]:
        items = _fetch_concurrently(self.fetch_feed, self.feeds, lambda feed: f"RSS feed {feed.name}")
        LOGGER.info("[RSS] Total: %d items from %d feeds", len(items), len(self.feeds))
        return items

    def fetch_feed(self, feed: RSSFeed) -> List[RawNewsItem]:
        LOGGER.debug("[RSS] Fetching: %s (%s)", feed.name, feed.url)
        try:
            response = requests.get(feed.url, timeout=REQUEST_TIMEOUT, headers={"User-Agent": USER_AGENT})
            response.raise_for_status()
        except requests.RequestException as exc:
            LOGGER.error("[RSS] Request for %s failed: %s", feed.name, exc)
            return []

        parsed = feedparser.parse(response.content)
        if parsed.get("bozo") and not parsed.entries:
            LOGGER.error("[RSS] Could not parse %s: %s", feed.name, parsed.get("bozo_exception"))
            return []

        now = self._clock()
        prefix = f"rss-{slugify(feed.name)}"
        items: List[RawNewsItem] = []
        for entry in parsed.entries[: self.MAX_ENTRIES]:
            title = (entry.get("title") or "").strip()
            link = entry.get("link")
            if not title or not link:
                continue
            published = parse_timestamp(entry.get("published") or entry.get("updated"))
            if published is None:
                published = now
            elif not is_recent(published, now):
                LOGGER.debug("[RSS] Skipping stale entry from %s: %s", feed.name, title)
                continue
            items.append(
                RawNewsItem(
                    id=self._id_factory(prefix),
                    title=title,
                    content=strip_html(self._entry_body(entry))[:MAX_CONTENT_CHARS],
                    url=link,
                    source=feed.name,
                    source_type="rss",
                    category=feed.category,
                    published_at=published.isoformat(),
                    author=entry.get("author") or None,
                )
            )
        LOGGER.info("[RSS] Found %d items from %s", len(items), feed.name)
        return items

    @staticmethod
    def _entry_body(entry) -> str:
        body = entry.get("summary") or entry.get("description")
        if body:
            return body
        for block in entry.get("content") or []:
            if block.get("value"):
                return block["value"]
        return ""


class RedditFetcher(NewsFetcher):
    """Hot listings from the public, unauthenticated subreddit JSON endpoint."""

    name = "reddit"

    API_URL = "https://www.reddit.com/r/{name}/hot.json"
    MIN_SCORE = 10

    def __init__(
        self,
        subreddits: Sequence[RedditSubreddit],
        delay_seconds: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.subreddits = list(subreddits)
        self.delay_seconds = delay_seconds
        self._sleep = sleep

    def fetch(self) -> List[RawNewsItem]:
        # Sequential on purpose: Reddit throttles bursts from one client.
        items: List[RawNewsItem] = []
        for index, subreddit in enumerate(self.subreddits):
            if index:
                self._sleep(self.delay_seconds)
            try:
                items.extend(self.fetch_subreddit(subreddit))
            except Exception as exc:  # pylint: disable=broad-exception-caught
                LOGGER.error("[Reddit] r/%s failed unexpectedly: %s", subreddit.name, exc)
        LOGGER.info("[Reddit] Total: %d posts from %d subreddits", len(items), len(self.subreddits))
        return items

    def fetch_subreddit(self, subreddit: RedditSubreddit) -> List[RawNewsItem]:
        try:
            response = requests.get(
                self.API_URL.format(name=subreddit.name),
                params={"limit": subreddit.limit},
                headers={"User-Agent": USER_AGENT},
                timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            children = response.json()["data"]["children"]
        except requests.RequestException as exc:
            LOGGER.error("[Reddit] Request for r/%s failed: %s", subreddit.name, exc)
            return []
        except (ValueError, KeyError, TypeError) as exc:
            LOGGER.error("[Reddit] Unexpected payload for r/%s: %s", subreddit.name, exc)
            return []

        items: List[RawNewsItem] = []
        for child in children:
            post = child.get("data") or {}
            if not post.get("id"):
                LOGGER.debug("[Reddit] Skipping post without id in r/%s", subreddit.name)
                continue
            if post.get("stickied") or (post.get("score") or 0) < self.MIN_SCORE:
                continue
            name = post.get("subreddit") or subreddit.name
            link = post.get("url") or ""
            if not link.startswith("http"):
                link = f"https://reddit.com{post.get('permalink', '')}"
            published = parse_timestamp(post.get("created_utc"))
            content = post.get("selftext") or f"Discussion on r/{name} with {post.get('num_comments', 0)} comments"
            items.append(
                RawNewsItem(
                    id=f"reddit-{post['id']}",
                    title=post.get("title", ""),
                    content=content[:MAX_CONTENT_CHARS],
                    url=link,
                    source=f"r/{name}",
                    source_type="reddit",
                    category=subreddit.category,
                    published_at=(published or utc_now()).isoformat(),
                    author=post.get("author"),
                )
            )
        LOGGER.info("[Reddit] Found %d posts from r/%s", len(items), subreddit.name)
        return items


class HackerNewsFetcher(NewsFetcher):
    """Keyword searches against the HackerNews Algolia index."""

    name = "hackernews"

    API_URL = "https://hn.algolia.com/api/v1/search"
    HITS_PER_PAGE = 20

    def __init__(self, config: HackerNewsConfig, clock: Optional[Clock] = None) -> None:
        self.config = config
        self._clock = clock or utc_now

    def fetch(self) -> List[RawNewsItem]:
        if not self.config.enabled:
            LOGGER.info("[HackerNews] Disabled, skipping")
            return []

        cutoff = int((self._clock() - timedelta(hours=MAX_AGE_HOURS)).timestamp())
        items: List[RawNewsItem] = []
        seen_ids = set()
        for query in self.config.queries:
            try:
                hits = self._search(query, cutoff)
            except Exception as exc:  # pylint: disable=broad-exception-caught
                LOGGER.error("[HackerNews] Query %r failed: %s", query, exc)
                continue
            for hit in hits:
                object_id = str(hit.get("objectID", ""))
                if not object_id or object_id in seen_ids or not hit.get("url"):
                    continue
                seen_ids.add(object_id)
                items.append(self._to_item(hit))
            LOGGER.debug("[HackerNews] Query %r: %d hits", query, len(hits))

        items = items[: self.config.limit]
        LOGGER.info("[HackerNews] Total unique items: %d", len(items))
        return items

    def _search(self, query: str, cutoff: int) -> List[dict]:
        params = {
            "tags": "story",
            "query": query,
            "numericFilters": f"created_at_i>{cutoff},points>{self.config.min_points}",
            "hitsPerPage": self.HITS_PER_PAGE,
        }
        response = requests.get(self.API_URL, params=params, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        return response.json().get("hits", [])

    def _to_item(self, hit: dict) -> RawNewsItem:
        title = hit.get("title") or ""
        content = strip_html(hit.get("story_text")) or (
            f"{title} - Discussion on HackerNews with {hit.get('num_comments', 0)} comments "
            f"and {hit.get('points', 0)} points."
        )
        published = parse_timestamp(hit.get("created_at"))
        return RawNewsItem(
            id=f"hn-{hit['objectID']}",
            title=title,
            content=content[:MAX_CONTENT_CHARS],
            url=hit["url"],
            source="HackerNews",
            source_type="hackernews",
            category=self.config.category,
            published_at=(published or self._clock()).isoformat(),
            author=hit.get("author"),
        )


class BlueskyFetcher(NewsFetcher):
    name = "bluesky"

    API_BASE = "https://bsky.social/xrpc"
    FEED_LIMIT = 20
    MIN_TEXT_LENGTH = 50

    def __init__(self, accounts: Sequence[BlueskyAccount], clock: Optional[Clock] = None) -> None:
        self.accounts = list(accounts)
        self._clock = clock or utc_now

    def fetch(self) -> List[RawNewsItem]:
        items = _fetch_concurrently(self.fetch_account, self.accounts, lambda account: f"Bluesky @{account.handle}")
        LOGGER.info("[Bluesky] Total: %d items from %d accounts", len(items), len(self.accounts))
        return items

    def resolve_did(self, handle: str) -> Optional[str]:
        """Resolve a handle to its decentralized identifier."""

        try:
            response = requests.get(
                f"{self.API_BASE}/com.atproto.identity.resolveHandle",
                params={"handle": handle},
                timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            return response.json().get("did")
        except (requests.RequestException, ValueError) as exc:
            LOGGER.error("[Bluesky] Failed to resolve handle %s: %s", handle, exc)
            return None

    def fetch_account(self, account: BlueskyAccount) -> List[RawNewsItem]:
        did = self.resolve_did(account.handle)
        if not did:
            return []
        try:
            response = requests.get(
                f"{self.API_BASE}/app.bsky.feed.getAuthorFeed",
                params={"actor": did, "limit": self.FEED_LIMIT},
                timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            feed = response.json().get("feed", [])
        except (requests.RequestException, ValueError) as exc:
            LOGGER.error("[Bluesky] Failed to fetch feed for %s: %s", account.handle, exc)
            return []

        now = self._clock()
        items: List[RawNewsItem] = []
        for entry in feed:
            post = entry.get("post") or {}
            record = post.get("record") or {}
            text = record.get("text")
            if not text:
                continue
            published = parse_timestamp(record.get("createdAt"))
            if published is None or not is_recent(published, now):
                continue
            if len(text) < self.MIN_TEXT_LENGTH:
                continue

            external = (post.get("embed") or {}).get("external") or (record.get("embed") or {}).get("external") or {}
            content = text
            if external.get("title"):
                content += f"\n\nLinked: {external['title']}"
            if external.get("description"):
                content += f"\n{external['description']}"

            post_id = post.get("uri", "").rsplit("/", 1)[-1]
            url = external.get("uri") or f"https://bsky.app/profile/{account.handle}/post/{post_id}"
            author = post.get("author") or {}
            items.append(
                RawNewsItem(
                    id=f"bluesky-{account.handle}-{post.get('cid', post_id)}",
                    title=generate_title(text, external.get("title")),
                    content=content[:MAX_CONTENT_CHARS],
                    url=url,
                    source=f"@{account.handle} (Bluesky)",
                    source_type="bluesky",
                    category=account.category,
                    published_at=published.isoformat(),
                    author=author.get("displayName") or account.handle,
                )
            )
        LOGGER.info("[Bluesky] Found %d recent posts from @%s", len(items), account.handle)
        return items


def generate_title(text: str, external_title: Optional[str] = None) -> str:
    """Title for a social post: link title, else first sentence, else truncated text."""

    if external_title and len(external_title) > 10:
        return external_title[:100]
    first_sentence = re.split(r"[.!?]", text, maxsplit=1)[0]
    if 20 < len(first_sentence) < 100:
        return first_sentence.strip()
    return text[:100].strip() + ("..." if len(text) > 100 else "")


class TwitterFetcher(NewsFetcher):
    """Placeholder for X/Twitter; paid API access is not configured.

    Returns nothing on purpose. Hand-picked posts go through
    :func:`create_manual_tweet` instead.
    """

    name = "twitter"
    disabled = True

    def __init__(self, accounts: Sequence[TwitterAccount]) -> None:
        self.accounts = list(accounts)

    def fetch(self) -> List[RawNewsItem]:
        LOGGER.info("[Twitter] %d accounts configured (fetching disabled)", len(self.accounts))
        return []


def create_manual_tweet(
    handle: str,
    text: str,
    url: str,
    category: str,
    id_factory: Optional[IdFactory] = None,
    clock: Optional[Clock] = None,
) -> RawNewsItem:
    """Build a raw item for a hand-curated post."""

    id_factory = id_factory or random_id
    now = (clock or utc_now)()
    return RawNewsItem(
        id=id_factory("twitter-manual"),
        title=f"@{handle}: {text[:100]}{'...' if len(text) > 100 else ''}",
        content=text,
        url=url,
        source=f"@{handle}",
        source_type="twitter",
        category=category,
        published_at=now.isoformat(),
        author=handle,
    )


def build_fetchers(
    sources: SourcesConfig,
    id_factory: Optional[IdFactory] = None,
    clock: Optional[Clock] = None,
) -> List[NewsFetcher]:
    """Instantiate one fetcher per enabled source kind."""

    fetchers: List[NewsFetcher] = []
    enabled = set(sources.enabled_kinds())
    if "rss" in enabled:
        fetchers.append(RSSFetcher(sources.rss_feeds, id_factory=id_factory, clock=clock))
    if "reddit" in enabled:
        fetchers.append(RedditFetcher(sources.reddit_subreddits))
    if "twitter" in enabled:
        fetchers.append(TwitterFetcher(sources.twitter_accounts))
    if "hackernews" in enabled:
        fetchers.append(HackerNewsFetcher(sources.hackernews, clock=clock))
    if "bluesky" in enabled:
        fetchers.append(BlueskyFetcher(sources.bluesky_accounts, clock=clock))
    return fetchers


def collect_raw_items(fetchers: Iterable[NewsFetcher]) -> List[RawNewsItem]:
    """Run all fetchers concurrently and wait for every one to settle."""

    fetchers = list(fetchers)
    items = _fetch_concurrently(lambda fetcher: fetcher.fetch(), fetchers, lambda fetcher: f"Fetcher {fetcher.name}")
    for fetcher in fetchers:
        if fetcher.disabled:
            LOGGER.debug("Fetcher %s is a disabled placeholder", fetcher.name)
    LOGGER.info("Collected %d raw items from %d fetchers", len(items), len(fetchers))
    return items


__all__ = [
    "BlueskyFetcher",
    "HackerNewsFetcher",
    "NewsFetcher",
    "RSSFetcher",
    "RedditFetcher",
    "TwitterFetcher",
    "build_fetchers",
    "collect_raw_items",
    "create_manual_tweet",
    "generate_title",
    "is_recent",
    "parse_timestamp",
    "random_id",
    "strip_html",
]
