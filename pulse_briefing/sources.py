"""News source configuration.

Edit ``SOURCES`` to add or remove sources; it is read once at startup.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class RSSFeed:
    url: str
    name: str
    category: str


@dataclass(frozen=True)
class RedditSubreddit:
    name: str
    category: str
    limit: int = 10


@dataclass(frozen=True)
class HackerNewsConfig:
    enabled: bool = True
    queries: List[str] = field(default_factory=list)
    min_points: int = 100
    limit: int = 10
    category: str = "industry"


@dataclass(frozen=True)
class BlueskyAccount:
    handle: str
    category: str


@dataclass(frozen=True)
class TwitterAccount:
    handle: str
    category: str


@dataclass(frozen=True)
class SourcesConfig:
    rss_enabled: bool = True
    rss_feeds: List[RSSFeed] = field(default_factory=list)
    reddit_enabled: bool = False
    reddit_subreddits: List[RedditSubreddit] = field(default_factory=list)
    hackernews: HackerNewsConfig = field(default_factory=lambda: HackerNewsConfig(enabled=False))
    bluesky_enabled: bool = False
    bluesky_accounts: List[BlueskyAccount] = field(default_factory=list)
    twitter_enabled: bool = False
    twitter_accounts: List[TwitterAccount] = field(default_factory=list)

    def enabled_kinds(self) -> List[str]:
        kinds = []
        if self.rss_enabled and self.rss_feeds:
            kinds.append("rss")
        if self.reddit_enabled and self.reddit_subreddits:
            kinds.append("reddit")
        if self.twitter_enabled and self.twitter_accounts:
            kinds.append("twitter")
        if self.hackernews.enabled and self.hackernews.queries:
            kinds.append("hackernews")
        if self.bluesky_enabled and self.bluesky_accounts:
            kinds.append("bluesky")
        return kinds


SOURCES = SourcesConfig(
    rss_enabled=True,
    rss_feeds=[
        RSSFeed("https://techcrunch.com/category/artificial-intelligence/feed/", "TechCrunch AI", "industry"),
        RSSFeed("https://www.wired.com/feed/tag/ai/latest/rss", "Wired AI", "industry"),
        RSSFeed("https://openai.com/blog/rss.xml", "OpenAI Blog", "releases"),
        RSSFeed("https://blog.google/technology/ai/rss/", "Google AI Blog", "releases"),
        RSSFeed("http://export.arxiv.org/rss/cs.AI", "ArXiv AI", "research"),
        RSSFeed("https://huggingface.co/blog/feed.xml", "Hugging Face Blog", "tools"),
    ],
    # GitHub Actions runners get 403s from the public JSON endpoint.
    reddit_enabled=False,
    reddit_subreddits=[
        RedditSubreddit("MachineLearning", "research", 10),
        RedditSubreddit("LocalLLaMA", "tools", 10),
        RedditSubreddit("artificial", "industry", 5),
        RedditSubreddit("ChatGPT", "workflows", 5),
        RedditSubreddit("ClaudeAI", "workflows", 5),
    ],
    hackernews=HackerNewsConfig(
        enabled=True,
        queries=["LLM", "OpenAI", "AI"],
        min_points=100,
        limit=10,
        category="industry",
    ),
    # Author feeds started answering 401 without a session.
    bluesky_enabled=False,
    bluesky_accounts=[
        BlueskyAccount("openai.bsky.social", "releases"),
        BlueskyAccount("anthropic.bsky.social", "releases"),
        BlueskyAccount("huggingface.co", "tools"),
        BlueskyAccount("karpathy.bsky.social", "research"),
        BlueskyAccount("simonw.bsky.social", "tools"),
        BlueskyAccount("swyx.io", "industry"),
        BlueskyAccount("cursor.com", "tools"),
        BlueskyAccount("replicate.com", "tools"),
    ],
    twitter_enabled=True,
    twitter_accounts=[
        TwitterAccount("OpenAI", "releases"),
        TwitterAccount("AnthropicAI", "releases"),
        TwitterAccount("GoogleAI", "releases"),
        TwitterAccount("MistralAI", "releases"),
        TwitterAccount("MetaAI", "releases"),
        TwitterAccount("cursor_ai", "tools"),
        TwitterAccount("v0", "tools"),
        TwitterAccount("karpathy", "research"),
        TwitterAccount("ylecun", "research"),
        TwitterAccount("sama", "industry"),
    ],
)


__all__ = [
    "BlueskyAccount",
    "HackerNewsConfig",
    "RSSFeed",
    "RedditSubreddit",
    "SOURCES",
    "SourcesConfig",
    "TwitterAccount",
]
