"""LLM curation: turn raw stories into scored briefing items."""

from __future__ import annotations

import json
import logging
import re
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Sequence
from urllib.parse import urlparse

import requests

from .errors import CompletionError
from .models import (
    TAG_TYPES,
    BriefingItem,
    BriefingSource,
    BriefingTag,
    RawNewsItem,
    SourceOrigin,
    WhatToTry,
)

LOGGER = logging.getLogger(__name__)

PROMPT_CONTENT_CHARS = 1500
DEFAULT_RELEVANCE = 5
DEFAULT_READ_TIME = 2

SYSTEM_PROMPT = """You are an expert AI news curator for tech founders building AI products.

Your task: Transform raw news into HIGH-SIGNAL briefings that founders can act on.

QUALITY CRITERIA:
- Relevance: Is this directly useful for someone building AI products?
- Actionability: Can the reader DO something with this information?
- Timeliness: Is this news (not evergreen content)?
- Signal: Does this contain genuine insight (not just hype)?

Output ONLY valid JSON with this exact structure:
{
  "relevanceScore": 7,
  "title": "Catchy headline (max 80 chars)",
  "tldr": "1-2 sentence summary - what happened and why it matters",
  "whyItMatters": ["Business impact", "Technical impact"],
  "whatToTry": {
    "description": "Specific action the reader can take - a clear, actionable suggestion in plain text",
    "note": "optional: caveat or tip"
  },
  "tags": [{"label": "Tag", "type": "model|tool|topic"}],
  "readTimeMinutes": 2
}

RELEVANCE SCORING (1-10):
- 8-10: Breaking releases, major funding, breakthrough research, new APIs
- 5-7: Useful tools, interesting papers, significant industry moves
- 1-4: Rehashed news, hype pieces, minor updates, opinion pieces

GUIDELINES:
- Be concise and actionable
- Focus on practical implications for founders
- Be skeptical of marketing claims - avoid hype
- readTimeMinutes: 1-5 based on complexity
- DO NOT include code snippets - keep "whatToTry" as plain text suggestions only
- Tags: "model" for AI models, "tool" for products, "topic" for concepts"""


class CompletionClient(Protocol):
    """Anything that can answer a system + user prompt pair with text."""

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        ...


class DeepSeekClient:
    """Chat-completions client for the DeepSeek API."""

    def __init__(
        self,
        api_key: str,
        api_url: str = "https://api.deepseek.com/chat/completions",
        model: str = "deepseek-chat",
        timeout: float = 30.0,
    ) -> None:
        self.api_key = api_key
        self.api_url = api_url
        self.model = model
        self.timeout = timeout

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": 0.3,
            "max_tokens": 1000,
        }
        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
        try:
            response = requests.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)
        except requests.Timeout as exc:
            raise CompletionError(f"request timed out after {self.timeout:g}s") from exc
        except requests.RequestException as exc:
            raise CompletionError(f"request failed: {exc}") from exc

        if not response.ok:
            raise CompletionError(f"API error {response.status_code}: {response.text[:200]}")
        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise CompletionError(f"unexpected response shape: {exc}") from exc
        if not content:
            raise CompletionError("empty response")
        return content


@dataclass
class Curation:
    """Validated fields of one model reply."""

    title: str
    tldr: str
    why_it_matters: List[str]
    what_to_try: WhatToTry
    tags: List[Dict[str, str]] = field(default_factory=list)
    relevance_score: float = DEFAULT_RELEVANCE
    read_time_minutes: int = DEFAULT_READ_TIME


@dataclass
class CurationResult:
    item: BriefingItem
    relevance_score: float


def build_user_prompt(item: RawNewsItem) -> str:
    return (
        "Transform this news into a briefing item:\n\n"
        f"Title: {item.title}\n"
        f"Source: {item.source}\n"
        f"Content: {item.content[:PROMPT_CONTENT_CHARS]}\n"
        f"URL: {item.url}\n"
        f"Category: {item.category}\n\n"
        "Return only valid JSON."
    )


_FENCE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    return _FENCE.sub("", text).strip()


def _number(value: Any, default: float, low: float, high: float) -> float:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"expected a number, got {value!r}")
    number = float(value)
    return min(max(number, low), high)


def parse_curation(text: str) -> Curation:
    """Parse a model reply into a Curation.

    Raises ValueError when the reply is not JSON or misses required fields.
    """

    data = json.loads(strip_code_fences(text))
    if not isinstance(data, dict):
        raise ValueError("reply is not a JSON object")

    title = data.get("title")
    tldr = data.get("tldr")
    if not isinstance(title, str) or not title.strip():
        raise ValueError("missing title")
    if not isinstance(tldr, str) or not tldr.strip():
        raise ValueError("missing tldr")

    why = data.get("whyItMatters", [])
    if isinstance(why, str):
        why = [why]
    if not isinstance(why, list) or not all(isinstance(point, str) for point in why):
        raise ValueError("whyItMatters must be a list of strings")

    raw_try = data.get("whatToTry")
    if isinstance(raw_try, str):
        raw_try = {"description": raw_try}
    if not isinstance(raw_try, dict) or not isinstance(raw_try.get("description"), str):
        raise ValueError("whatToTry.description is required")

    tags = []
    for tag in data.get("tags") or []:
        if not isinstance(tag, dict) or not tag.get("label"):
            continue
        if tag.get("type") not in TAG_TYPES:
            LOGGER.debug("Dropping tag %r with unknown type %r", tag.get("label"), tag.get("type"))
            continue
        tags.append({"label": str(tag["label"]), "type": tag["type"]})

    return Curation(
        title=title.strip(),
        tldr=tldr.strip(),
        why_it_matters=why,
        what_to_try=WhatToTry(
            description=raw_try["description"],
            code=raw_try.get("code") or None,
            note=raw_try.get("note") or None,
        ),
        tags=tags,
        relevance_score=_number(data.get("relevanceScore"), DEFAULT_RELEVANCE, 1, 10),
        read_time_minutes=int(round(_number(data.get("readTimeMinutes"), DEFAULT_READ_TIME, 1, 5))),
    )


def extract_domain(url: str) -> str:
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return "unknown"
    if not hostname:
        return "unknown"
    return re.sub(r"^www\.", "", hostname)


def infer_source_type(url: str) -> str:
    if "arxiv.org" in url:
        return "paper"
    if "github.com" in url:
        return "repository"
    if "blog" in url or "medium.com" in url:
        return "blog"
    return "article"


def build_sources(item: RawNewsItem) -> List[BriefingSource]:
    """One BriefingSource per distinct origin URL; a single one for unmerged items."""

    if not item.is_merged:
        return [
            BriefingSource(
                id=f"src-{item.id}",
                title=item.title,
                url=item.url,
                domain=extract_domain(item.url),
                type=infer_source_type(item.url),
            )
        ]

    sources: List[BriefingSource] = []
    seen_urls = set()
    for origin in item.origins:
        if origin.url in seen_urls:
            continue
        seen_urls.add(origin.url)
        sources.append(source_from_origin(item.id, len(sources), origin))
    return sources


def source_from_origin(item_id: str, index: int, origin: SourceOrigin) -> BriefingSource:
    return BriefingSource(
        id=f"src-{item_id}-{index}",
        title=origin.title,
        url=origin.url,
        domain=extract_domain(origin.url),
        type=infer_source_type(origin.url),
    )


def to_briefing_item(item: RawNewsItem, curation: Curation) -> BriefingItem:
    return BriefingItem(
        id=item.id,
        title=curation.title,
        tldr=curation.tldr,
        why_it_matters=list(curation.why_it_matters),
        what_to_try=curation.what_to_try,
        sources=build_sources(item),
        tags=[
            BriefingTag(id=f"tag-{item.id}-{index}", label=tag["label"], type=tag["type"])
            for index, tag in enumerate(curation.tags)
        ],
        category=item.category,
        read_time_minutes=curation.read_time_minutes,
        published_at=item.published_at,
        is_read=False,
    )


class Curator:
    """Runs one completion per item, in concurrent fixed-size batches."""

    def __init__(
        self,
        client: CompletionClient,
        batch_size: int = 15,
        batch_delay: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        self.client = client
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self._sleep = sleep

    def process_item(self, item: RawNewsItem) -> Optional[CurationResult]:
        """Curate one item; failures are logged and yield None."""

        try:
            reply = self.client.complete(SYSTEM_PROMPT, build_user_prompt(item))
            curation = parse_curation(reply)
        except CompletionError as exc:
            LOGGER.error("[Curator] Completion failed for %r: %s", item.title, exc)
            return None
        except ValueError as exc:
            LOGGER.error("[Curator] Malformed reply for %r: %s", item.title, exc)
            return None
        except Exception as exc:  # pylint: disable=broad-exception-caught
            LOGGER.exception("[Curator] Unexpected error for %r: %s", item.title, exc)
            return None
        return CurationResult(item=to_briefing_item(item, curation), relevance_score=curation.relevance_score)

    def process_items(self, items: Sequence[RawNewsItem]) -> List[CurationResult]:
        """Curate items batch by batch; results keep input order."""

        LOGGER.info("[Curator] Processing %d items in batches of %d", len(items), self.batch_size)
        results: List[CurationResult] = []
        for start in range(0, len(items), self.batch_size):
            batch = items[start : start + self.batch_size]
            LOGGER.info("[Curator] Batch %d: processing %d items", start // self.batch_size + 1, len(batch))
            with ThreadPoolExecutor(max_workers=len(batch)) as executor:
                results.extend(result for result in executor.map(self.process_item, batch) if result)
            if start + self.batch_size < len(items) and self.batch_delay > 0:
                self._sleep(self.batch_delay)
        LOGGER.info("[Curator] Curated %d of %d items", len(results), len(items))
        return results


def filter_and_rank(results: Iterable[CurationResult], min_score: float = DEFAULT_RELEVANCE) -> List[BriefingItem]:
    """Drop results scored below ``min_score`` and order the rest by score.

    Equal scores keep their encounter order.
    """

    results = list(results)
    kept = [result for result in results if result.relevance_score >= min_score]
    kept.sort(key=lambda result: result.relevance_score, reverse=True)
    LOGGER.info("[Curator] %d of %d items passed relevance filter (>=%s)", len(kept), len(results), min_score)
    return [result.item for result in kept]


__all__ = [
    "CompletionClient",
    "Curation",
    "CurationResult",
    "Curator",
    "DeepSeekClient",
    "SYSTEM_PROMPT",
    "build_sources",
    "build_user_prompt",
    "extract_domain",
    "filter_and_rank",
    "infer_source_type",
    "parse_curation",
    "strip_code_fences",
]
