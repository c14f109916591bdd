"""Group near-duplicate stories and merge each group into one item.

Clustering is greedy and seed-based: items are visited in input order, each
unassigned item seeds a new group, and every later unassigned item whose
term overlap with the seed reaches the threshold joins it. Membership is
never compared against non-seed members, so results depend on input order.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import FrozenSet, List, Sequence

from .models import RawNewsItem, SourceOrigin

LOGGER = logging.getLogger(__name__)

SIMILARITY_THRESHOLD = 0.35
SIMILARITY_CONTENT_CHARS = 500
MERGED_CONTENT_CHARS = 3000

STOP_WORDS: FrozenSet[str] = frozenset(
    """
    the a an is are was were be been being have has had do does did will would could
    should may might must shall can need dare ought used to of in for on with at by
    from as into through during before after above below between under again further
    then once here there when where why how all each few more most other some such no
    nor not only own same so than too very just and but if or because until while
    although though new now says said according report reports its this that these
    those it they we you he she
    """.split()
)

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")


def extract_key_terms(text: str) -> FrozenSet[str]:
    """Lower-cased significant terms: punctuation stripped, stop words and short words removed."""

    words = _NON_ALNUM.sub(" ", text.lower()).split()
    return frozenset(word for word in words if len(word) > 2 and word not in STOP_WORDS)


def jaccard(left: FrozenSet[str], right: FrozenSet[str]) -> float:
    if not left or not right:
        return 0.0
    return len(left & right) / len(left | right)


def item_terms(item: RawNewsItem) -> FrozenSet[str]:
    return extract_key_terms(f"{item.title} {item.content[:SIMILARITY_CONTENT_CHARS]}")


def calculate_similarity(first: RawNewsItem, second: RawNewsItem) -> float:
    return jaccard(item_terms(first), item_terms(second))


def _origins(item: RawNewsItem):
    return item.origins or (SourceOrigin(source=item.source, title=item.title, url=item.url),)


def merge_items(group: Sequence[RawNewsItem]) -> RawNewsItem:
    """Merge a group of similar items into a new item.

    The item with the longest content becomes the primary; the remaining
    members follow in their original order.
    """

    if not group:
        raise ValueError("cannot merge an empty group")
    primary_index = max(range(len(group)), key=lambda index: (len(group[index].content), -index))
    ordered = [group[primary_index]] + [item for index, item in enumerate(group) if index != primary_index]
    primary = ordered[0]

    combined = "\n\n".join(f"[{item.source}]: {item.content}" for item in ordered)
    origins = tuple(origin for item in ordered for origin in _origins(item))
    return replace(
        primary,
        content=combined[:MERGED_CONTENT_CHARS],
        source=", ".join(item.source for item in ordered),
        origins=origins,
    )


def deduplicate_items(items: Sequence[RawNewsItem], threshold: float = SIMILARITY_THRESHOLD) -> List[RawNewsItem]:
    """Cluster similar items and merge each multi-item cluster."""

    LOGGER.info("[Dedup] Starting deduplication of %d items", len(items))
    terms = [item_terms(item) for item in items]
    assigned = [False] * len(items)
    groups: List[List[RawNewsItem]] = []

    for seed in range(len(items)):
        if assigned[seed]:
            continue
        assigned[seed] = True
        group = [items[seed]]
        for candidate in range(seed + 1, len(items)):
            if assigned[candidate]:
                continue
            if jaccard(terms[seed], terms[candidate]) >= threshold:
                group.append(items[candidate])
                assigned[candidate] = True
        groups.append(group)

    merged_groups = [group for group in groups if len(group) > 1]
    if merged_groups:
        LOGGER.info(
            "[Dedup] Merged %d items into %d combined stories",
            len(items) - len(groups),
            len(merged_groups),
        )
        for group in merged_groups:
            LOGGER.debug("[Dedup]   %r (%d sources)", group[0].title[:50], len(group))

    return [group[0] if len(group) == 1 else merge_items(group) for group in groups]


__all__ = [
    "STOP_WORDS",
    "calculate_similarity",
    "deduplicate_items",
    "extract_key_terms",
    "jaccard",
    "merge_items",
]
