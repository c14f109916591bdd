"""Tests for near-duplicate clustering and merging."""

from __future__ import annotations

from conftest import make_raw_item

from pulse_briefing.dedupe import (
    MERGED_CONTENT_CHARS,
    calculate_similarity,
    deduplicate_items,
    extract_key_terms,
    jaccard,
    merge_items,
)

PRICE_STORY = "OpenAI announced lower API pricing for GPT-4o developers today."


def _price_cut_items():
    return [
        make_raw_item(id="tc-1", title="OpenAI cuts API prices 50%", content=PRICE_STORY, source="TechCrunch AI"),
        make_raw_item(
            id="hn-2",
            title="OpenAI slashes pricing for GPT-4o",
            content=PRICE_STORY + " Batch requests get an extra discount.",
            source="HackerNews",
            source_type="hackernews",
        ),
        make_raw_item(id="rd-3", title="OpenAI reduces costs by half", content=PRICE_STORY, source="r/OpenAI", source_type="reddit"),
    ]


# ── Term extraction ─────────────────────────────────────────────────────

class TestExtractKeyTerms:
    def test_drops_stop_words_and_short_words(self):
        assert extract_key_terms("The new GPT-4o is on the API") == {"gpt", "api"}

    def test_strips_punctuation_and_lowercases(self):
        assert extract_key_terms("Gemini, Claude & Llama!") == {"gemini", "claude", "llama"}

    def test_empty(self):
        assert extract_key_terms("") == frozenset()


class TestJaccard:
    def test_empty_side_is_zero(self):
        assert jaccard(frozenset(), frozenset({"alpha"})) == 0.0

    def test_half_overlap(self):
        assert jaccard(frozenset({"alpha", "bravo", "charlie"}), frozenset({"alpha", "bravo", "delta"})) == 0.5

    def test_similarity_uses_title_and_content_prefix(self):
        first = make_raw_item(title="alpha bravo", content="x" * 600 + " charlie")
        second = make_raw_item(title="alpha bravo", content="")
        # "charlie" sits beyond the first 500 characters and must not count.
        assert calculate_similarity(first, second) == 2 / 3


# ── Clustering ──────────────────────────────────────────────────────────

class TestDeduplicateItems:
    def test_price_cut_stories_merge_into_one(self):
        merged = deduplicate_items(_price_cut_items(), threshold=0.35)

        assert len(merged) == 1
        assert merged[0].source == "HackerNews, TechCrunch AI, r/OpenAI"

    def test_unrelated_stories_stay_apart(self):
        items = [
            make_raw_item(id="a", title="OpenAI cuts API prices", content=PRICE_STORY),
            make_raw_item(id="b", title="Google releases Gemini weather model", content="Forecasting research from DeepMind."),
        ]

        assert [item.id for item in deduplicate_items(items)] == ["a", "b"]

    def test_threshold_is_inclusive(self):
        items = [
            make_raw_item(id="a", title="alpha bravo charlie", source="A"),
            make_raw_item(id="b", title="alpha bravo delta", source="B"),
        ]

        assert len(deduplicate_items(items, threshold=0.5)) == 1
        assert len(deduplicate_items(items, threshold=0.51)) == 2

    def test_clusters_compare_against_seed_only(self):
        items = [
            make_raw_item(id="a", title="alpha bravo charlie delta", source="A"),
            make_raw_item(id="b", title="charlie delta echo foxtrot", source="B"),
            make_raw_item(id="c", title="alpha bravo charlie delta echo foxtrot", source="C"),
        ]

        result = deduplicate_items(items)

        assert [item.id for item in result] == ["a", "b"]
        assert result[0].source == "A, C"
        assert result[1].source == "B"

    def test_singletons_pass_through_unchanged(self):
        item = make_raw_item(id="solo", title="Anthropic publishes interpretability paper")

        assert deduplicate_items([item])[0] is item

    def test_empty_pool(self):
        assert deduplicate_items([]) == []


# ── Merging ─────────────────────────────────────────────────────────────

class TestMergeItems:
    def test_primary_is_longest_content_then_input_order(self):
        merged = merge_items(_price_cut_items())

        assert merged.id == "hn-2"
        assert merged.content.startswith("[HackerNews]: ")
        assert "\n\n[TechCrunch AI]: " in merged.content
        assert [origin.source for origin in merged.origins] == ["HackerNews", "TechCrunch AI", "r/OpenAI"]
        assert [origin.url for origin in merged.origins] == [
            "https://example.com/hn-2",
            "https://example.com/tc-1",
            "https://example.com/rd-3",
        ]

    def test_ties_keep_earliest_as_primary(self):
        items = [make_raw_item(id="first", content="same"), make_raw_item(id="second", content="same")]

        assert merge_items(items).id == "first"

    def test_content_is_capped(self):
        items = [make_raw_item(id=str(n), title="alpha bravo", content="word " * 400) for n in range(3)]

        merged = merge_items(items)

        assert len(merged.content) == MERGED_CONTENT_CHARS

    def test_inputs_are_not_mutated(self):
        items = _price_cut_items()

        merge_items(items)

        assert items[1].source == "HackerNews"
        assert items[1].content == PRICE_STORY + " Batch requests get an extra discount."
        assert items[1].origins == ()

    def test_merged_item_is_marked(self):
        assert merge_items(_price_cut_items()).is_merged
        assert not _price_cut_items()[0].is_merged
