"""
Tests for markup segment extraction and batch planning.
"""

import itertools

import pytest

from transloom.segmenter import BatchBuilder, extract_segments, plan_batches
from transloom.structures import Segment


# =============================================================================
# Segment extraction
# =============================================================================


class TestExtractSegments:
    def test_leaf_runs_in_document_order(self):
        markup = "<p>Hello</p><b>World</b>"
        segments = extract_segments(markup)

        assert segments == [
            Segment(text="Hello", start=3, end=8),
            Segment(text="World", start=15, end=20),
        ]
        for segment in segments:
            assert markup[segment.start:segment.end] == segment.text

    def test_offsets_exclude_surrounding_whitespace(self):
        markup = "<p>\n   Good morning  </p>"
        (segment,) = extract_segments(markup)

        assert segment.text == "Good morning"
        assert markup[segment.start:segment.end] == "Good morning"

    def test_short_runs_are_skipped(self):
        markup = "<p>Hi</p><span> - </span><em>four</em><i>five!</i>"
        assert [s.text for s in extract_segments(markup)] == ["four", "five!"]

    def test_whitespace_between_tags_is_ignored(self):
        assert extract_segments("<ul>\n  <li>Item one</li>\n</ul>") == [
            Segment(text="Item one", start=11, end=19)
        ]

    def test_attribute_text_is_not_extracted(self):
        markup = '<img alt="A lovely sunset"><p>Caption text</p>'
        assert [s.text for s in extract_segments(markup)] == ["Caption text"]

    def test_no_markup_means_no_segments(self):
        assert extract_segments("Plain text without tags") == []
        assert extract_segments("") == []

    def test_segments_are_ordered_and_disjoint(self):
        markup = "<div><h1>Title here</h1><p>First para</p><p>Second para</p></div>"
        segments = extract_segments(markup)

        assert len(segments) == 3
        for previous, current in zip(segments, segments[1:]):
            assert previous.end <= current.start
        assert all(s.start < s.end <= len(markup) for s in segments)


# =============================================================================
# Batch planning
# =============================================================================


def _assert_plan_properties(items, batches, max_items, max_chars):
    assert all(batch.items for batch in batches)
    assert [item for batch in batches for item in batch.items] == list(items)
    assert [batch.batch_id for batch in batches] == list(range(1, len(batches) + 1))
    for batch in batches:
        if len(batch.items) == 1:
            continue
        assert len(batch.items) <= max_items
        assert batch.total_chars <= max_chars
    for item in items:
        if len(item) > max_chars:
            assert any(batch.items == [item] for batch in batches)


class TestPlanBatches:
    def test_twenty_five_items_split_twenty_and_five(self):
        items = [f"w{index:03d}" for index in range(25)]
        batches = plan_batches(items, max_items=20, max_chars=3000)

        assert [len(batch.items) for batch in batches] == [20, 5]

    def test_empty_input_yields_no_batches(self):
        assert plan_batches([], max_items=20, max_chars=3000) == []

    def test_oversized_item_is_isolated(self):
        items = ["aaaa", "b" * 50, "cccc", "dddd"]
        batches = plan_batches(items, max_items=20, max_chars=10)

        assert [batch.items for batch in batches] == [
            ["aaaa"],
            ["b" * 50],
            ["cccc", "dddd"],
        ]

    def test_character_budget_flushes_before_overflow(self):
        batches = plan_batches(["12345", "12345", "1"], max_items=10, max_chars=10)
        assert [batch.items for batch in batches] == [["12345", "12345"], ["1"]]

    def test_item_exactly_at_budget_is_not_oversized(self):
        batches = plan_batches(["x" * 10, "y"], max_items=10, max_chars=10)
        assert [batch.items for batch in batches] == [["x" * 10], ["y"]]

    def test_non_positive_limits_are_clamped(self):
        builder = BatchBuilder(0, 0)
        assert builder.max_items == 1
        assert builder.max_chars == 1

    @pytest.mark.parametrize("max_items", [1, 2, 3])
    @pytest.mark.parametrize("max_chars", [1, 3, 5])
    def test_plan_properties_over_small_inputs(self, max_items, max_chars):
        for size in range(5):
            for lengths in itertools.product([0, 1, 2, 4, 7], repeat=size):
                items = [
                    chr(ord("a") + index) * length
                    for index, length in enumerate(lengths)
                ]
                batches = plan_batches(items, max_items, max_chars)
                _assert_plan_properties(items, batches, max_items, max_chars)
