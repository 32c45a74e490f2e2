"""Tests for the statistics projector."""

from __future__ import annotations

import pytest

from sheaf.models.source import ClipData
from sheaf.sources.extractors import from_manual_input, from_web_clip
from sheaf.sources.stats import SourceStats, compute_stats, estimate_tokens


def test_empty_collection_is_all_zero() -> None:
    assert compute_stats([]) == SourceStats(0, 0, 0, 0)


def test_single_manual_source() -> None:
    stats = compute_stats([from_manual_input("Notes", "hello world")])
    assert stats.to_dict() == {
        "total_sources": 1,
        "total_chars": 11,
        "total_words": 2,
        "estimated_tokens": 3,
    }


def test_web_clip_of_400_chars() -> None:
    record = from_web_clip(ClipData(content="abcd " * 80, url="https://example.com"))
    assert record.metadata.char_count == 400
    assert compute_stats([record]).estimated_tokens == 100


def test_sums_across_sources() -> None:
    records = [
        from_manual_input("A", "one two"),
        from_manual_input("B", "three four five"),
    ]
    stats = compute_stats(records)
    assert stats.total_sources == 2
    assert stats.total_chars == len("one two") + len("three four five")
    assert stats.total_words == 5


@pytest.mark.parametrize(
    ("chars", "tokens"),
    [(0, 0), (1, 1), (3, 1), (4, 1), (5, 2), (8, 2), (401, 101)],
)
def test_estimate_rounds_up(chars: int, tokens: int) -> None:
    assert estimate_tokens(chars) == tokens
