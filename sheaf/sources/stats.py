"""Aggregate counters over a source collection."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass

from sheaf.models.source import SourceRecord

# Rough characters-per-token ratio. Approximate, not billing-accurate.
CHARS_PER_TOKEN = 4


@dataclass(frozen=True)
class SourceStats:
    total_sources: int = 0
    total_chars: int = 0
    total_words: int = 0
    estimated_tokens: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


def estimate_tokens(char_count: int) -> int:
    """Approximate token count: ceil(chars / 4)."""
    return -(-char_count // CHARS_PER_TOKEN)


def compute_stats(records: Iterable[SourceRecord]) -> SourceStats:
    """Recompute all counters from scratch."""
    total_sources = total_chars = total_words = 0
    for record in records:
        total_sources += 1
        total_chars += record.metadata.char_count
        total_words += record.metadata.word_count
    return SourceStats(
        total_sources=total_sources,
        total_chars=total_chars,
        total_words=total_words,
        estimated_tokens=estimate_tokens(total_chars),
    )
