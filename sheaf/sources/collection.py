"""Ordered, session-scoped collection of admitted sources."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from sheaf.errors import IndexOutOfRange, SourceNotFound
from sheaf.models.source import SourceRecord

logger = logging.getLogger(__name__)


class SourceCollection:
    """Sources in insertion order. Not shared between sessions or threads."""

    def __init__(self) -> None:
        self._records: list[SourceRecord] = []

    def add(self, record: SourceRecord) -> None:
        if any(r.id == record.id for r in self._records):
            raise ValueError(f"Duplicate source id: {record.id}")
        self._records.append(record)
        logger.info("Added %s source %s (%s)", record.type.value, record.id, record.title)

    def remove(self, index: int) -> SourceRecord:
        """Remove the record at ``index``; later records shift down by one."""
        if not 0 <= index < len(self._records):
            raise IndexOutOfRange(index, len(self._records))
        record = self._records.pop(index)
        logger.info("Removed source %s (%s)", record.id, record.title)
        return record

    def remove_by_id(self, source_id: str) -> SourceRecord:
        return self.remove(self.index_of(source_id))

    def index_of(self, source_id: str) -> int:
        for index, record in enumerate(self._records):
            if record.id == source_id:
                return index
        raise SourceNotFound(source_id)

    def list(self) -> tuple[SourceRecord, ...]:
        return tuple(self._records)

    def count(self) -> int:
        return len(self._records)

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[SourceRecord]:
        return iter(tuple(self._records))

    def __getitem__(self, index: int) -> SourceRecord:
        return self._records[index]
