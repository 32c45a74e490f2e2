"""Source data model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Union


class SourceType(Enum):
    WEB_CLIP = "web-clip"
    OBSIDIAN_NOTE = "obsidian-note"
    SELECTION = "selection"
    MANUAL_INPUT = "manual-input"

    @property
    def icon(self) -> str:
        return _ICONS[self]

    @property
    def label(self) -> str:
        return _LABELS[self]


_ICONS = {
    SourceType.WEB_CLIP: "🌐",
    SourceType.OBSIDIAN_NOTE: "📄",
    SourceType.SELECTION: "✂️",
    SourceType.MANUAL_INPUT: "✏️",
}

_LABELS = {
    SourceType.WEB_CLIP: "Web clipping",
    SourceType.OBSIDIAN_NOTE: "Note",
    SourceType.SELECTION: "Selected text",
    SourceType.MANUAL_INPUT: "Manual input",
}


@dataclass(frozen=True)
class ClipData:
    """Content captured from a browsed page."""

    content: str
    url: str
    title: str | None = None
    site_name: str | None = None
    author: str | None = None
    date: str | None = None


@dataclass(frozen=True)
class TextMetadata:
    """Metadata for selections and manual input: counts only."""

    char_count: int
    word_count: int

    def to_dict(self) -> dict:
        return {"char_count": self.char_count, "word_count": self.word_count}


@dataclass(frozen=True)
class WebClipMetadata:
    char_count: int
    word_count: int
    url: str
    site_name: str | None = None
    author: str | None = None
    published_date: str | None = None

    def to_dict(self) -> dict:
        data = {
            "char_count": self.char_count,
            "word_count": self.word_count,
            "url": self.url,
        }
        for key in ("site_name", "author", "published_date"):
            value = getattr(self, key)
            if value:
                data[key] = value
        return data


@dataclass(frozen=True)
class NoteMetadata:
    char_count: int
    word_count: int
    file_path: str
    tags: frozenset[str] = field(default_factory=frozenset)

    def to_dict(self) -> dict:
        return {
            "char_count": self.char_count,
            "word_count": self.word_count,
            "file_path": self.file_path,
            "tags": sorted(self.tags),
        }


SourceMetadata = Union[TextMetadata, WebClipMetadata, NoteMetadata]


@dataclass(frozen=True)
class SourceRecord:
    """One admitted source. Built only by the extractors in sheaf.sources."""

    id: str
    type: SourceType
    title: str
    content: str
    metadata: SourceMetadata
    added_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "icon": self.type.icon,
            "label": self.type.label,
            "title": self.title,
            "content": self.content,
            "metadata": self.metadata.to_dict(),
            "added_at": self.added_at.isoformat(),
        }
