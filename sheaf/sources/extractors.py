"""Metadata extractors — one constructor per source variant.

Each extractor turns raw, variant-specific input into a fully populated
SourceRecord. Character and word counts are always derived from the stored
content here and never edited afterwards.
"""

from __future__ import annotations

import logging
import secrets
import string
import time
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import PurePosixPath

from sheaf.errors import ValidationError
from sheaf.models.source import (
    ClipData,
    NoteMetadata,
    SourceRecord,
    SourceType,
    TextMetadata,
    WebClipMetadata,
)

logger = logging.getLogger(__name__)

DEFAULT_CLIP_TITLE = "web clipping"

_ID_ALPHABET = string.digits + string.ascii_lowercase


def token_count(text: str) -> int:
    """Count whitespace-delimited, non-empty tokens."""
    return len(text.split())


def fresh_id() -> str:
    """Return a new source id: millisecond timestamp plus a random suffix."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"source-{time.time_ns() // 1_000_000}-{suffix}"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def from_web_clip(clip: ClipData) -> SourceRecord:
    title = (clip.title or "").strip() or DEFAULT_CLIP_TITLE
    content = clip.content
    return SourceRecord(
        id=fresh_id(),
        type=SourceType.WEB_CLIP,
        title=title,
        content=content,
        metadata=WebClipMetadata(
            char_count=len(content),
            word_count=token_count(content),
            url=clip.url,
            site_name=clip.site_name or None,
            author=clip.author or None,
            published_date=clip.date or None,
        ),
        added_at=_now(),
    )


def from_note(
    identifier: str, content: str, tags: Iterable[str], path: str
) -> SourceRecord:
    """Build a record from a note that has already been read."""
    title = PurePosixPath(path or identifier).stem or identifier
    return SourceRecord(
        id=fresh_id(),
        type=SourceType.OBSIDIAN_NOTE,
        title=title,
        content=content,
        metadata=NoteMetadata(
            char_count=len(content),
            word_count=token_count(content),
            file_path=path,
            tags=frozenset(tags),
        ),
        added_at=_now(),
    )


def from_manual_input(title: str, content: str) -> SourceRecord:
    return _from_text(SourceType.MANUAL_INPUT, title, content)


def from_selection(title: str, content: str) -> SourceRecord:
    return _from_text(SourceType.SELECTION, title, content)


def _from_text(source_type: SourceType, title: str, content: str) -> SourceRecord:
    title = (title or "").strip()
    content = (content or "").strip()
    if not title:
        logger.warning("Rejected %s source: missing title", source_type.value)
        raise ValidationError("title")
    if not content:
        logger.warning("Rejected %s source: missing content", source_type.value)
        raise ValidationError("content")
    return SourceRecord(
        id=fresh_id(),
        type=source_type,
        title=title,
        content=content,
        metadata=TextMetadata(
            char_count=len(content),
            word_count=token_count(content),
        ),
        added_at=_now(),
    )
