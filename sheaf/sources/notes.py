"""Note reading collaborator — markdown notes in a local vault."""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, runtime_checkable

import yaml

from sheaf.config import settings

logger = logging.getLogger(__name__)

NOTE_SUFFIX = ".md"

FRONT_MATTER_RE = re.compile(r"\A---\r?\n(.*?)\r?\n---\s*(?:\r?\n|\Z)", re.DOTALL)
FENCED_CODE_RE = re.compile(r"```.*?```", re.DOTALL)
# A tag needs at least one non-digit character, e.g. #2024 is not a tag
INLINE_TAG_RE = re.compile(r"(?<![\w/#&])#([\w/-]*[^\W\d][\w/-]*)")


class NoteNotFound(Exception):
    """The requested note does not exist or is outside the vault."""


@dataclass(frozen=True)
class NoteContent:
    content: str
    path: str
    tags: frozenset[str] = field(default_factory=frozenset)


@runtime_checkable
class NoteReader(Protocol):
    """Interface the session uses to read notes by identifier."""

    async def read_note(self, identifier: str) -> NoteContent:
        """Return the note's text, tags and path, or raise NoteNotFound."""
        ...


class VaultNoteReader:
    """Reads markdown notes from a vault directory on disk."""

    def __init__(self, vault_path: str | Path | None = None) -> None:
        self.root = Path(vault_path or settings.vault_path).resolve()

    async def read_note(self, identifier: str) -> NoteContent:
        return await asyncio.to_thread(self._read, identifier)

    async def list_notes(self, query: str = "", limit: int = 50) -> list[str]:
        """Vault-relative paths of notes whose path contains ``query``."""
        return await asyncio.to_thread(self._list, query, limit)

    def _resolve(self, identifier: str) -> Path:
        path = (self.root / identifier).resolve()
        if not path.is_relative_to(self.root):
            raise NoteNotFound(identifier)
        if path.suffix.lower() != NOTE_SUFFIX or not path.is_file():
            raise NoteNotFound(identifier)
        return path

    def _read(self, identifier: str) -> NoteContent:
        path = self._resolve(identifier)
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise NoteNotFound(identifier) from exc
        relative = path.relative_to(self.root).as_posix()
        logger.debug("Read note %s (%d chars)", relative, len(content))
        return NoteContent(content=content, path=relative, tags=extract_tags(content))

    def _list(self, query: str, limit: int) -> list[str]:
        needle = query.strip().lower()
        matches: list[str] = []
        for path in sorted(self.root.rglob(f"*{NOTE_SUFFIX}")):
            relative = path.relative_to(self.root).as_posix()
            if any(part.startswith(".") for part in path.relative_to(self.root).parts):
                continue
            if needle in relative.lower():
                matches.append(relative)
                if len(matches) >= limit:
                    break
        return matches


def extract_tags(content: str) -> frozenset[str]:
    """Union of front-matter tags and inline #tags, each with a leading '#'."""
    tags: set[str] = set()
    body = content

    match = FRONT_MATTER_RE.match(content)
    if match:
        body = content[match.end():]
        try:
            front_matter = yaml.safe_load(match.group(1)) or {}
        except yaml.YAMLError as exc:
            logger.warning("Ignoring malformed front matter: %s", exc)
            front_matter = {}
        if isinstance(front_matter, dict):
            tags.update(_front_matter_tags(front_matter.get("tags")))

    body = FENCED_CODE_RE.sub("", body)
    tags.update(f"#{tag}" for tag in INLINE_TAG_RE.findall(body))
    return frozenset(tags)


def _front_matter_tags(value: object) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        items = re.split(r"[,\s]+", value)
    elif isinstance(value, list):
        items = [str(v) for v in value if v is not None]
    else:
        items = [str(value)]
    return [f"#{item.lstrip('#')}" for item in (i.strip() for i in items) if item.lstrip("#")]
