"""Analysis session — one source collection plus options, from first add to submit.

A session owns its SourceCollection and AnalysisOptions; nothing else
mutates them. States move EMPTY -> POPULATING -> VALIDATED -> SUBMITTING ->
SUBMITTED. A failed build or backend call leaves the session POPULATING.
SUBMITTED and CANCELLED are terminal: every mutating call afterwards raises
SessionClosed, as does any mutation while a submission is in flight.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Protocol
from uuid import uuid4

from sheaf.backends.base import AnalysisBackend
from sheaf.config import settings
from sheaf.errors import (
    ProviderNotConfigured,
    SessionClosed,
    SheafError,
    SourceUnavailable,
    ValidationError,
)
from sheaf.models.analysis import (
    AnalysisOptions,
    AnalysisRequest,
    AnalysisResult,
    AnalysisType,
    OutputFormat,
)
from sheaf.models.source import ClipData, SourceRecord
from sheaf.orchestrator.request_builder import build_request
from sheaf.sources import extractors
from sheaf.sources.collection import SourceCollection
from sheaf.sources.notes import NoteNotFound, NoteReader
from sheaf.sources.stats import SourceStats, compute_stats

logger = logging.getLogger(__name__)


class SessionState(Enum):
    EMPTY = "empty"
    POPULATING = "populating"
    VALIDATED = "validated"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"
    CANCELLED = "cancelled"


class BackendProvider(Protocol):
    def is_configured(self, provider_id: str) -> bool: ...

    def get(self, provider_id: str) -> AnalysisBackend: ...

    def display_name(self, provider_id: str) -> str: ...


OPTION_FIELDS = ("analysis_type", "custom_prompt", "provider", "output_format", "language")


class AnalysisSession:
    """Controller for a single multi-source analysis task."""

    def __init__(
        self,
        registry: BackendProvider,
        note_reader: NoteReader | None = None,
        initial_clip: ClipData | None = None,
        provider: str | None = None,
        default_language: str | None = None,
    ) -> None:
        self.id = uuid4().hex
        self.registry = registry
        self.note_reader = note_reader
        self.default_language = default_language or settings.default_language
        self.sources = SourceCollection()
        self.options = AnalysisOptions(provider=provider or settings.default_provider)
        self._state = SessionState.EMPTY

        if initial_clip is not None:
            self.add_web_clip(initial_clip)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_closed(self) -> bool:
        return self._state in (SessionState.SUBMITTED, SessionState.CANCELLED)

    def _ensure_open(self) -> None:
        # Nothing may touch the session while a submission is in flight
        if self.is_closed or self._state is SessionState.SUBMITTING:
            raise SessionClosed(self._state.value)

    def _touch(self) -> None:
        self._state = SessionState.POPULATING if len(self.sources) else SessionState.EMPTY

    # --- Sources ---

    def _admit(self, record: SourceRecord) -> SourceRecord:
        self.sources.add(record)
        self._touch()
        return record

    def add_web_clip(self, clip: ClipData) -> SourceRecord:
        self._ensure_open()
        return self._admit(extractors.from_web_clip(clip))

    def add_manual_input(self, title: str, content: str) -> SourceRecord:
        self._ensure_open()
        return self._admit(extractors.from_manual_input(title, content))

    def add_selection(self, title: str, content: str) -> SourceRecord:
        self._ensure_open()
        return self._admit(extractors.from_selection(title, content))

    async def add_note(self, identifier: str) -> SourceRecord:
        """Read a note and admit it. A failed read admits nothing."""
        self._ensure_open()
        if self.note_reader is None:
            raise SourceUnavailable(identifier, "no note reader configured")
        try:
            note = await self.note_reader.read_note(identifier)
        except NoteNotFound as exc:
            logger.warning("Could not read note %s", identifier)
            raise SourceUnavailable(identifier) from exc
        # The session may have closed while the read was outstanding
        self._ensure_open()
        record = extractors.from_note(identifier, note.content, note.tags, note.path)
        return self._admit(record)

    def remove_at(self, index: int) -> SourceRecord:
        """Positional removal for presentation layers that render a list."""
        self._ensure_open()
        record = self.sources.remove(index)
        self._touch()
        return record

    def remove(self, source_id: str) -> SourceRecord:
        self._ensure_open()
        record = self.sources.remove_by_id(source_id)
        self._touch()
        return record

    def current_stats(self) -> SourceStats:
        return compute_stats(self.sources)

    # --- Options ---

    def set_option(self, field: str, value: Any) -> None:
        self.set_options({field: value})

    def set_options(self, changes: dict[str, Any]) -> None:
        """Apply several option changes at once, or none if any is invalid."""
        self._ensure_open()
        coerced = {field: _coerce_option(field, value) for field, value in changes.items()}
        for field, value in coerced.items():
            setattr(self.options, field, value)
        if coerced and self._state is SessionState.VALIDATED:
            self._touch()

    # --- Submission ---

    def build(self) -> AnalysisRequest:
        """Validate the session and snapshot it into a request."""
        self._ensure_open()
        try:
            request = build_request(
                self.sources.list(),
                self.options,
                self.registry.is_configured,
                self.default_language,
            )
        except ProviderNotConfigured as exc:
            logger.warning("Session %s failed validation: %s", self.id, exc)
            self._touch()
            raise ProviderNotConfigured(
                exc.provider, self.registry.display_name(exc.provider)
            ) from None
        except SheafError as exc:
            logger.warning("Session %s failed validation: %s", self.id, exc)
            self._touch()
            raise
        self._state = SessionState.VALIDATED
        return request

    async def submit(self) -> AnalysisResult:
        """Build the request, hand it to the provider's backend, end the session.

        The session is SUBMITTING while the backend call is outstanding; every
        add, remove, option change and further submit is refused until it
        completes. A failed call returns the session to POPULATING.
        """
        request = self.build()
        try:
            backend = self.registry.get(request.provider)
        except SheafError:
            self._touch()
            raise
        logger.info(
            "Submitting %s analysis of %d sources to %s",
            request.analysis_type.value, len(request.sources), backend.name,
        )
        self._state = SessionState.SUBMITTING
        try:
            result = await backend.analyze(request)
        except Exception:
            logger.error("Analysis by %s failed for session %s", backend.name, self.id)
            self._touch()
            raise

        self._state = SessionState.SUBMITTED
        self.sources.clear()
        logger.info("Session %s submitted (%d chars returned)", self.id, len(result.content))
        return result

    def cancel(self) -> None:
        if self.is_closed:
            return
        if self._state is SessionState.SUBMITTING:
            raise SessionClosed(self._state.value)
        self.sources.clear()
        self._state = SessionState.CANCELLED
        logger.info("Session %s cancelled", self.id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "state": self._state.value,
            "sources": [s.to_dict() for s in self.sources],
            "stats": self.current_stats().to_dict(),
            "options": self.options.to_dict(),
        }


def _coerce_enum(enum_cls: type[Enum], field: str, value: Any) -> Any:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(field, f"{field} must be one of: {allowed}") from None


def _coerce_option(field: str, value: Any) -> Any:
    """Validate one option change and return the value to store."""
    if field not in OPTION_FIELDS:
        raise ValidationError(field, f"unknown option: {field}")

    if field == "analysis_type":
        return _coerce_enum(AnalysisType, field, value)
    if field == "output_format":
        return _coerce_enum(OutputFormat, field, value)
    if field == "provider":
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(field)
        return value.strip()
    if field == "language":
        if value is not None and not isinstance(value, str):
            raise ValidationError(field, "language must be a string")
        return (value or "").strip() or None
    # custom_prompt
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(field, "custom_prompt must be a string")
    return value
