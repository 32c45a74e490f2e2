"""Error taxonomy for source admission and request building."""

from __future__ import annotations


class SheafError(Exception):
    """Base class for all errors raised by the engine."""

    kind: str = "error"


class ValidationError(SheafError):
    """User input failed validation; the session stays open."""

    kind = "validation_error"

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(message or f"{field} is required")


class EmptySourceSet(ValidationError):
    """A request was built from an empty collection."""

    kind = "empty_source_set"

    def __init__(self) -> None:
        super().__init__("sources", "at least one source required")


class SourceUnavailable(SheafError):
    """A candidate source could not be read and was not admitted."""

    kind = "source_unavailable"

    def __init__(self, identifier: str, reason: str = "") -> None:
        self.identifier = identifier
        message = f"source unavailable: {identifier}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ProviderNotConfigured(SheafError):
    kind = "provider_not_configured"

    def __init__(self, provider: str, display_name: str | None = None) -> None:
        self.provider = provider
        self.display_name = display_name or provider
        if self.display_name == provider:
            message = f"provider is not configured: {provider}"
        else:
            message = f"provider is not configured: {self.display_name} ({provider})"
        super().__init__(message)


class BackendError(SheafError):
    """The analysis backend answered with a body that could not be read."""

    kind = "backend_error"

    def __init__(self, provider: str, reason: str) -> None:
        self.provider = provider
        super().__init__(f"{provider} returned an unreadable response: {reason}")


class IndexOutOfRange(SheafError, IndexError):
    """Positional removal with an index outside the current collection."""

    kind = "index_out_of_range"

    def __init__(self, index: int, length: int) -> None:
        self.index = index
        self.length = length
        super().__init__(f"index {index} out of range for {length} sources")


class SourceNotFound(SheafError, KeyError):
    kind = "source_not_found"

    def __init__(self, source_id: str) -> None:
        self.source_id = source_id
        super().__init__(f"no source with id {source_id}")

    def __str__(self) -> str:
        # KeyError quotes its argument
        return self.args[0]


class SessionClosed(SheafError):
    """The session was already submitted or cancelled."""

    kind = "session_closed"

    def __init__(self, state: str) -> None:
        self.state = state
        super().__init__(f"session is {state}")
