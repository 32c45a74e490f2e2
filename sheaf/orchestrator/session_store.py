"""In-memory store of open analysis sessions, bounded by idle time and count."""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from collections.abc import Callable

from sheaf.config import settings
from sheaf.orchestrator.session import AnalysisSession, SessionState

logger = logging.getLogger(__name__)


class SessionStore:
    """Open sessions keyed by id, least recently used first.

    Sessions idle for longer than ``ttl`` seconds are cancelled and dropped on
    the next access. When ``max_sessions`` are open, adding one evicts the
    least recently used. A session with a submission in flight is dropped from
    the store but not cancelled; its submit still completes.
    """

    def __init__(
        self,
        ttl: float | None = None,
        max_sessions: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = settings.session_ttl if ttl is None else ttl
        self.max_sessions = settings.max_sessions if max_sessions is None else max_sessions
        if self.max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self._clock = clock
        self._sessions: OrderedDict[str, tuple[AnalysisSession, float]] = OrderedDict()

    def add(self, session: AnalysisSession) -> None:
        self.prune()
        while len(self._sessions) >= self.max_sessions:
            oldest = next(iter(self._sessions))
            logger.info("Evicting session %s: %d sessions open", oldest, len(self._sessions))
            self._discard(oldest)
        self._sessions[session.id] = (session, self._clock())

    def get(self, session_id: str) -> AnalysisSession | None:
        """Return an open session and mark it as just used."""
        self.prune()
        entry = self._sessions.get(session_id)
        if entry is None:
            return None
        session = entry[0]
        self._sessions[session_id] = (session, self._clock())
        self._sessions.move_to_end(session_id)
        return session

    def pop(self, session_id: str) -> AnalysisSession | None:
        entry = self._sessions.pop(session_id, None)
        return entry[0] if entry else None

    def prune(self) -> None:
        now = self._clock()
        expired = [
            session_id
            for session_id, (_, last_used) in self._sessions.items()
            if now - last_used > self.ttl
        ]
        for session_id in expired:
            logger.info("Expiring idle session %s", session_id)
            self._discard(session_id)

    def close_all(self) -> None:
        for session_id in list(self._sessions):
            self._discard(session_id)

    def clear(self) -> None:
        self._sessions.clear()

    def _discard(self, session_id: str) -> None:
        session = self.pop(session_id)
        if session is not None and session.state is not SessionState.SUBMITTING:
            session.cancel()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions
