"""Session manager — remembers which email a browser is verifying."""

from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

EMAIL_KEY = "email"


@dataclass
class Session:
    """Represents the login-flow state for one browser."""

    session_id: str
    created_at: float
    last_seen: float
    state: dict[str, Any] = field(default_factory=dict)

    @property
    def email(self) -> str | None:
        return self.state.get(EMAIL_KEY)


class SessionManager:
    """In-memory session store keyed by an opaque cookie value.

    A session lives at most ``ttl_seconds`` past its last use; stale
    sessions are dropped whenever the store is touched.
    """

    def __init__(
        self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self._sessions: dict[str, Session] = {}
        self._ttl = ttl_seconds
        self._clock = clock

    def create(self) -> Session:
        """Start a new session with a freshly drawn id."""
        now = self._clock()
        self._purge_stale(now)
        session_id = secrets.token_urlsafe(32)
        session = Session(session_id=session_id, created_at=now, last_seen=now)
        self._sessions[session_id] = session
        logger.debug("Created new session %s…", session_id[:8])
        return session

    def get(self, session_id: str | None) -> Session:
        """Retrieve the session for *session_id*, or create a new one."""
        session = self.find(session_id)
        if session is None:
            return self.create()
        session.last_seen = self._clock()
        return session

    def find(self, session_id: str | None) -> Session | None:
        """Return a live session without creating one."""
        self._purge_stale(self._clock())
        if not session_id:
            return None
        return self._sessions.get(session_id)

    def clear(self, session_id: str) -> None:
        """Remove a session (e.g. after successful verification)."""
        self._sessions.pop(session_id, None)
        logger.debug("Session cleared %s…", session_id[:8])

    def _purge_stale(self, now: float) -> None:
        stale = [
            sid for sid, s in self._sessions.items() if now - s.last_seen > self._ttl
        ]
        for sid in stale:
            del self._sessions[sid]
        if stale:
            logger.debug("Dropped %d stale session(s)", len(stale))

    @property
    def active_count(self) -> int:
        """Number of active sessions (useful for monitoring)."""
        return len(self._sessions)
