"""Server-side login sessions.

A session maps an opaque session id to a user id.  The id travels inside the
signed session token; deleting the session (logout) invalidates every token
that carries it, even before the token itself expires.
"""
from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod

from seodesk.utils.security import generate_session_id

logger = logging.getLogger(__name__)


class SessionStore(ABC):
    """Abstract base class for session storage.

    Implementations:
    - RedisSessionStore: shared across worker processes
    - InMemorySessionStore: single process, testing and development
    """

    def __init__(self, ttl: int = 604800) -> None:
        self.ttl = ttl

    @abstractmethod
    async def create(self, user_id: int) -> str:
        """Open a session for *user_id* and return its id."""

    @abstractmethod
    async def get(self, session_id: str) -> int | None:
        """Return the user id bound to *session_id*, or ``None`` if unknown or expired."""

    @abstractmethod
    async def delete(self, session_id: str) -> None:
        """Close *session_id*.  Unknown ids are ignored."""

    async def close(self) -> None:  # noqa: B027
        """Release resources held by the store."""


class InMemorySessionStore(SessionStore):
    """Session storage in a process-local dictionary.

    DO NOT USE with more than one worker process - sessions are not shared!
    """

    def __init__(self, ttl: int = 604800) -> None:
        super().__init__(ttl)
        self._sessions: dict[str, tuple[int, float]] = {}

    async def create(self, user_id: int) -> str:
        now = time.monotonic()
        self._purge(now)
        session_id = generate_session_id()
        self._sessions[session_id] = (user_id, now + self.ttl)
        logger.debug("Opened session for user id=%d", user_id)
        return session_id

    async def get(self, session_id: str) -> int | None:
        entry = self._sessions.get(session_id)
        if entry is None:
            return None
        user_id, expires_at = entry
        if time.monotonic() >= expires_at:
            del self._sessions[session_id]
            return None
        return user_id

    async def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def _purge(self, now: float) -> None:
        expired = [sid for sid, (_, expires_at) in self._sessions.items() if now >= expires_at]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.debug("Dropped %d expired sessions", len(expired))

    def clear(self) -> None:
        """Drop every session (for testing)."""
        self._sessions.clear()


__all__ = ["InMemorySessionStore", "SessionStore"]
