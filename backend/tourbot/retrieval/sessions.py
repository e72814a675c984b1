from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Protocol

from .types import Session, Turn

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 10
DEFAULT_SESSION_ID = "default"


class SessionRepository(Protocol):
    def get_or_create(self, session_id: str) -> Session: ...

    def save(self, session: Session) -> None: ...

    def lock(self, session_id: str) -> AbstractAsyncContextManager[None]: ...


class InMemorySessionRepository:
    """Process-local session map with one lock per session id.

    Sessions live until the process exits. Different ids never share a
    lock, so one conversation cannot stall another.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def get_or_create(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            session = Session(id=session_id)
            self._sessions[session_id] = session
        return session

    def save(self, session: Session) -> None:
        self._sessions[session.id] = session

    @asynccontextmanager
    async def lock(self, session_id: str) -> AsyncIterator[None]:
        # setdefault is atomic on the event loop thread, so two requests never get two locks
        lock = self._locks.setdefault(session_id, asyncio.Lock())
        async with lock:
            yield


def append_turn(
    session: Session, role: str, content: str, limit: int = DEFAULT_HISTORY_LIMIT
) -> None:
    session.history.append(Turn(role=role, content=content))
    overflow = len(session.history) - max(0, limit)
    if overflow > 0:
        del session.history[:overflow]


def update_location(session: Session, detected: str | None) -> bool:
    """Remember ``detected`` as the active place; ``None`` never clears it."""
    if not detected:
        return False
    if detected != session.last_location:
        logger.info("Session %s location -> %s", session.id, detected)
    session.last_location = detected
    return True
