"""Session table for the HTTP MCP transports."""

import logging
import secrets
import time
from dataclasses import dataclass, field
from typing import Callable, Protocol

from starlette.types import Receive, Scope, Send

from ..core.constants import SESSION_ID_BYTES
from ..core.exceptions import SessionNotFoundError

logger = logging.getLogger(__name__)


class SessionTransport(Protocol):
    """Per-session protocol framing bound to exactly one session id."""

    async def handle_request(self, scope: Scope, receive: Receive, send: Send) -> None: ...

    async def close(self) -> None: ...


@dataclass
class Session:
    """One logical client connection, possibly spanning many HTTP requests."""
    session_id: str
    transport: SessionTransport
    kind: str
    created_at: float = field(default_factory=time.time)
    last_activity: float = field(default_factory=time.time)


class HTTPSessionManager:
    """
    Owns the `session_id -> Session` map.

    All mutations run on the event loop thread and never await between lookup
    and update, so the table needs no lock. A port to a preemptively threaded
    runtime must guard create/get/close with a mutex.
    """

    def __init__(self):
        self._sessions: dict[str, Session] = {}

    def create_session(self, transport_factory: Callable[[str], SessionTransport], kind: str) -> Session:
        """Register a new session under a fresh random id."""
        session_id = secrets.token_hex(SESSION_ID_BYTES)
        while session_id in self._sessions:
            session_id = secrets.token_hex(SESSION_ID_BYTES)

        session = Session(session_id=session_id, transport=transport_factory(session_id), kind=kind)
        self._sessions[session_id] = session

        logger.info(f"Session created: {session_id} ({kind}, {len(self._sessions)} active)")
        return session

    def get_session(self, session_id: str) -> Session:
        """Look up a live session. Raises SessionNotFoundError if not found."""
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def touch(self, session_id: str):
        """Refresh the activity timestamp of a live session."""
        session = self.get_session(session_id)
        session.last_activity = time.time()

    async def close_session(self, session_id: str) -> bool:
        """
        Remove a session and release its transport.
        Returns False, without side effects, if the id is not live.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False

        logger.info(f"Session closed: {session_id} ({len(self._sessions)} active)")
        try:
            await session.transport.close()
        except Exception as e:
            logger.warning(f"Error closing transport for session {session_id}: {e}", exc_info=True)
        return True

    def idle_sessions(self, max_idle: float) -> list[str]:
        """Ids of sessions without activity for more than `max_idle` seconds."""
        cutoff = time.time() - max_idle
        return [sid for sid, session in self._sessions.items() if session.last_activity < cutoff]

    async def sweep_idle(self, max_idle: float) -> int:
        """Close idle sessions. Returns count of closed sessions."""
        closed = 0
        for session_id in self.idle_sessions(max_idle):
            if await self.close_session(session_id):
                logger.info(f"Session expired: {session_id}")
                closed += 1
        return closed

    async def close_all(self) -> int:
        """Close every live session. Returns count of closed sessions."""
        closed = 0
        for session_id in list(self._sessions):
            if await self.close_session(session_id):
                closed += 1
        return closed

    def count(self) -> int:
        """Return number of active sessions."""
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions
