"""Request routing for the streamable HTTP and legacy SSE endpoints."""

import contextlib
import json
import logging
from collections.abc import AsyncIterator
from typing import Any, Awaitable, Callable

import anyio
from anyio.abc import TaskGroup, TaskStatus
from mcp.server.lowlevel import Server
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.types import Message, Receive, Scope, Send

from ..core.constants import (
    BAD_REQUEST,
    INTERNAL_ERROR,
    INVALID_SESSION,
    MCP_SESSION_ID_HEADER,
    PARSE_ERROR,
    SSE_SESSION,
    STREAMABLE_SESSION,
)
from ..core.exceptions import SessionNotFoundError
from .session_manager import HTTPSessionManager, Session
from .transports import SseSessionTransport, StreamableHTTPSessionTransport

logger = logging.getLogger(__name__)

ASGIHandler = Callable[[Scope, Receive, Send], Awaitable[None]]


# ============================================================================
# Helpers
# ============================================================================

def jsonrpc_error(status_code: int, code: int, message: str) -> JSONResponse:
    """JSON-RPC error envelope not tied to any request id."""
    return JSONResponse(
        {"jsonrpc": "2.0", "error": {"code": code, "message": message}, "id": None},
        status_code=status_code,
    )


def invalid_session() -> JSONResponse:
    return jsonrpc_error(401, INVALID_SESSION, "Invalid session, please reinitialize")


def session_required() -> JSONResponse:
    return jsonrpc_error(400, BAD_REQUEST, "Bad Request: Session required")


def is_initialize_request(payload: Any) -> bool:
    """True for an `initialize` request or a batch containing one."""
    if isinstance(payload, list):
        return any(is_initialize_request(item) for item in payload)
    return isinstance(payload, dict) and payload.get("method") == "initialize"


def replay_body(body: bytes, receive: Receive) -> Receive:
    """Receive callable that yields an already consumed body once, then defers."""
    replayed = False

    async def replay() -> Message:
        nonlocal replayed
        if not replayed:
            replayed = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


def _without_session_header(headers) -> list:
    name = MCP_SESSION_ID_HEADER.encode()
    return [(key, value) for key, value in headers if key.lower() != name]


class ASGIEndpoint:
    """Expose a bound handler to Starlette routing as a raw ASGI app."""

    def __init__(self, handler: ASGIHandler):
        self.handler = handler

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        await self.handler(scope, receive, send)


# ============================================================================
# Streamable HTTP (/mcp)
# ============================================================================

class StreamableHTTPRouter:
    """
    Routes `/mcp` requests to per-session streamable HTTP transports.

    Every session runs its MCP server loop as a task in the router's task
    group; use `run()` to own that group for the lifetime of the app.
    """

    def __init__(
        self,
        server: Server,
        sessions: HTTPSessionManager,
        json_response: bool = False,
        transport_factory: Callable[[str], Any] | None = None,
    ):
        self.server = server
        self.sessions = sessions
        self.json_response = json_response
        self._transport_factory = transport_factory or self._default_transport
        self._task_group: TaskGroup | None = None

    def _default_transport(self, session_id: str) -> StreamableHTTPSessionTransport:
        return StreamableHTTPSessionTransport(session_id, json_response=self.json_response)

    @contextlib.asynccontextmanager
    async def run(self) -> AsyncIterator[None]:
        if self._task_group is not None:
            raise RuntimeError("StreamableHTTPRouter is already running")

        async with anyio.create_task_group() as tg:
            self._task_group = tg
            logger.info("Streamable HTTP router started")
            try:
                yield
            finally:
                tg.cancel_scope.cancel()
                self._task_group = None
                logger.info("Streamable HTTP router stopped")

    async def handle_request(self, scope: Scope, receive: Receive, send: Send):
        if self._task_group is None:
            raise RuntimeError("Task group is not initialized. Make sure to use run().")

        request = Request(scope, receive)
        session_id = request.headers.get(MCP_SESSION_ID_HEADER)

        if session_id:
            await self._handle_existing(session_id, request.method, scope, receive, send)
            return

        if request.method != "POST":
            await session_required()(scope, receive, send)
            return

        body = await request.body()
        try:
            payload = json.loads(body)
        except ValueError:
            logger.info("Rejected request without session: unparseable JSON")
            await jsonrpc_error(400, PARSE_ERROR, "Parse error")(scope, receive, send)
            return

        if not is_initialize_request(payload):
            logger.info("Rejected request without session: not an initialize request")
            await session_required()(scope, receive, send)
            return

        session = self.sessions.create_session(self._transport_factory, kind=STREAMABLE_SESSION)
        try:
            await self._task_group.start(self._run_session, session)
        except Exception as e:
            logger.error(f"Failed to start session {session.session_id}: {e}", exc_info=True)
            await self.sessions.close_session(session.session_id)
            await jsonrpc_error(500, INTERNAL_ERROR, "Internal error")(scope, receive, send)
            return

        status = {}

        async def send_with_status(message: Message):
            if message["type"] == "http.response.start":
                status["code"] = message["status"]
                if not _is_success(message["status"]):
                    # A rejected initialize must not hand out its session id
                    message = {**message, "headers": _without_session_header(message.get("headers", []))}
            await send(message)

        try:
            await session.transport.handle_request(scope, replay_body(body, receive), send_with_status)
        finally:
            if not _is_success(status.get("code", 0)):
                logger.info(f"Initialize rejected with HTTP {status.get('code')}, dropping session {session.session_id}")
                with anyio.CancelScope(shield=True):
                    await self.sessions.close_session(session.session_id)

    async def _handle_existing(self, session_id: str, method: str, scope: Scope, receive: Receive, send: Send):
        try:
            session = self.sessions.get_session(session_id)
        except SessionNotFoundError:
            logger.info(f"Rejected request for unknown session {session_id}")
            await invalid_session()(scope, receive, send)
            return

        if session.kind != STREAMABLE_SESSION:
            logger.info(f"Rejected /mcp request for {session.kind} session {session_id}")
            await invalid_session()(scope, receive, send)
            return

        if method == "DELETE":
            await self.sessions.close_session(session_id)
            await PlainTextResponse("Session terminated")(scope, receive, send)
            return

        self.sessions.touch(session_id)
        await session.transport.handle_request(scope, receive, send)

    async def _run_session(self, session: Session, *, task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED):
        try:
            await session.transport.serve(self.server, task_status=task_status)
        except Exception:
            logger.exception(f"Session {session.session_id} crashed")
        finally:
            with anyio.CancelScope(shield=True):
                await self.sessions.close_session(session.session_id)


# ============================================================================
# Legacy SSE (/sse, /messages)
# ============================================================================

class SseRouter:
    """Routes the SSE stream and its companion message endpoint."""

    def __init__(
        self,
        server: Server,
        sessions: HTTPSessionManager,
        transport_factory: Callable[[str], Any] | None = None,
    ):
        self.server = server
        self.sessions = sessions
        self._transport_factory = transport_factory or self._default_transport

    def _default_transport(self, session_id: str) -> SseSessionTransport:
        return SseSessionTransport(session_id, on_event=lambda: self._keep_alive(session_id))

    def _keep_alive(self, session_id: str):
        """Refresh a session that is receiving events; closed sessions are ignored."""
        if session_id in self.sessions:
            self.sessions.touch(session_id)

    async def handle_stream(self, scope: Scope, receive: Receive, send: Send):
        """GET /sse: open a session and hold its event stream."""
        session = self.sessions.create_session(self._transport_factory, kind=SSE_SESSION)
        try:
            await session.transport.serve(self.server, scope, receive, send)
        finally:
            with anyio.CancelScope(shield=True):
                await self.sessions.close_session(session.session_id)

    async def handle_message(self, scope: Scope, receive: Receive, send: Send):
        """POST /messages?sessionId=...: deliver one message to its session."""
        request = Request(scope, receive)
        session_id = request.query_params.get("sessionId") or request.query_params.get("session_id")
        if not session_id:
            await session_required()(scope, receive, send)
            return

        try:
            session = self.sessions.get_session(session_id)
        except SessionNotFoundError:
            logger.info(f"Rejected message for unknown session {session_id}")
            await invalid_session()(scope, receive, send)
            return

        if session.kind != SSE_SESSION:
            await invalid_session()(scope, receive, send)
            return

        self.sessions.touch(session_id)
        await session.transport.handle_request(scope, receive, send)
