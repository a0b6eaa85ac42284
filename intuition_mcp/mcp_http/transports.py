"""
Per-session MCP transports.

Each transport is bound to exactly one session id and carries the framing of
one wire protocol: the streamable HTTP transport from the MCP SDK, and a
legacy Server-Sent Events transport whose ids are owned by the session table.
"""

import logging
from functools import partial
from typing import Any, Callable

import anyio
from anyio.abc import TaskStatus
from mcp.server.lowlevel import Server
from mcp.server.streamable_http import StreamableHTTPServerTransport
from mcp.shared.message import SessionMessage
from mcp.types import JSONRPCMessage
from pydantic import ValidationError
from sse_starlette.sse import EventSourceResponse
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from ..core.constants import MESSAGES_ENDPOINT

logger = logging.getLogger(__name__)


# ============================================================================
# Streamable HTTP
# ============================================================================

class StreamableHTTPSessionTransport:
    """SDK streamable HTTP transport pinned to a session id."""

    def __init__(self, session_id: str, json_response: bool = False):
        self.session_id = session_id
        self._transport = StreamableHTTPServerTransport(
            mcp_session_id=session_id,
            is_json_response_enabled=json_response,
        )

    async def serve(self, server: Server, *, task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED):
        """Run the MCP server over this transport until it is terminated."""
        async with self._transport.connect() as (read_stream, write_stream):
            task_status.started()
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
                stateless=False,
            )

    async def handle_request(self, scope: Scope, receive: Receive, send: Send):
        await self._transport.handle_request(scope, receive, send)

    async def close(self):
        await self._transport.terminate()


# ============================================================================
# Legacy SSE
# ============================================================================

class SseSessionTransport:
    """
    Server-Sent Events transport.

    The GET request that created the session carries the server->client
    stream; client->server messages arrive as separate POSTs to the endpoint
    announced in the first `endpoint` event.
    """

    def __init__(
        self,
        session_id: str,
        endpoint: str = MESSAGES_ENDPOINT,
        on_event: Callable[[], None] | None = None,
    ):
        self.session_id = session_id
        self.on_event = on_event
        self.endpoint = f"{endpoint}?sessionId={session_id}"

        self._read_writer, self._read_stream = anyio.create_memory_object_stream[SessionMessage | Exception](0)
        self._write_stream, self._write_reader = anyio.create_memory_object_stream[SessionMessage](0)
        self._cancel_scope: anyio.CancelScope | None = None
        self._closed = False

    async def serve(self, server: Server, scope: Scope, receive: Receive, send: Send):
        """Stream events to the client and run the MCP server until either side stops."""
        sse_writer, sse_reader = anyio.create_memory_object_stream[dict[str, Any]](0)

        async def run_server():
            try:
                await server.run(
                    self._read_stream,
                    self._write_stream,
                    server.create_initialization_options(),
                )
            except Exception:
                logger.exception(f"SSE session {self.session_id} crashed")

        try:
            async with anyio.create_task_group() as tg:
                self._cancel_scope = tg.cancel_scope
                if self._closed:
                    tg.cancel_scope.cancel()

                tg.start_soon(run_server)
                response = EventSourceResponse(
                    content=sse_reader,
                    data_sender_callable=partial(self._forward_messages, sse_writer),
                )
                await response(scope, receive, send)

                # Client disconnected
                tg.cancel_scope.cancel()
        finally:
            self._read_stream.close()
            logger.debug(f"SSE stream ended for session {self.session_id}")

    async def _forward_messages(self, sse_writer):
        """Announce the message endpoint, then relay server messages as events."""
        async with sse_writer, self._write_reader:
            await sse_writer.send({"event": "endpoint", "data": self.endpoint})
            async for session_message in self._write_reader:
                await sse_writer.send({
                    "event": "message",
                    "data": session_message.message.model_dump_json(by_alias=True, exclude_none=True),
                })
                # A listening stream counts as activity
                if self.on_event is not None:
                    self.on_event()

    async def handle_request(self, scope: Scope, receive: Receive, send: Send):
        """Accept one client->server JSON-RPC message."""
        request = Request(scope, receive)
        body = await request.body()

        try:
            message = JSONRPCMessage.model_validate_json(body)
        except ValidationError as e:
            logger.warning(f"Could not parse message for session {self.session_id}: {e}")
            response = Response("Could not parse message", status_code=400)
            await response(scope, receive, send)
            return

        response = Response("Accepted", status_code=202)
        await response(scope, receive, send)

        try:
            await self._read_writer.send(SessionMessage(message))
        except (anyio.ClosedResourceError, anyio.BrokenResourceError):
            logger.warning(f"Session {self.session_id} closed before message delivery")

    async def close(self):
        self._closed = True
        if self._cancel_scope is not None:
            self._cancel_scope.cancel()
        for stream in (self._read_writer, self._read_stream, self._write_stream, self._write_reader):
            stream.close()
