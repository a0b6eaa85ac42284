"""
Tests for the HTTP routing layer (/mcp, /sse, /messages, /health).

Session transports are replaced by fakes that echo which session served a
request, so routing can be checked without running the MCP protocol.
"""

import contextlib
import json
from unittest.mock import MagicMock

import anyio
import httpx
import pytest
from mcp.shared.message import SessionMessage
from mcp.types import JSONRPCMessage, JSONRPCNotification
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse

from intuition_mcp.core.constants import MCP_SESSION_ID_HEADER
from intuition_mcp.mcp_http.app import create_app
from intuition_mcp.mcp_http.routes import SseRouter
from intuition_mcp.mcp_http.session_manager import HTTPSessionManager
from intuition_mcp.mcp_http.transports import SseSessionTransport

INITIALIZE = {
    "jsonrpc": "2.0",
    "id": 0,
    "method": "initialize",
    "params": {
        "protocolVersion": "2025-03-26",
        "capabilities": {},
        "clientInfo": {"name": "test-client", "version": "1.0"},
    },
}
LIST_TOOLS = {"jsonrpc": "2.0", "id": 1, "method": "tools/list"}

INVALID_SESSION_BODY = {
    "jsonrpc": "2.0",
    "error": {"code": -32001, "message": "Invalid session, please reinitialize"},
    "id": None,
}


class FakeStreamableTransport:
    """Answers every request with the session id and the received body."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        self.requests: list[tuple[str, bytes]] = []
        self.close_calls = 0
        self._closed = anyio.Event()

    async def serve(self, server, *, task_status=anyio.TASK_STATUS_IGNORED):
        task_status.started()
        await self._closed.wait()

    async def handle_request(self, scope, receive, send):
        request = Request(scope, receive)
        body = await request.body()
        self.requests.append((request.method, body))
        response = JSONResponse(
            {"served_by": self.session_id, "body": json.loads(body) if body else None},
            headers={MCP_SESSION_ID_HEADER: self.session_id},
        )
        await response(scope, receive, send)

    async def close(self):
        self.close_calls += 1
        self._closed.set()


class RejectingStreamableTransport(FakeStreamableTransport):
    """Refuses the initialize request the way the SDK refuses a bad Accept header."""

    async def handle_request(self, scope, receive, send):
        self.requests.append((scope["method"], b""))
        response = JSONResponse(
            {"jsonrpc": "2.0", "error": {"code": -32600, "message": "Not Acceptable"}, "id": None},
            status_code=406,
            headers={MCP_SESSION_ID_HEADER: self.session_id},
        )
        await response(scope, receive, send)


class FakeSseTransport:
    def __init__(self, session_id: str):
        self.session_id = session_id
        self.messages: list[bytes] = []
        self.close_calls = 0

    async def serve(self, server, scope, receive, send):
        response = PlainTextResponse(f"event: endpoint\ndata: /messages?sessionId={self.session_id}\n\n")
        await response(scope, receive, send)

    async def handle_request(self, scope, receive, send):
        self.messages.append(await Request(scope, receive).body())
        await PlainTextResponse("Accepted", status_code=202)(scope, receive, send)

    async def close(self):
        self.close_calls += 1


@contextlib.asynccontextmanager
async def running_app(config, streamable_cls=FakeStreamableTransport):
    """App with fake transports and its lifespan entered; yields (client, transports)."""
    transports: dict[str, object] = {}

    def streamable_factory(session_id):
        transports[session_id] = streamable_cls(session_id)
        return transports[session_id]

    def sse_factory(session_id):
        transports[session_id] = FakeSseTransport(session_id)
        return transports[session_id]

    app = create_app(
        config,
        MagicMock(),
        streamable_transport_factory=streamable_factory,
        sse_transport_factory=sse_factory,
    )
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            client.app = app
            yield client, transports


async def initialize(client) -> str:
    response = await client.post("/mcp", json=INITIALIZE)
    assert response.status_code == 200
    return response.headers[MCP_SESSION_ID_HEADER]


# ============================================================================
# /mcp session lifecycle
# ============================================================================

class TestStreamableSessions:

    @pytest.mark.asyncio
    async def test_initialize_creates_session_and_replays_body(self, http_config):
        async with running_app(http_config) as (client, transports):
            response = await client.post("/mcp", json=INITIALIZE)

            assert response.status_code == 200
            session_id = response.headers[MCP_SESSION_ID_HEADER]
            assert response.json() == {"served_by": session_id, "body": INITIALIZE}
            assert client.app.state.sessions.count() == 1

            follow_up = await client.post("/mcp", json=LIST_TOOLS, headers={MCP_SESSION_ID_HEADER: session_id})
            assert follow_up.status_code == 200
            assert follow_up.json()["served_by"] == session_id
            assert [method for method, _ in transports[session_id].requests] == ["POST", "POST"]

    @pytest.mark.asyncio
    async def test_batch_with_initialize_creates_session(self, http_config):
        async with running_app(http_config) as (client, transports):
            response = await client.post("/mcp", json=[INITIALIZE])
            assert response.status_code == 200
            assert len(transports) == 1

    @pytest.mark.asyncio
    async def test_unknown_session_rejected(self, http_config):
        async with running_app(http_config) as (client, transports):
            response = await client.post("/mcp", json=LIST_TOOLS, headers={MCP_SESSION_ID_HEADER: "not-a-real-id"})

            assert response.status_code == 401
            assert response.json() == INVALID_SESSION_BODY
            assert client.app.state.sessions.count() == 0
            assert transports == {}

    @pytest.mark.asyncio
    async def test_initialize_with_unknown_session_does_not_create(self, http_config):
        async with running_app(http_config) as (client, transports):
            response = await client.post("/mcp", json=INITIALIZE, headers={MCP_SESSION_ID_HEADER: "stale"})
            assert response.status_code == 401
            assert client.app.state.sessions.count() == 0

    @pytest.mark.asyncio
    async def test_non_initialize_without_session(self, http_config):
        async with running_app(http_config) as (client, transports):
            response = await client.post("/mcp", json=LIST_TOOLS)

            assert response.status_code == 400
            assert response.json() == {
                "jsonrpc": "2.0",
                "error": {"code": -32000, "message": "Bad Request: Session required"},
                "id": None,
            }
            assert transports == {}

    @pytest.mark.asyncio
    async def test_unparseable_body(self, http_config):
        async with running_app(http_config) as (client, transports):
            response = await client.post("/mcp", content=b"{not json", headers={"content-type": "application/json"})
            assert response.status_code == 400
            assert response.json()["error"]["code"] == -32700

    @pytest.mark.asyncio
    async def test_get_without_session(self, http_config):
        async with running_app(http_config) as (client, transports):
            response = await client.get("/mcp")
            assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_delete_terminates_session(self, http_config):
        async with running_app(http_config) as (client, transports):
            session_id = await initialize(client)
            headers = {MCP_SESSION_ID_HEADER: session_id}

            response = await client.delete("/mcp", headers=headers)
            assert response.status_code == 200
            assert response.text == "Session terminated"
            assert transports[session_id].close_calls == 1

            after = await client.post("/mcp", json=LIST_TOOLS, headers=headers)
            assert after.status_code == 401
            assert after.json() == INVALID_SESSION_BODY

            again = await client.delete("/mcp", headers=headers)
            assert again.status_code == 401
            assert transports[session_id].close_calls == 1

    @pytest.mark.asyncio
    async def test_unsupported_method(self, http_config):
        async with running_app(http_config) as (client, transports):
            response = await client.put("/mcp", json=INITIALIZE)
            assert response.status_code == 405

    @pytest.mark.asyncio
    async def test_rejected_initialize_drops_session(self, http_config):
        async with running_app(http_config, streamable_cls=RejectingStreamableTransport) as (client, transports):
            response = await client.post("/mcp", json=INITIALIZE)

            assert response.status_code == 406
            assert MCP_SESSION_ID_HEADER not in response.headers
            assert client.app.state.sessions.count() == 0
            [transport] = transports.values()
            assert transport.close_calls == 1

            retry = await client.post("/mcp", json=LIST_TOOLS, headers={MCP_SESSION_ID_HEADER: transport.session_id})
            assert retry.status_code == 401


# ============================================================================
# Concurrency
# ============================================================================

class TestConcurrentSessions:

    @pytest.mark.asyncio
    async def test_concurrent_initializations_get_distinct_ids(self, http_config):
        async with running_app(http_config) as (client, transports):
            ids = []

            async def init_one():
                ids.append(await initialize(client))

            async with anyio.create_task_group() as tg:
                for _ in range(20):
                    tg.start_soon(init_one)

            assert len(set(ids)) == 20
            assert client.app.state.sessions.count() == 20

    @pytest.mark.asyncio
    async def test_interleaved_requests_reach_their_own_session(self, http_config):
        async with running_app(http_config) as (client, transports):
            first = await initialize(client)
            second = await initialize(client)
            served = []

            async def call(session_id, request_id):
                body = {"jsonrpc": "2.0", "id": request_id, "method": "tools/list"}
                response = await client.post("/mcp", json=body, headers={MCP_SESSION_ID_HEADER: session_id})
                served.append((session_id, response.json()["served_by"]))

            async with anyio.create_task_group() as tg:
                for i in range(10):
                    tg.start_soon(call, first if i % 2 else second, i)

            assert all(sent == received for sent, received in served)
            # initialize + 5 calls each
            assert len(transports[first].requests) == 6
            assert len(transports[second].requests) == 6


# ============================================================================
# Legacy SSE
# ============================================================================

class TestSseRoutes:

    @pytest.mark.asyncio
    async def test_stream_session_closed_on_disconnect(self, http_config):
        async with running_app(http_config) as (client, transports):
            response = await client.get("/sse")

            assert response.status_code == 200
            (session_id,) = transports
            assert f"sessionId={session_id}" in response.text
            assert transports[session_id].close_calls == 1
            assert client.app.state.sessions.count() == 0

    @pytest.mark.asyncio
    async def test_message_requires_session_id(self, http_config):
        async with running_app(http_config) as (client, transports):
            response = await client.post("/messages", json=LIST_TOOLS)
            assert response.status_code == 400
            assert response.json()["error"]["message"] == "Bad Request: Session required"

    @pytest.mark.asyncio
    async def test_message_for_unknown_session(self, http_config):
        async with running_app(http_config) as (client, transports):
            response = await client.post("/messages?sessionId=nope", json=LIST_TOOLS)
            assert response.status_code == 401
            assert response.json() == INVALID_SESSION_BODY

    @pytest.mark.asyncio
    @pytest.mark.parametrize("param", ["sessionId", "session_id"])
    async def test_message_forwarded_to_session(self, http_config, param):
        async with running_app(http_config) as (client, transports):
            sessions = client.app.state.sessions
            session = sessions.create_session(FakeSseTransport, kind="sse")

            response = await client.post(f"/messages?{param}={session.session_id}", json=LIST_TOOLS)

            assert response.status_code == 202
            assert json.loads(session.transport.messages[0]) == LIST_TOOLS

    @pytest.mark.asyncio
    async def test_sessions_do_not_cross_endpoints(self, http_config):
        async with running_app(http_config) as (client, transports):
            streamable_id = await initialize(client)
            sse_session = client.app.state.sessions.create_session(FakeSseTransport, kind="sse")

            on_messages = await client.post(f"/messages?sessionId={streamable_id}", json=LIST_TOOLS)
            on_mcp = await client.post("/mcp", json=LIST_TOOLS, headers={MCP_SESSION_ID_HEADER: sse_session.session_id})

            assert on_messages.status_code == 401
            assert on_mcp.status_code == 401
            assert sse_session.transport.messages == []


class TestSseSessionTransport:

    @pytest.mark.asyncio
    async def test_endpoint_carries_session_id(self):
        transport = SseSessionTransport("abc123")
        assert transport.endpoint == "/messages?sessionId=abc123"

    @pytest.mark.asyncio
    async def test_unparseable_message(self):
        transport = SseSessionTransport("abc123")
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=transport.handle_request), base_url="http://testserver") as client:
            response = await client.post("/messages", content=b'{"hello": "world"}')
        assert response.status_code == 400
        assert response.text == "Could not parse message"

    @pytest.mark.asyncio
    async def test_message_after_close_is_accepted_and_dropped(self):
        transport = SseSessionTransport("abc123")
        await transport.close()
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=transport.handle_request), base_url="http://testserver") as client:
            response = await client.post("/messages", json=LIST_TOOLS)
        assert response.status_code == 202

    @pytest.mark.asyncio
    async def test_forwarded_events_report_activity(self):
        touched = MagicMock()
        transport = SseSessionTransport("abc123", on_event=touched)
        sse_writer, sse_reader = anyio.create_memory_object_stream[dict](10)
        notification = JSONRPCMessage(JSONRPCNotification(jsonrpc="2.0", method="notifications/tools/list_changed"))

        async with anyio.create_task_group() as tg:
            tg.start_soon(transport._forward_messages, sse_writer)
            await transport._write_stream.send(SessionMessage(notification))
            endpoint = await sse_reader.receive()
            event = await sse_reader.receive()
            await transport._write_stream.aclose()

        assert endpoint == {"event": "endpoint", "data": "/messages?sessionId=abc123"}
        assert event["event"] == "message"
        assert json.loads(event["data"])["method"] == "notifications/tools/list_changed"
        touched.assert_called_once_with()


class TestSseKeepAlive:

    @pytest.mark.asyncio
    async def test_listening_session_is_not_idle(self):
        sessions = HTTPSessionManager()
        router = SseRouter(MagicMock(), sessions)
        session = sessions.create_session(router._default_transport, kind="sse")
        session.last_activity -= 500
        assert sessions.idle_sessions(100) == [session.session_id]

        session.transport.on_event()

        assert sessions.idle_sessions(100) == []

    @pytest.mark.asyncio
    async def test_event_after_close_is_ignored(self):
        sessions = HTTPSessionManager()
        router = SseRouter(MagicMock(), sessions)
        session = sessions.create_session(router._default_transport, kind="sse")
        await sessions.close_session(session.session_id)

        session.transport.on_event()

        assert session.session_id not in sessions


# ============================================================================
# Health and lifespan
# ============================================================================

class TestHealthAndLifespan:

    @pytest.mark.asyncio
    async def test_health(self, http_config):
        async with running_app(http_config) as (client, transports):
            await initialize(client)
            response = await client.get("/health")

            assert response.status_code == 200
            body = response.json()
            assert body["status"] == "ok"
            assert body["name"] == "intuition-mcp-server"
            assert body["active_sessions"] == 1

    @pytest.mark.asyncio
    async def test_shutdown_closes_open_sessions(self, http_config):
        async with running_app(http_config) as (client, transports):
            session_id = await initialize(client)
            sessions = client.app.state.sessions

        assert sessions.count() == 0
        assert transports[session_id].close_calls == 1
