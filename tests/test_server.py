"""
Tests for the MCP server wiring, including a full streamable HTTP session
through the SDK transport.
"""

import json

import pytest
from mcp import types
from starlette.testclient import TestClient

from conftest import ACCOUNT_ID
from intuition_mcp.core.config import ServerConfig
from intuition_mcp.dispatcher import ToolDispatcher
from intuition_mcp.mcp_http.app import create_app
from intuition_mcp.server import create_mcp_server

ACCEPT = {"Accept": "application/json, text/event-stream"}
PROTOCOL_VERSION = "2025-03-26"

INITIALIZE = {
    "jsonrpc": "2.0",
    "id": 0,
    "method": "initialize",
    "params": {
        "protocolVersion": PROTOCOL_VERSION,
        "capabilities": {},
        "clientInfo": {"name": "test-client", "version": "1.0"},
    },
}


@pytest.fixture
def mcp_server(graphql_client):
    return create_mcp_server(ToolDispatcher(graphql_client, timeout=5.0))


# ============================================================================
# Request handlers
# ============================================================================

class TestRequestHandlers:

    @pytest.mark.asyncio
    async def test_list_tools(self, mcp_server):
        handler = mcp_server.request_handlers[types.ListToolsRequest]
        result = await handler(types.ListToolsRequest(method="tools/list"))
        assert len(result.root.tools) == 12

    @pytest.mark.asyncio
    async def test_call_unknown_tool(self, mcp_server):
        handler = mcp_server.request_handlers[types.CallToolRequest]
        request = types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name="no_such_tool", arguments={"x": 1}),
        )

        result = await handler(request)

        assert result.root.isError is True
        assert result.root.content[0].text == "Error: Unknown tool: no_such_tool"

    @pytest.mark.asyncio
    async def test_call_without_arguments_is_validated(self, mcp_server, graphql_client):
        handler = mcp_server.request_handlers[types.CallToolRequest]
        request = types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name="search_atoms"),
        )

        result = await handler(request)

        assert result.root.isError is True
        assert result.root.content[0].text.startswith("Validation Error: ")
        graphql_client.request.assert_not_awaited()


# ============================================================================
# Streamable HTTP end to end
# ============================================================================

class TestStreamableHTTPSession:

    def test_initialize_call_and_terminate(self, mcp_server, graphql_client):
        graphql_client.request.return_value = {"accounts": [{"id": ACCOUNT_ID}]}
        app = create_app(ServerConfig(mode="http", session_ttl=0, json_response=True), mcp_server)

        with TestClient(app) as client:
            init = client.post("/mcp", json=INITIALIZE, headers=ACCEPT)
            assert init.status_code == 200
            session_id = init.headers["mcp-session-id"]
            assert init.json()["result"]["serverInfo"]["name"] == "intuition-mcp-server"

            headers = {**ACCEPT, "mcp-session-id": session_id, "mcp-protocol-version": PROTOCOL_VERSION}
            initialized = client.post(
                "/mcp", json={"jsonrpc": "2.0", "method": "notifications/initialized"}, headers=headers,
            )
            assert initialized.status_code == 202

            listed = client.post("/mcp", json={"jsonrpc": "2.0", "id": 1, "method": "tools/list"}, headers=headers)
            assert len(listed.json()["result"]["tools"]) == 12

            called = client.post("/mcp", headers=headers, json={
                "jsonrpc": "2.0",
                "id": 2,
                "method": "tools/call",
                "params": {"name": "search_account_ids", "arguments": {"identifier": "billy.eth"}},
            })
            result = called.json()["result"]
            assert result["isError"] is False
            assert json.loads(result["content"][0]["resource"]["text"]) == {"accounts": [{"id": ACCOUNT_ID}]}

            deleted = client.delete("/mcp", headers=headers)
            assert deleted.status_code == 200
            assert deleted.text == "Session terminated"

            after = client.post("/mcp", json={"jsonrpc": "2.0", "id": 3, "method": "tools/list"}, headers=headers)
            assert after.status_code == 401
            assert after.json()["error"]["message"] == "Invalid session, please reinitialize"
