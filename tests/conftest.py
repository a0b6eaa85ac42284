"""
Pytest configuration and fixtures for intuition-mcp-server tests.
"""
import json
from unittest.mock import AsyncMock

import httpx
import pytest

from intuition_mcp.core.config import ServerConfig
from intuition_mcp.graphql.client import IntuitionGraphQLClient

ACCOUNT_ID = "0x3e2178cf851a0e5cbf84c0ff53f820ad7ead703b"
GRAPHQL_URL = "https://graphql.test/v1/graphql"


@pytest.fixture
def graphql_client():
    """Client double; set `request.return_value` to the GraphQL `data` object."""
    client = AsyncMock(spec=IntuitionGraphQLClient)
    client.request.return_value = {}
    return client


@pytest.fixture
def make_graphql_client():
    """Real client whose HTTP traffic goes to `handler` instead of the network."""
    def factory(handler) -> IntuitionGraphQLClient:
        return IntuitionGraphQLClient(GRAPHQL_URL, timeout=5.0, transport=httpx.MockTransport(handler))
    return factory


@pytest.fixture
def http_config():
    """HTTP mode config with the idle sweep disabled."""
    return ServerConfig(mode="http", session_ttl=0)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep the caller's environment out of config parsing."""
    for name in (
        "SERVER_MODE",
        "MCP_HTTP_HOST",
        "PORT",
        "INTUITION_GRAPHQL_URL",
        "INTUITION_GRAPHQL_TIMEOUT",
        "MCP_TOOL_TIMEOUT",
        "MCP_SESSION_TTL",
        "MCP_SESSION_SWEEP_INTERVAL",
        "MCP_SHUTDOWN_GRACE",
        "MCP_JSON_RESPONSE",
        "MCP_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


def resource_payload(result):
    """Decode the JSON carried by a single embedded resource result."""
    assert result.isError is False
    assert len(result.content) == 1
    return json.loads(result.content[0].resource.text)


def result_text(result) -> str:
    assert len(result.content) == 1
    return result.content[0].text
