"""Shared types and result builders for tool operations."""

import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from mcp.types import CallToolResult, EmbeddedResource, TextContent, TextResourceContents
from pydantic import BaseModel

from ..graphql.client import IntuitionGraphQLClient

RESOURCE_SCHEME = "intuition"

Execute = Callable[[Any, IntuitionGraphQLClient], Awaitable[CallToolResult]]


@dataclass(frozen=True)
class Operation:
    """A tool: its parameters model and the coroutine that runs it."""
    name: str
    description: str
    parameters: type[BaseModel]
    execute: Execute

    def input_schema(self) -> dict[str, Any]:
        """JSON schema advertised to clients for this tool's arguments."""
        return self.parameters.model_json_schema()


def resource_result(name: str, payload: Any, indent: int | None = None) -> CallToolResult:
    """Wrap a JSON payload in an embedded resource result."""
    return CallToolResult(
        content=[
            EmbeddedResource(
                type="resource",
                resource=TextResourceContents(
                    uri=f"{RESOURCE_SCHEME}://{name}",
                    text=json.dumps(payload, indent=indent),
                    mimeType="application/json",
                ),
            )
        ],
        isError=False,
    )


def text_result(text: str) -> CallToolResult:
    """Plain text success result."""
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=False)


def error_result(text: str) -> CallToolResult:
    """Plain text error result."""
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=True)
