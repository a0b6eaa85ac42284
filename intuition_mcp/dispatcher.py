"""Validation and routing of tool calls to their operations."""

import json
import logging
import time
from typing import Any

import anyio
from mcp.types import CallToolResult
from pydantic import ValidationError

from .core.constants import TOOL_TIMEOUT_SECONDS
from .graphql.client import IntuitionGraphQLClient
from .operations import error_result
from .registry import get_operation

logger = logging.getLogger(__name__)


def format_validation_error(error: ValidationError) -> str:
    """One `field: constraint` entry per violation."""
    violations = []
    for item in error.errors():
        field = ".".join(str(part) for part in item["loc"]) or "arguments"
        violations.append(f"{field}: {item['msg']}")
    return "Validation Error: " + "; ".join(violations)


class ToolDispatcher:
    """
    Single exception-to-result boundary between transports and operations.

    call_tool never raises for bad input or failing operations: every outcome
    is a CallToolResult with isError set.
    """

    def __init__(self, client: IntuitionGraphQLClient, timeout: float = TOOL_TIMEOUT_SECONDS):
        self.client = client
        self.timeout = timeout

    async def call_tool(self, name: str, raw_args: dict[str, Any] | None) -> CallToolResult:
        """Validate `raw_args`, run the tool and return its result."""
        logger.debug(f"Tool call: {name} arguments={_dump(raw_args)}")

        if raw_args is None:
            return error_result("Error: Arguments are required")

        operation = get_operation(name)
        if operation is None:
            logger.warning(f"Unknown tool requested: {name}")
            return error_result(f"Error: Unknown tool: {name}")

        try:
            args = operation.parameters.model_validate(raw_args)
        except ValidationError as e:
            logger.info(f"Invalid arguments for {name}: {e.error_count()} violation(s)")
            return error_result(format_validation_error(e))

        started = time.monotonic()
        try:
            with anyio.fail_after(self.timeout):
                result = await operation.execute(args, self.client)
        except TimeoutError:
            logger.error(f"Tool {name} timed out after {self.timeout}s")
            return error_result(f"Error: Tool {name} timed out after {self.timeout:g}s")
        except Exception as e:
            logger.error(f"Tool error in {name}: {e}", exc_info=True)
            return error_result(f"Error: {e}")

        elapsed_ms = (time.monotonic() - started) * 1000
        logger.info(f"Tool {name} completed in {elapsed_ms:.0f}ms (isError={result.isError})")
        return result


def _dump(value: Any) -> str:
    try:
        return json.dumps(value, default=str)
    except (TypeError, ValueError):
        return repr(value)
