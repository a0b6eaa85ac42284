"""Static catalogue of the tools this server exposes."""

from enum import Enum

from mcp.types import Tool

from .operations import OPERATIONS, Operation


class ToolName(str, Enum):
    SEARCH_ATOMS = "search_atoms"
    GET_ACCOUNT_INFO = "get_account_info"
    SEARCH_LISTS = "search_lists"
    GET_FOLLOWING = "get_following"
    GET_FOLLOWERS = "get_followers"
    SEARCH_ACCOUNT_IDS = "search_account_ids"
    GET_OUTBOUND_RELATIONS = "get_outbound_relations"
    GET_INBOUND_RELATIONS = "get_inbound_relations"
    GET_OUTGOING_EDGES = "get_outgoing_edges"
    GET_TRIPLES_BY_IDS = "get_triples_by_ids"
    GET_TRIPLES_WITH_POSITIONS = "get_triples_with_positions"
    GET_USER_PERSONALITY = "get_user_personality"


def _build_table(operations: tuple[Operation, ...]) -> dict[ToolName, Operation]:
    """Map every ToolName to exactly one operation. Raises RuntimeError otherwise."""
    table: dict[ToolName, Operation] = {}
    for op in operations:
        try:
            tag = ToolName(op.name)
        except ValueError:
            raise RuntimeError(f"Operation '{op.name}' is not a declared tool name") from None
        if tag in table:
            raise RuntimeError(f"Tool '{op.name}' registered twice")
        table[tag] = op

    missing = [tag.value for tag in ToolName if tag not in table]
    if missing:
        raise RuntimeError(f"Tools without an operation: {', '.join(missing)}")
    return table


TOOL_TABLE = _build_table(OPERATIONS)

TOOLS: tuple[Tool, ...] = tuple(
    Tool(name=op.name, description=op.description, inputSchema=op.input_schema())
    for op in TOOL_TABLE.values()
)


def list_tools() -> list[Tool]:
    """All tool descriptors, in registration order."""
    return list(TOOLS)


def get_operation(name: str) -> Operation | None:
    """Operation registered under `name`, or None for unknown tools."""
    try:
        return TOOL_TABLE[ToolName(name)]
    except ValueError:
        return None
