"""Core server components."""

from .config import ServerConfig
from .constants import *
from .exceptions import *
from .utils import ilike_contains, ilike_suffix, remove_empty_fields

__all__ = [
    # Config
    "ServerConfig",
    # Constants
    "SERVER_NAME",
    "DEFAULT_GRAPHQL_URL",
    "GRAPHQL_ORIGIN",
    "GRAPHQL_TIMEOUT_SECONDS",
    "TOOL_TIMEOUT_SECONDS",
    "MAX_SEARCH_QUERIES",
    "RELATIONS_LIMIT",
    "LIST_SEARCH_LIMIT",
    "SESSION_ID_BYTES",
    "SESSION_TTL_SECONDS",
    "SESSION_SWEEP_INTERVAL_SECONDS",
    "DEFAULT_HTTP_HOST",
    "DEFAULT_HTTP_PORT",
    "SHUTDOWN_GRACE_SECONDS",
    "MCP_SESSION_ID_HEADER",
    "MCP_ENDPOINT",
    "SSE_ENDPOINT",
    "MESSAGES_ENDPOINT",
    "PARSE_ERROR",
    "BAD_REQUEST",
    "INVALID_SESSION",
    "INTERNAL_ERROR",
    "STREAMABLE_SESSION",
    "SSE_SESSION",
    "MODES",
    "PERSONALITY_TERM_IDS",
    # Exceptions
    "IntuitionMCPError",
    "ConfigError",
    "GraphQLRequestError",
    "SessionNotFoundError",
    # Utils
    "ilike_contains",
    "ilike_suffix",
    "remove_empty_fields",
]
