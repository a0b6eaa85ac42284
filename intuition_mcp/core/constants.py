"""Constants for the Intuition MCP server."""

SERVER_NAME = "intuition-mcp-server"

# Remote graph API
DEFAULT_GRAPHQL_URL = "https://prod.base.intuition-api.com/v1/graphql"
GRAPHQL_ORIGIN = "https://prod.base.intuition-api.com"
GRAPHQL_TIMEOUT_SECONDS = 20.0

# Tool calls
TOOL_TIMEOUT_SECONDS = 30.0
MAX_SEARCH_QUERIES = 5
RELATIONS_LIMIT = 100
LIST_SEARCH_LIMIT = 20

# Session
SESSION_ID_BYTES = 32
SESSION_TTL_SECONDS = 60 * 60  # 1 hour idle
SESSION_SWEEP_INTERVAL_SECONDS = 60

# HTTP transport
DEFAULT_HTTP_HOST = "127.0.0.1"
DEFAULT_HTTP_PORT = 3001
SHUTDOWN_GRACE_SECONDS = 10
MCP_SESSION_ID_HEADER = "mcp-session-id"
MCP_ENDPOINT = "/mcp"
SSE_ENDPOINT = "/sse"
MESSAGES_ENDPOINT = "/messages"

# JSON-RPC error codes
PARSE_ERROR = -32700
BAD_REQUEST = -32000
INVALID_SESSION = -32001
INTERNAL_ERROR = -32603

# Session kinds
STREAMABLE_SESSION = "streamable-http"
SSE_SESSION = "sse"

# Server modes
MODES = ("stdio", "http")

# Term ids backing the personality profile
PERSONALITY_TERM_IDS = tuple(range(24465, 24523))
