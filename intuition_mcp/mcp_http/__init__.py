"""HTTP transport for the Intuition MCP server."""

from .app import create_app
from .session_manager import HTTPSessionManager, Session

__all__ = ["create_app", "HTTPSessionManager", "Session"]
