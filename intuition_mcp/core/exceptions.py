"""Custom exceptions for the Intuition MCP server."""


class IntuitionMCPError(Exception):
    """Base exception for server operations."""
    pass


class ConfigError(IntuitionMCPError):
    """Raised when the environment holds an invalid setting."""
    def __init__(self, variable: str, value: str, expected: str):
        self.variable = variable
        self.value = value
        super().__init__(f"Invalid {variable}={value!r}: expected {expected}")


class GraphQLRequestError(IntuitionMCPError):
    """Raised when the remote GraphQL API fails or returns errors."""
    def __init__(self, message: str, errors: list | None = None):
        self.errors = errors or []
        super().__init__(message)


class SessionNotFoundError(IntuitionMCPError):
    """Raised when a session is not found."""
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Unknown session: {session_id}")
