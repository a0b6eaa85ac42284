"""Server configuration loaded from environment variables."""

import os
from dataclasses import dataclass

from .constants import (
    DEFAULT_GRAPHQL_URL,
    DEFAULT_HTTP_HOST,
    DEFAULT_HTTP_PORT,
    GRAPHQL_TIMEOUT_SECONDS,
    MODES,
    SESSION_SWEEP_INTERVAL_SECONDS,
    SESSION_TTL_SECONDS,
    SHUTDOWN_GRACE_SECONDS,
    TOOL_TIMEOUT_SECONDS,
)
from .exceptions import ConfigError

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off", "")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(name, raw, "an integer") from None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(name, raw, "a number") from None


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ConfigError(name, raw, "a boolean")


@dataclass(frozen=True)
class ServerConfig:
    """Intuition MCP server configuration."""
    mode: str = "stdio"
    host: str = DEFAULT_HTTP_HOST
    port: int = DEFAULT_HTTP_PORT
    graphql_url: str = DEFAULT_GRAPHQL_URL
    graphql_timeout: float = GRAPHQL_TIMEOUT_SECONDS
    tool_timeout: float = TOOL_TIMEOUT_SECONDS
    session_ttl: int = SESSION_TTL_SECONDS
    sweep_interval: int = SESSION_SWEEP_INTERVAL_SECONDS
    shutdown_grace: int = SHUTDOWN_GRACE_SECONDS
    json_response: bool = False
    log_level: str = "INFO"

    def __post_init__(self):
        if self.mode not in MODES:
            raise ConfigError("SERVER_MODE", self.mode, f"one of {MODES}")

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Create configuration from environment variables."""
        return cls(
            mode=os.getenv("SERVER_MODE", "stdio").strip().lower(),
            host=os.getenv("MCP_HTTP_HOST", DEFAULT_HTTP_HOST),
            port=_env_int("PORT", DEFAULT_HTTP_PORT),
            graphql_url=os.getenv("INTUITION_GRAPHQL_URL", DEFAULT_GRAPHQL_URL),
            graphql_timeout=_env_float("INTUITION_GRAPHQL_TIMEOUT", GRAPHQL_TIMEOUT_SECONDS),
            tool_timeout=_env_float("MCP_TOOL_TIMEOUT", TOOL_TIMEOUT_SECONDS),
            session_ttl=_env_int("MCP_SESSION_TTL", SESSION_TTL_SECONDS),
            sweep_interval=_env_int("MCP_SESSION_SWEEP_INTERVAL", SESSION_SWEEP_INTERVAL_SECONDS),
            shutdown_grace=_env_int("MCP_SHUTDOWN_GRACE", SHUTDOWN_GRACE_SECONDS),
            json_response=_env_bool("MCP_JSON_RESPONSE", False),
            log_level=os.getenv("MCP_LOG_LEVEL", "INFO").upper(),
        )
