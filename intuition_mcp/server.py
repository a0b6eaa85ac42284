#!/usr/bin/env python3
"""
Intuition MCP server entrypoint.

Usage:
    intuition-mcp-server [--mode {stdio,http}] [--host HOST] [--port PORT] [--log-level LEVEL]

Environment variables:
    SERVER_MODE: stdio or http (default: stdio)
    MCP_HTTP_HOST: HTTP bind host (default: 127.0.0.1)
    PORT: HTTP port (default: 3001)
    INTUITION_GRAPHQL_URL: Intuition GraphQL endpoint
    MCP_LOG_LEVEL: Logging level (default: INFO)

Command line flags override the environment.
"""

import argparse
import asyncio
import dataclasses
import logging
import sys
from typing import Any

from mcp.server.lowlevel import Server
from mcp.types import CallToolResult, Tool

from .core.config import ServerConfig
from .core.constants import MODES, SERVER_NAME
from .core.exceptions import ConfigError
from .dispatcher import ToolDispatcher
from .graphql.client import IntuitionGraphQLClient
from .registry import list_tools
from .version import __version__

logger = logging.getLogger(__name__)


def create_mcp_server(dispatcher: ToolDispatcher) -> Server:
    """Create the MCP server; every transport and session shares this instance."""
    server = Server(SERVER_NAME, version=__version__)

    # ========================================================================
    # Tool Handlers
    # ========================================================================

    @server.list_tools()
    async def handle_list_tools() -> list[Tool]:
        return list_tools()

    # Arguments are validated by the dispatcher against the pydantic models
    @server.call_tool(validate_input=False)
    async def handle_call_tool(name: str, arguments: dict[str, Any] | None) -> CallToolResult:
        return await dispatcher.call_tool(name, arguments)

    return server


# ============================================================================
# Transports
# ============================================================================

async def run_stdio(server: Server):
    """Serve a single implicit session over stdin/stdout."""
    from mcp.server.stdio import stdio_server

    logger.info("MCP server running on stdio")
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


async def run_http(server: Server, config: ServerConfig):
    """Serve the streamable HTTP and legacy SSE transports until signalled."""
    import uvicorn

    from .mcp_http.app import create_app

    app = create_app(config, server)

    logger.info(f"MCP Streamable HTTP endpoint: http://{config.host}:{config.port}/mcp")
    logger.info(f"MCP SSE endpoint: http://{config.host}:{config.port}/sse")
    logger.info(f"Health check: http://{config.host}:{config.port}/health")

    config_uvi = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        timeout_graceful_shutdown=config.shutdown_grace,
    )
    server_uvi = uvicorn.Server(config_uvi)
    await server_uvi.serve()


async def serve(config: ServerConfig):
    """Build the shared components once and run the configured transport."""
    install_loop_exception_handler(asyncio.get_running_loop())

    async with IntuitionGraphQLClient(config.graphql_url, timeout=config.graphql_timeout) as client:
        dispatcher = ToolDispatcher(client, timeout=config.tool_timeout)
        server = create_mcp_server(dispatcher)

        logger.info(f"Starting {SERVER_NAME} {__version__} in {config.mode} mode (GraphQL: {config.graphql_url})")
        if config.mode == "http":
            await run_http(server, config)
        else:
            await run_stdio(server)

    logger.info("Server stopped")


# ============================================================================
# Process setup
# ============================================================================

def configure_logging(level: str):
    # stdout carries the stdio protocol, so logs always go to stderr
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )


def install_fatal_error_handlers():
    """Log uncaught exceptions before the interpreter reports them."""
    previous_hook = sys.excepthook

    def excepthook(exc_type, exc_value, exc_traceback):
        if not issubclass(exc_type, KeyboardInterrupt):
            logger.critical("Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback))
        previous_hook(exc_type, exc_value, exc_traceback)

    sys.excepthook = excepthook


def install_loop_exception_handler(loop: asyncio.AbstractEventLoop):
    """Log exceptions from tasks nobody awaited."""
    def handle_exception(loop: asyncio.AbstractEventLoop, context: dict[str, Any]):
        exception = context.get("exception")
        message = context.get("message", "Unhandled exception in event loop")
        if exception is not None:
            logger.critical(f"Unhandled exception in event loop: {message}", exc_info=exception)
        else:
            logger.critical(f"Event loop error: {message}")

    loop.set_exception_handler(handle_exception)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Intuition MCP Server")
    parser.add_argument("--mode", choices=MODES, default=None, help="Transport mode (default: stdio)")
    parser.add_argument("--host", default=None, help="HTTP bind host (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=None, help="HTTP port (default: 3001)")
    parser.add_argument("--log-level", default=None, help="Log level (default: INFO)")
    return parser


def load_config(argv: list[str] | None = None) -> ServerConfig:
    """Configuration from the environment, overridden by command line flags."""
    args = build_parser().parse_args(argv)
    config = ServerConfig.from_env()

    overrides = {}
    if args.mode is not None:
        overrides["mode"] = args.mode
    if args.host is not None:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if args.log_level is not None:
        overrides["log_level"] = args.log_level.upper()
    return dataclasses.replace(config, **overrides)


def main(argv: list[str] | None = None):
    """Start the Intuition MCP server."""
    try:
        config = load_config(argv)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(config.log_level)
    install_fatal_error_handlers()

    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.critical(f"Error starting server: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
