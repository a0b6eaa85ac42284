"""
Starlette application for the HTTP mode.

Endpoints:
    GET  /health                  liveness and session count
    POST/GET/DELETE /mcp          streamable HTTP transport
    GET  /sse                     legacy SSE stream
    POST /messages?sessionId=...  legacy SSE client->server messages
"""

import contextlib
import logging
from typing import Any, Callable

import anyio
from mcp.server.lowlevel import Server
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from ..core.config import ServerConfig
from ..core.constants import MCP_ENDPOINT, MESSAGES_ENDPOINT, SERVER_NAME, SSE_ENDPOINT
from ..version import __version__
from .routes import ASGIEndpoint, SseRouter, StreamableHTTPRouter
from .session_manager import HTTPSessionManager

logger = logging.getLogger(__name__)


async def sweep_idle_sessions(sessions: HTTPSessionManager, max_idle: float, interval: float):
    """Periodically close sessions idle for longer than `max_idle` seconds."""
    logger.info(f"Idle session sweep every {interval:g}s (ttl {max_idle:g}s)")
    while True:
        await anyio.sleep(interval)
        try:
            closed = await sessions.sweep_idle(max_idle)
        except Exception as e:
            logger.error(f"Idle session sweep failed: {e}", exc_info=True)
            continue
        if closed:
            logger.info(f"Expired {closed} idle session(s), {sessions.count()} active")


def create_app(
    config: ServerConfig,
    server: Server,
    sessions: HTTPSessionManager | None = None,
    streamable_transport_factory: Callable[[str], Any] | None = None,
    sse_transport_factory: Callable[[str], Any] | None = None,
) -> Starlette:
    """Build the HTTP app around one shared MCP server and session table."""
    sessions = sessions if sessions is not None else HTTPSessionManager()
    streamable = StreamableHTTPRouter(
        server,
        sessions,
        json_response=config.json_response,
        transport_factory=streamable_transport_factory,
    )
    sse = SseRouter(server, sessions, transport_factory=sse_transport_factory)

    async def health_check(request: Request):
        return JSONResponse({
            "status": "ok",
            "name": SERVER_NAME,
            "version": __version__,
            "transport": "streamable-http",
            "active_sessions": sessions.count(),
        })

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette):
        logger.info("Starting MCP HTTP server...")
        async with anyio.create_task_group() as tg:
            async with streamable.run():
                if config.session_ttl > 0:
                    tg.start_soon(sweep_idle_sessions, sessions, config.session_ttl, config.sweep_interval)
                try:
                    yield
                finally:
                    with anyio.CancelScope(shield=True):
                        closed = await sessions.close_all()
                    logger.info(f"Closed {closed} session(s) on shutdown")
                    tg.cancel_scope.cancel()
        logger.info("Server stopped")

    routes = [
        Route("/health", health_check, methods=["GET"]),
        Route(MCP_ENDPOINT, ASGIEndpoint(streamable.handle_request), methods=["GET", "POST", "DELETE"]),
        Route(SSE_ENDPOINT, ASGIEndpoint(sse.handle_stream), methods=["GET"]),
        Route(MESSAGES_ENDPOINT, ASGIEndpoint(sse.handle_message), methods=["POST"]),
    ]

    app = Starlette(routes=routes, lifespan=lifespan)
    app.state.sessions = sessions
    return app
