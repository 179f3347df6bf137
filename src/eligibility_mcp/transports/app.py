"""Starlette application and uvicorn runner for the HTTP transports."""

from __future__ import annotations

import logging
from typing import Literal

import uvicorn
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from eligibility_mcp import metrics
from eligibility_mcp.config import ServerConfig
from eligibility_mcp.protocol import Dispatcher
from eligibility_mcp.transports.sse import EventStreamTransport
from eligibility_mcp.transports.streamable_http import StreamableHttpTransport

logger = logging.getLogger(__name__)

HttpTransportName = Literal["sse", "http"]


def create_app(
    config: ServerConfig,
    transport: HttpTransportName = "sse",
    dispatcher: Dispatcher | None = None,
) -> Starlette:
    """Build the ASGI app for *transport*, with ``/metrics`` and ``/health``.

    The transport instance is available as ``app.state.transport``.
    """
    if dispatcher is None:
        from eligibility_mcp.server import build_dispatcher

        dispatcher = build_dispatcher()

    adapter: EventStreamTransport | StreamableHttpTransport
    if transport == "sse":
        adapter = EventStreamTransport(dispatcher, config)
        routes = [
            Route(config.sse_path, adapter.stream_endpoint, methods=["GET"]),
            Route(config.message_path, adapter.handle_message, methods=["POST"]),
        ]
    elif transport == "http":
        adapter = StreamableHttpTransport(dispatcher, config)
        routes = [Route(config.mcp_path, adapter, methods=["POST"])]
    else:
        msg = f"Unknown HTTP transport: {transport!r}"
        raise ValueError(msg)

    async def health(request: Request) -> Response:
        return JSONResponse({
            "status": "ok",
            "transport": adapter.name,
            "sessions": adapter.session_count,
        })

    async def get_metrics(request: Request) -> Response:
        body, content_type = metrics.render_latest()
        return Response(content=body, media_type=content_type)

    routes += [
        Route(config.health_path, health, methods=["GET", "HEAD"]),
        Route(config.metrics_path, get_metrics, methods=["GET"]),
    ]

    app = Starlette(routes=routes)
    app.state.transport = adapter
    app.state.config = config
    return app


async def serve_http(
    config: ServerConfig,
    transport: HttpTransportName = "sse",
    dispatcher: Dispatcher | None = None,
) -> None:
    """Serve *transport* with uvicorn until interrupted."""
    app = create_app(config, transport, dispatcher)
    logger.info("Starting %s transport on %s", transport, config.bind_address)

    server = uvicorn.Server(
        uvicorn.Config(
            app,
            host=config.host,
            port=config.port,
            log_level=config.log_level.lower(),
            access_log=False,
        )
    )
    try:
        await server.serve()
    except Exception:
        logger.exception("HTTP server error")
        raise
