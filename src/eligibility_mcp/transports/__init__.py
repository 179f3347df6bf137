"""Transport adapters — line (stdio), event stream (SSE), and streaming HTTP."""

from eligibility_mcp.transports.app import create_app, serve_http
from eligibility_mcp.transports.base import StreamSession
from eligibility_mcp.transports.sse import EventStreamTransport
from eligibility_mcp.transports.stdio import LineTransport
from eligibility_mcp.transports.streamable_http import StreamableHttpTransport

__all__ = [
    "EventStreamTransport",
    "LineTransport",
    "StreamSession",
    "StreamableHttpTransport",
    "create_app",
    "serve_http",
]
