"""Event-stream transport — ``GET /sse`` stream plus ``POST /messages`` side channel.

The stream opens a session and announces where the client should post its
messages.  Each posted message is dispatched independently, and responses are
written to the stream as ``message`` events in completion order; clients
correlate them by id.  Frames waiting for the stream reader are bounded;
overflowing the bound writes a single error event and ends the stream.
"""

from __future__ import annotations

import asyncio
import logging

from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from eligibility_mcp.config import ServerConfig
from eligibility_mcp.protocol import Dispatcher, serialize
from eligibility_mcp.transports.base import StreamSession
from eligibility_mcp.transports.streaming import (
    Receive,
    Scope,
    Send,
    send_chunk,
    start_response,
    watch_disconnect,
)

logger = logging.getLogger(__name__)

KEEPALIVE = b": keepalive\n\n"


def format_event(event: str, data: bytes | str) -> bytes:
    """Frame one server-sent event."""
    if isinstance(data, str):
        data = data.encode()
    return b"event: " + event.encode() + b"\ndata: " + data + b"\n\n"


class EventStreamTransport:
    """Owns the open event-stream sessions.

    Usage::

        transport = EventStreamTransport(dispatcher, config)
        routes = [
            Route(config.sse_path, transport.stream_endpoint, methods=["GET"]),
            Route(config.message_path, transport.handle_message, methods=["POST"]),
        ]
    """

    name = "sse"

    def __init__(self, dispatcher: Dispatcher, config: ServerConfig) -> None:
        self._dispatcher = dispatcher
        self._config = config
        self._sessions: dict[str, StreamSession] = {}
        self.stream_endpoint = _StreamEndpoint(self)

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    @property
    def keepalive_interval(self) -> float:
        return self._config.keepalive_interval

    def open_session(self) -> StreamSession:
        stream = StreamSession(
            self._dispatcher,
            max_in_flight=self._config.max_in_flight,
            queue_limit=self._config.outbound_queue_limit,
        )
        self._sessions[stream.id] = stream
        logger.info("Event-stream session %s opened", stream.id)
        return stream

    def get_session(self, session_id: str) -> StreamSession | None:
        return self._sessions.get(session_id)

    def close_session(self, session_id: str) -> None:
        stream = self._sessions.pop(session_id, None)
        if stream is not None:
            stream.close()

    def endpoint_url(self, stream: StreamSession) -> str:
        return f"{self._config.message_path}?session_id={stream.id}"

    async def handle_message(self, request: Request) -> Response:
        """Accept one client message for an open session."""
        session_id = request.query_params.get("session_id")
        if not session_id:
            return JSONResponse({"error": "Missing session_id query parameter"}, status_code=400)

        stream = self._sessions.get(session_id)
        if stream is None or stream.session.is_closed:
            return JSONResponse({"error": f"Unknown session: {session_id}"}, status_code=404)

        stream.submit(await request.body())
        return Response("Accepted", status_code=202, media_type="text/plain")


class _StreamEndpoint:
    """Raw ASGI app for the long-lived ``GET`` stream."""

    def __init__(self, transport: EventStreamTransport) -> None:
        self._transport = transport

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        transport = self._transport
        stream = transport.open_session()
        watcher = asyncio.create_task(
            watch_disconnect(receive, lambda: transport.close_session(stream.id))
        )
        try:
            await start_response(
                send,
                "text/event-stream",
                [(b"cache-control", b"no-cache"), (b"x-accel-buffering", b"no")],
            )
            await send_chunk(send, format_event("endpoint", transport.endpoint_url(stream)))
            await self._pump(stream, send)
            await send_chunk(send, b"", more=False)
        except OSError:
            logger.info("Event stream for session %s lost", stream.id)
        finally:
            watcher.cancel()
            transport.close_session(stream.id)

    async def _pump(self, stream: StreamSession, send: Send) -> None:
        interval = self._transport.keepalive_interval
        while True:
            try:
                frame = await asyncio.wait_for(stream.next_frame(), interval)
            except asyncio.TimeoutError:
                await send_chunk(send, KEEPALIVE)
                continue
            if frame is None:
                return
            await send_chunk(send, format_event("message", serialize(frame)))
