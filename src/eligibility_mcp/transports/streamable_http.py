"""Streaming HTTP transport — one ``POST /mcp`` exchange per session.

Both bodies are newline-delimited JSON.  The request body is read by its own
task, so new requests keep being accepted while earlier responses are still
being written; responses interleave in completion order and are correlated by
id.  Frames waiting for a slow reader are bounded: overflowing the bound writes
a single error frame and ends the exchange.
"""

from __future__ import annotations

import asyncio
import logging

from eligibility_mcp.config import ServerConfig
from eligibility_mcp.protocol import Dispatcher, serialize
from eligibility_mcp.transports.base import StreamSession
from eligibility_mcp.transports.streaming import Receive, Scope, Send, send_chunk, start_response

logger = logging.getLogger(__name__)

SESSION_HEADER = b"mcp-session-id"
NDJSON = "application/x-ndjson"


class StreamableHttpTransport:
    """Raw ASGI app serving one session per exchange.

    Usage::

        transport = StreamableHttpTransport(dispatcher, config)
        routes = [Route(config.mcp_path, transport, methods=["POST"])]
    """

    name = "http"

    def __init__(self, dispatcher: Dispatcher, config: ServerConfig) -> None:
        self._dispatcher = dispatcher
        self._config = config
        self._sessions: dict[str, StreamSession] = {}

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    def get_session(self, session_id: str) -> StreamSession | None:
        return self._sessions.get(session_id)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        stream = StreamSession(
            self._dispatcher,
            max_in_flight=self._config.max_in_flight,
            queue_limit=self._config.outbound_queue_limit,
        )
        self._sessions[stream.id] = stream
        logger.info("Streaming HTTP session %s opened", stream.id)

        reader = asyncio.create_task(self._read(stream, receive))
        try:
            await start_response(send, NDJSON, [(SESSION_HEADER, stream.id.encode())])
            while True:
                frame = await stream.next_frame()
                if frame is None:
                    break
                await send_chunk(send, serialize(frame) + b"\n")
            await send_chunk(send, b"", more=False)
        except OSError:
            logger.info("Streaming HTTP session %s lost its reader", stream.id)
        finally:
            reader.cancel()
            stream.close()
            self._sessions.pop(stream.id, None)

    async def _read(self, stream: StreamSession, receive: Receive) -> None:
        buffer = b""
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                logger.info("Client disconnected from session %s", stream.id)
                stream.close()
                return

            buffer += message.get("body", b"")
            *lines, buffer = buffer.split(b"\n")
            for line in lines:
                if line.strip():
                    stream.submit(line)
            if stream.session.is_closed:
                return
            if not message.get("more_body", False):
                break

        if buffer.strip():
            stream.submit(buffer)
        await stream.drain()
        stream.close()
