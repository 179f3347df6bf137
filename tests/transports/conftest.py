"""Raw ASGI harness for the streaming endpoints."""

from __future__ import annotations

import asyncio
import json
from typing import Any

END = "end"
DISCONNECT = "disconnect"


class AsgiExchange:
    """Drives one ASGI HTTP exchange by hand.

    Inbound body chunks are fed with :meth:`feed`; :meth:`finish` ends the
    body and :meth:`disconnect` simulates the client going away.  Every
    message the app sends is captured, and body sends can be held back with
    :attr:`gate` to model a slow reader.
    """

    def __init__(self, method: str = "POST", path: str = "/mcp") -> None:
        self.scope: dict[str, Any] = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": method,
            "scheme": "http",
            "path": path,
            "raw_path": path.encode(),
            "query_string": b"",
            "headers": [],
            "server": ("testserver", 80),
            "client": ("127.0.0.1", 12345),
        }
        self._inbound: asyncio.Queue[bytes | str] = asyncio.Queue()
        self._sent: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        self.gate = asyncio.Event()
        self.gate.set()

    def feed(self, *messages: dict[str, Any] | bytes) -> None:
        chunk = b"".join(
            (m if isinstance(m, bytes) else json.dumps(m).encode()) + b"\n" for m in messages
        )
        self._inbound.put_nowait(chunk)

    def feed_raw(self, chunk: bytes) -> None:
        self._inbound.put_nowait(chunk)

    def finish(self) -> None:
        self._inbound.put_nowait(END)

    def disconnect(self) -> None:
        self._inbound.put_nowait(DISCONNECT)

    async def receive(self) -> dict[str, Any]:
        item = await self._inbound.get()
        if item == END:
            return {"type": "http.request", "body": b"", "more_body": False}
        if item == DISCONNECT:
            return {"type": "http.disconnect"}
        assert isinstance(item, bytes)
        return {"type": "http.request", "body": item, "more_body": True}

    async def send(self, message: dict[str, Any]) -> None:
        if message["type"] == "http.response.body":
            await self.gate.wait()
        await self._sent.put(message)

    async def start(self, timeout: float = 5) -> dict[str, Any]:
        message = await asyncio.wait_for(self._sent.get(), timeout)
        assert message["type"] == "http.response.start"
        return message

    async def chunk(self, timeout: float = 5) -> dict[str, Any]:
        message = await asyncio.wait_for(self._sent.get(), timeout)
        assert message["type"] == "http.response.body"
        return message

    async def frame(self, timeout: float = 5) -> dict[str, Any]:
        """Next newline-delimited JSON frame."""
        message = await self.chunk(timeout)
        return json.loads(message["body"])

    async def rest(self, timeout: float = 5) -> list[bytes]:
        """Collect body chunks until the app ends the response."""
        bodies: list[bytes] = []
        while True:
            message = await self.chunk(timeout)
            if message["body"]:
                bodies.append(message["body"])
            if not message.get("more_body", False):
                return bodies


def header(start: dict[str, Any], name: bytes) -> str | None:
    for key, value in start["headers"]:
        if key.lower() == name:
            return value.decode()
    return None


def parse_event(body: bytes) -> tuple[str, str]:
    """Split one server-sent event into its name and data."""
    fields = dict(line.split(": ", 1) for line in body.decode().strip().split("\n"))
    return fields["event"], fields["data"]
