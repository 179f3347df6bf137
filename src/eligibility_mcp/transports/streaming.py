"""Raw ASGI helpers for the long-lived streaming endpoints."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any

Scope = MutableMapping[str, Any]
ASGIMessage = MutableMapping[str, Any]
Receive = Callable[[], Awaitable[ASGIMessage]]
Send = Callable[[ASGIMessage], Awaitable[None]]


async def start_response(
    send: Send,
    content_type: str,
    headers: list[tuple[bytes, bytes]] | None = None,
    status: int = 200,
) -> None:
    await send({
        "type": "http.response.start",
        "status": status,
        "headers": [(b"content-type", content_type.encode()), *(headers or [])],
    })


async def send_chunk(send: Send, body: bytes, *, more: bool = True) -> None:
    await send({"type": "http.response.body", "body": body, "more_body": more})


async def watch_disconnect(receive: Receive, on_disconnect: Callable[[], None]) -> None:
    """Consume *receive* until the client goes away, then call *on_disconnect*."""
    while True:
        message = await receive()
        if message["type"] == "http.disconnect":
            on_disconnect()
            return
