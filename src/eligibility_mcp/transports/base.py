"""StreamSession — shared machinery for the concurrent transports.

Both HTTP transports accept messages independently of writing responses, so
each session gets an outbound queue and a set of dispatch tasks.  Requests are
dispatched on worker threads; closing the session cancels the waiting tasks and
discards whatever they would have delivered.
"""

from __future__ import annotations

import asyncio
import logging

from eligibility_mcp import metrics
from eligibility_mcp.protocol import (
    Dispatcher,
    JsonRpcRequest,
    Message,
    ParseError,
    QueueOverflowError,
    RpcError,
    Session,
    error_response,
    parse,
)

logger = logging.getLogger(__name__)


class StreamSession:
    """A :class:`Session` plus its outbound frame queue and in-flight tasks.

    Must be driven from a single event loop.  :meth:`next_frame` returns
    ``None`` once the session is closed and the queue has been drained.

    Args:
        dispatcher: Shared dispatcher.
        max_in_flight: Requests allowed to run concurrently; further requests
            are answered with a busy error.
        queue_limit: Frames allowed to wait for the reader; exceeding it is
            fatal for the session.  ``None`` disables the bound.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        *,
        max_in_flight: int | None = None,
        queue_limit: int | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self.session = Session(max_in_flight=max_in_flight)
        self._queue: asyncio.Queue[Message | None] = asyncio.Queue()
        self._queue_limit = queue_limit
        self._tasks: set[asyncio.Task[None]] = set()
        self.overflowed = False

    @property
    def id(self) -> str:
        return self.session.id

    @property
    def pending(self) -> int:
        """Number of dispatch tasks not yet finished."""
        return len(self._tasks)

    def submit(self, data: bytes | str) -> None:
        """Parse one inbound message and schedule its dispatch."""
        if self.session.is_closed:
            logger.debug("Dropping message for closed session %s", self.id)
            return
        try:
            message = parse(data)
        except ParseError as exc:
            logger.warning("Malformed message on session %s: %s", self.id, exc.message)
            self.push(error_response(exc, exc.request_id))
            return

        if not isinstance(message, JsonRpcRequest):
            self._dispatcher.dispatch(self.session, message)
            return

        try:
            self.session.begin(message.id)
        except RpcError as exc:
            logger.info("Rejected request %r on session %s: %s", message.id, self.id, exc.message)
            self.push(error_response(exc, message.id))
            return

        progress = self._dispatcher.progress_notification(self.session, message)
        if progress is not None:
            self.push(progress)

        task = asyncio.create_task(self._run(message))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def push(self, message: Message) -> None:
        """Queue a frame for the reader, failing the session on overflow."""
        if self.session.is_closed:
            logger.debug("Discarding frame for closed session %s", self.id)
            return
        if self._queue_limit is not None and self._queue.qsize() >= self._queue_limit:
            self._overflow(self._queue_limit)
            return
        self._queue.put_nowait(message)

    async def next_frame(self) -> Message | None:
        return await self._queue.get()

    async def drain(self) -> None:
        """Wait for every in-flight request to finish."""
        while self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def close(self) -> None:
        """Close the session and cancel delivery of pending responses."""
        if not self.session.close():
            return
        for task in list(self._tasks):
            task.cancel()
        self._queue.put_nowait(None)
        logger.info("Session %s closed", self.id)

    async def _run(self, request: JsonRpcRequest) -> None:
        try:
            response = await asyncio.to_thread(self._dispatcher.dispatch, self.session, request)
        finally:
            self.session.complete(request.id)
        if response is not None:
            self.push(response)

    def _overflow(self, limit: int) -> None:
        logger.error(
            "Outbound queue for session %s exceeded %d frames; closing", self.id, limit
        )
        metrics.record_error()
        self.overflowed = True
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(error_response(QueueOverflowError(limit)))
        self.close()
