"""Line transport — one JSON message per line over a pair of byte streams.

Strictly sequential: a line is read, dispatched, and its response written and
flushed before the next line is read.  A malformed line or end of input closes
the session.
"""

from __future__ import annotations

import logging
from typing import BinaryIO

from eligibility_mcp.protocol import (
    Dispatcher,
    JsonRpcRequest,
    Message,
    ParseError,
    Session,
    error_response,
    parse,
    serialize,
)

logger = logging.getLogger(__name__)


class LineTransport:
    """Serve one session over *input* and *output* (usually stdin/stdout buffers).

    Usage::

        transport = LineTransport(dispatcher, sys.stdin.buffer, sys.stdout.buffer)
        transport.serve()   # returns once the session is closed
    """

    def __init__(self, dispatcher: Dispatcher, input: BinaryIO, output: BinaryIO) -> None:
        self._dispatcher = dispatcher
        self._input = input
        self._output = output
        self.session = Session()

    def serve(self) -> Session:
        """Run the read/dispatch/write loop until the session closes."""
        logger.info("Line session %s opened", self.session.id)
        try:
            for raw in iter(self._input.readline, b""):
                line = raw.strip()
                if not line:
                    continue
                if not self._handle(line):
                    break
            else:
                logger.info("End of input on session %s", self.session.id)
        except BrokenPipeError:
            logger.info("Output closed on session %s", self.session.id)
        finally:
            self.session.close()
            logger.info("Line session %s closed", self.session.id)
        return self.session

    def _handle(self, line: bytes) -> bool:
        try:
            message = parse(line)
        except ParseError as exc:
            logger.warning("Malformed line on session %s: %s", self.session.id, exc.message)
            self._write(error_response(exc, exc.request_id))
            return False

        if isinstance(message, JsonRpcRequest):
            progress = self._dispatcher.progress_notification(self.session, message)
            if progress is not None:
                self._write(progress)

        response = self._dispatcher.dispatch(self.session, message)
        if response is not None:
            self._write(response)
        return True

    def _write(self, message: Message) -> None:
        self._output.write(serialize(message) + b"\n")
        self._output.flush()
