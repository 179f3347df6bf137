"""Session — one logical client connection and its lifecycle state machine."""

from __future__ import annotations

import threading
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel

from eligibility_mcp.protocol.errors import InvalidRequestError, ServerBusyError, SessionClosedError


class SessionState(str, Enum):
    """Lifecycle states; transitions only move forward."""

    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    CLOSED = "closed"


_TRANSITIONS: dict[SessionState, frozenset[SessionState]] = {
    SessionState.UNINITIALIZED: frozenset({SessionState.INITIALIZED, SessionState.CLOSED}),
    SessionState.INITIALIZED: frozenset({SessionState.CLOSED}),
    SessionState.CLOSED: frozenset(),
}


class ClientCapabilities(BaseModel):
    """Capabilities negotiated during ``initialize``."""

    progress: bool = False
    roots: bool = False
    sampling: bool = False


class Session:
    """State owned exclusively by one transport connection.

    Holds the lifecycle state, the negotiated capabilities, and the set of
    request ids currently in flight.  Methods are safe to call from the worker
    threads the streaming adapters dispatch on.
    """

    def __init__(self, session_id: str | None = None, *, max_in_flight: int | None = None) -> None:
        self.id = session_id or uuid4().hex
        self.capabilities = ClientCapabilities()
        self.protocol_version: str | None = None
        self.client_name: str | None = None
        self._state = SessionState.UNINITIALIZED
        self._in_flight: set[int | str] = set()
        self._max_in_flight = max_in_flight
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"Session(id={self.id!r}, state={self._state.value})"

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_closed(self) -> bool:
        return self._state is SessionState.CLOSED

    @property
    def in_flight(self) -> frozenset[int | str]:
        with self._lock:
            return frozenset(self._in_flight)

    def transition(self, target: SessionState) -> None:
        """Move to *target*, rejecting transitions the state machine forbids."""
        with self._lock:
            self._transition_locked(target)

    def mark_initialized(self, capabilities: ClientCapabilities, protocol_version: str, client_name: str) -> None:
        """Record the negotiated capabilities and enter ``INITIALIZED``."""
        with self._lock:
            if self._state is SessionState.CLOSED:
                raise SessionClosedError(self.id)
            if self._state is SessionState.INITIALIZED:
                msg = "session is already initialized"
                raise InvalidRequestError(msg)
            self.capabilities = capabilities
            self.protocol_version = protocol_version
            self.client_name = client_name
            self._transition_locked(SessionState.INITIALIZED)

    def begin(self, request_id: int | str) -> None:
        """Track *request_id* as in flight; ids must be unique while pending."""
        with self._lock:
            if self._state is SessionState.CLOSED:
                raise SessionClosedError(self.id)
            if request_id in self._in_flight:
                msg = f"request id {request_id!r} is already in flight"
                raise InvalidRequestError(msg, request_id)
            if self._max_in_flight is not None and len(self._in_flight) >= self._max_in_flight:
                raise ServerBusyError(self._max_in_flight)
            self._in_flight.add(request_id)

    def complete(self, request_id: int | str) -> None:
        """Stop tracking *request_id* (no-op if it was never tracked)."""
        with self._lock:
            self._in_flight.discard(request_id)

    def close(self) -> bool:
        """Enter ``CLOSED``; returns ``False`` if the session was already closed."""
        with self._lock:
            if self._state is SessionState.CLOSED:
                return False
            self._transition_locked(SessionState.CLOSED)
            self._in_flight.clear()
            return True

    def _transition_locked(self, target: SessionState) -> None:
        if target not in _TRANSITIONS[self._state]:
            msg = f"illegal session transition {self._state.value} -> {target.value}"
            raise ValueError(msg)
        self._state = target
