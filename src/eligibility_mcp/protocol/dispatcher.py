"""Dispatcher — transport-agnostic request router.

Validates the session state, resolves the method, invokes the
:class:`ToolRegistry`, and turns every outcome into exactly one response.
The dispatcher holds no per-session state of its own; everything mutable lives
on the :class:`Session` passed in, so one instance serves all sessions and all
transports concurrently.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ValidationError

from eligibility_mcp import __version__, metrics
from eligibility_mcp.protocol.errors import (
    INTERNAL_ERROR,
    InvalidParamsError,
    MethodNotFoundError,
    NotInitializedError,
    RpcError,
    SessionClosedError,
)
from eligibility_mcp.protocol.models import (
    CallToolParams,
    InitializeParams,
    JsonRpcError,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    Message,
)
from eligibility_mcp.protocol.registry import ToolRegistry, field_errors
from eligibility_mcp.protocol.session import ClientCapabilities, Session, SessionState
from eligibility_mcp.utils.telemetry import (
    ATTR_RPC_ERROR_CODE,
    ATTR_RPC_METHOD,
    ATTR_RPC_REQUEST_ID,
    ATTR_SESSION_ID,
    ATTR_SESSION_STATE,
    ATTR_TOOL_NAME,
    get_tracer,
)

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

SUPPORTED_PROTOCOL_VERSIONS = ("2025-06-18", "2025-03-26", "2024-11-05")
LATEST_PROTOCOL_VERSION = SUPPORTED_PROTOCOL_VERSIONS[0]

Handler = Callable[[Session, dict[str, Any]], dict[str, Any]]


class ServerInfo(BaseModel):
    """Identity and usage instructions returned from ``initialize``."""

    name: str = "eligibility-engine"
    version: str = __version__
    instructions: str | None = None


class Dispatcher:
    """Routes one message at a time for a given session.

    Usage::

        dispatcher = Dispatcher(registry)
        session = Session()
        response = dispatcher.dispatch(session, parse(raw))
        # ``None`` for notifications and client responses
    """

    def __init__(self, registry: ToolRegistry, *, server_info: ServerInfo | None = None) -> None:
        self._registry = registry
        self._server_info = server_info or ServerInfo()
        self._handlers: dict[str, Handler] = {
            "initialize": self._initialize,
            "ping": self._ping,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
        }

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def server_info(self) -> ServerInfo:
        return self._server_info

    def dispatch(self, session: Session, message: Message) -> JsonRpcResponse | None:
        """Handle *message* and return its response, if one is owed."""
        if isinstance(message, JsonRpcResponse):
            logger.debug("Ignoring client response for id %r on session %s", message.id, session.id)
            return None
        if isinstance(message, JsonRpcNotification):
            self._notify(session, message)
            return None
        return self._request(session, message)

    def progress_notification(
        self, session: Session, request: JsonRpcRequest
    ) -> JsonRpcNotification | None:
        """Return the start-of-call progress notification, if one was negotiated."""
        if request.method != "tools/call" or not session.capabilities.progress:
            return None
        if session.state is not SessionState.INITIALIZED:
            return None
        try:
            token = CallToolParams.model_validate(request.params or {}).progress_token
        except ValidationError:
            return None
        if token is None:
            return None
        return JsonRpcNotification(
            method="notifications/progress",
            params={"progressToken": token, "progress": 0, "total": 1},
        )

    # -- request routing ------------------------------------------------------

    def _request(self, session: Session, request: JsonRpcRequest) -> JsonRpcResponse:
        with _tracer.start_as_current_span("rpc.dispatch") as span:
            span.set_attribute(ATTR_RPC_METHOD, request.method)
            span.set_attribute(ATTR_RPC_REQUEST_ID, str(request.id))
            span.set_attribute(ATTR_SESSION_ID, session.id)
            span.set_attribute(ATTR_SESSION_STATE, session.state.value)
            try:
                result = self._route(session, request)
            except RpcError as exc:
                span.set_attribute(ATTR_RPC_ERROR_CODE, exc.code)
                logger.info(
                    "Request %r (%s) on session %s failed: %s",
                    request.id, request.method, session.id, exc.message,
                )
                return JsonRpcResponse.failure(request.id, exc.to_error())
            except Exception:
                span.set_attribute(ATTR_RPC_ERROR_CODE, INTERNAL_ERROR)
                logger.exception("Unexpected error handling %s on session %s", request.method, session.id)
                return JsonRpcResponse.failure(
                    request.id, JsonRpcError(code=INTERNAL_ERROR, message="Internal error")
                )
            return JsonRpcResponse.success(request.id, result)

    def _route(self, session: Session, request: JsonRpcRequest) -> dict[str, Any]:
        if session.is_closed:
            raise SessionClosedError(session.id)
        handler = self._handlers.get(request.method)
        if handler is None:
            raise MethodNotFoundError(request.method)
        if request.method != "initialize" and session.state is SessionState.UNINITIALIZED:
            raise NotInitializedError(request.method)
        return handler(session, request.params or {})

    def _notify(self, session: Session, notification: JsonRpcNotification) -> None:
        if session.is_closed:
            return
        if notification.method == "notifications/initialized":
            logger.debug("Client confirmed initialization on session %s", session.id)
        elif notification.method == "notifications/cancelled":
            # Responses are still delivered; cancellation is advisory at this layer.
            logger.debug("Client cancelled %r on session %s", (notification.params or {}).get("requestId"), session.id)
        else:
            logger.debug("Ignoring notification %s on session %s", notification.method, session.id)

    # -- method handlers ------------------------------------------------------

    def _initialize(self, session: Session, params: dict[str, Any]) -> dict[str, Any]:
        try:
            init = InitializeParams.model_validate(params)
        except ValidationError as exc:
            raise InvalidParamsError("Invalid initialize params", data=field_errors(exc)) from exc

        experimental = init.capabilities.get("experimental") or {}
        capabilities = ClientCapabilities(
            progress=bool(isinstance(experimental, dict) and experimental.get("progress")),
            roots="roots" in init.capabilities,
            sampling="sampling" in init.capabilities,
        )
        version = (
            init.protocol_version
            if init.protocol_version in SUPPORTED_PROTOCOL_VERSIONS
            else LATEST_PROTOCOL_VERSION
        )
        session.mark_initialized(capabilities, version, init.client_info.name)
        logger.info(
            "Session %s initialized by %s (protocol %s)", session.id, init.client_info.name, version
        )

        result: dict[str, Any] = {
            "protocolVersion": version,
            "capabilities": {"tools": {"listChanged": False}},
            "serverInfo": {"name": self._server_info.name, "version": self._server_info.version},
        }
        if self._server_info.instructions:
            result["instructions"] = self._server_info.instructions
        return result

    def _ping(self, session: Session, params: dict[str, Any]) -> dict[str, Any]:
        return {}

    def _list_tools(self, session: Session, params: dict[str, Any]) -> dict[str, Any]:
        return {"tools": [descriptor.to_wire() for descriptor in self._registry.list()]}

    def _call_tool(self, session: Session, params: dict[str, Any]) -> dict[str, Any]:
        try:
            call = CallToolParams.model_validate(params)
        except ValidationError as exc:
            raise InvalidParamsError("Invalid tools/call params", data=field_errors(exc)) from exc

        with _tracer.start_as_current_span("tool.invoke") as span:
            span.set_attribute(ATTR_TOOL_NAME, call.name)
            with metrics.track_request():
                payload = self._registry.invoke(call.name, call.arguments)

        return {
            "content": [{"type": "text", "text": json.dumps(payload, indent=2, ensure_ascii=False)}],
            "structuredContent": payload,
            "isError": False,
        }


def error_response(exc: RpcError, request_id: int | str | None = None) -> JsonRpcResponse:
    """Build the error response for a failure raised outside :meth:`Dispatcher.dispatch`."""
    return JsonRpcResponse.failure(request_id, exc.to_error())
