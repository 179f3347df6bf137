"""Error taxonomy for the RPC layer.

Every error that can reach a client is an :class:`RpcError` carrying a stable
JSON-RPC error code, so tooling can branch on the code alone.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from eligibility_mcp.protocol.models import JsonRpcError

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

INVOKER_FAILURE = -32001
NOT_INITIALIZED = -32002
SESSION_CLOSED = -32003
QUEUE_OVERFLOW = -32004
SERVER_BUSY = -32005


class RpcError(Exception):
    """Base error for all failures reported to a client as an error response."""

    code: int = INTERNAL_ERROR

    def __init__(self, message: str, data: Any = None) -> None:
        self.message = message
        self.data = data
        super().__init__(message)

    def to_error(self) -> JsonRpcError:
        """Render as the wire-level error object."""
        from eligibility_mcp.protocol.models import JsonRpcError

        return JsonRpcError(code=self.code, message=self.message, data=self.data)


class ParseError(RpcError):
    """The inbound bytes are not valid JSON."""

    code = PARSE_ERROR
    title = "Parse error"

    def __init__(self, detail: str = "", request_id: int | str | None = None) -> None:
        self.detail = detail
        self.request_id = request_id
        super().__init__(self.title + (f": {detail}" if detail else ""))


class InvalidRequestError(ParseError):
    """Valid JSON that is not a valid JSON-RPC message.

    *request_id* is kept when it could be recovered so the error response
    still correlates with the offending request.
    """

    code = INVALID_REQUEST
    title = "Invalid request"


class MethodNotFoundError(RpcError):
    """The method is not part of the protocol surface."""

    code = METHOD_NOT_FOUND

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(f"Method not found: {method}")


class ToolNotFoundError(MethodNotFoundError):
    """The requested tool is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.method = "tools/call"
        RpcError.__init__(self, f"Unknown tool: {name}")


class InvalidParamsError(RpcError):
    """Method parameters do not match what the method expects."""

    code = INVALID_PARAMS


class SchemaValidationError(InvalidParamsError):
    """Tool input failed schema validation; carries field-level detail."""

    def __init__(self, tool_name: str, fields: list[dict[str, Any]]) -> None:
        self.tool_name = tool_name
        self.fields = fields
        errors = [f"{f['field']}: {f['message']}" for f in fields]
        super().__init__(
            f"Invalid arguments for tool: {tool_name}",
            data={
                "errors": errors,
                "fields": fields,
                "potentially_eligible": False,
                "warnings": [],
            },
        )

    @property
    def errors(self) -> list[str]:
        return list(self.data["errors"])


class InvokerError(RpcError):
    """The tool implementation raised while handling valid input."""

    code = INVOKER_FAILURE

    def __init__(self, tool_name: str, detail: str = "") -> None:
        self.tool_name = tool_name
        self.detail = detail
        super().__init__(f"Tool execution failed: {tool_name}" + (f" - {detail}" if detail else ""))


class NotInitializedError(RpcError):
    """A method other than ``initialize`` arrived before initialization."""

    code = NOT_INITIALIZED

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(f"Session not initialized; cannot handle: {method}")


class SessionClosedError(RpcError):
    """The session was closed; the message is rejected without side effects."""

    code = SESSION_CLOSED

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session closed: {session_id}")


class QueueOverflowError(RpcError):
    """Outbound frames for a slow reader exceeded the configured bound."""

    code = QUEUE_OVERFLOW

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"Outbound queue limit of {limit} frames exceeded; closing session")


class ServerBusyError(RpcError):
    """The session already has the maximum number of requests in flight."""

    code = SERVER_BUSY

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"Too many requests in flight (limit {limit})")
