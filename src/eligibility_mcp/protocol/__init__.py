"""Protocol layer — message model, tool registry, sessions, and dispatch."""

from eligibility_mcp.protocol.dispatcher import Dispatcher, ServerInfo, error_response
from eligibility_mcp.protocol.errors import (
    InvalidParamsError,
    InvalidRequestError,
    InvokerError,
    MethodNotFoundError,
    NotInitializedError,
    ParseError,
    QueueOverflowError,
    RpcError,
    SchemaValidationError,
    ServerBusyError,
    SessionClosedError,
    ToolNotFoundError,
)
from eligibility_mcp.protocol.models import (
    JsonRpcError,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    Message,
    ToolDescriptor,
    parse,
    serialize,
)
from eligibility_mcp.protocol.registry import ToolRegistry
from eligibility_mcp.protocol.session import ClientCapabilities, Session, SessionState

__all__ = [
    "ClientCapabilities",
    "Dispatcher",
    "InvalidParamsError",
    "InvalidRequestError",
    "InvokerError",
    "JsonRpcError",
    "JsonRpcNotification",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "Message",
    "MethodNotFoundError",
    "NotInitializedError",
    "ParseError",
    "QueueOverflowError",
    "RpcError",
    "SchemaValidationError",
    "ServerBusyError",
    "ServerInfo",
    "Session",
    "SessionClosedError",
    "SessionState",
    "ToolDescriptor",
    "ToolNotFoundError",
    "ToolRegistry",
    "error_response",
    "parse",
    "serialize",
]
