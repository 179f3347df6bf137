"""Message model — JSON-RPC 2.0 envelopes and MCP payloads.

Framing-agnostic: :func:`parse` turns one complete message into a model and
:func:`serialize` turns a model back into compact UTF-8 JSON without an
embedded newline, so every transport can apply its own framing.
"""

from __future__ import annotations

import json
from typing import Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    ValidationError,
    model_validator,
)

from eligibility_mcp.protocol.errors import InvalidRequestError, ParseError

JSONRPC_VERSION = "2.0"

# Strict so a numeric id is never re-encoded as a string (or vice versa).
RequestId = Union[StrictInt, StrictStr]

# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request; always answered by exactly one response."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: RequestId
    method: str
    params: dict[str, Any] | None = None


class JsonRpcNotification(BaseModel):
    """A JSON-RPC 2.0 notification (no id, never answered)."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    method: str
    params: dict[str, Any] | None = None


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response carrying either a result or an error."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: RequestId | None = None
    result: dict[str, Any] | None = None
    error: JsonRpcError | None = None

    @model_validator(mode="after")
    def _result_xor_error(self) -> JsonRpcResponse:
        if (self.result is None) == (self.error is None):
            msg = "response must carry exactly one of 'result' or 'error'"
            raise ValueError(msg)
        return self

    @classmethod
    def success(cls, request_id: int | str | None, result: dict[str, Any]) -> JsonRpcResponse:
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: int | str | None, error: JsonRpcError) -> JsonRpcResponse:
        return cls(id=request_id, error=error)


Message = Union[JsonRpcRequest, JsonRpcNotification, JsonRpcResponse]

# ---------------------------------------------------------------------------
# MCP-specific payloads
# ---------------------------------------------------------------------------


class ClientInfo(BaseModel):
    """Name and version the client reports during ``initialize``."""

    name: str = "unknown"
    version: str = ""


class InitializeParams(BaseModel):
    """Parameters of the ``initialize`` request."""

    model_config = ConfigDict(populate_by_name=True)

    protocol_version: str = Field(default="", alias="protocolVersion")
    capabilities: dict[str, Any] = Field(default_factory=dict)
    client_info: ClientInfo = Field(default_factory=ClientInfo, alias="clientInfo")


class CallToolParams(BaseModel):
    """Parameters of the ``tools/call`` request."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)
    meta: dict[str, Any] | None = Field(default=None, alias="_meta")

    @property
    def progress_token(self) -> int | str | None:
        if not self.meta:
            return None
        token = self.meta.get("progressToken")
        return token if isinstance(token, (int, str)) and not isinstance(token, bool) else None


class ToolDescriptor(BaseModel):
    """An immutable tool definition as listed by ``tools/list``.

    Input and output schemas are derived from pydantic models so the schema a
    client sees is exactly the one :class:`ToolRegistry` validates against.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    input_model: type[BaseModel]
    output_model: type[BaseModel] | None = None

    @property
    def input_schema(self) -> dict[str, Any]:
        return self.input_model.model_json_schema()

    @property
    def output_schema(self) -> dict[str, Any] | None:
        if self.output_model is None:
            return None
        return self.output_model.model_json_schema()

    def to_wire(self) -> dict[str, Any]:
        """Render in the shape MCP clients expect."""
        wire: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }
        if self.output_model is not None:
            wire["outputSchema"] = self.output_schema
        return wire


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------


def parse(data: bytes | str) -> Message:
    """Decode one complete wire message.

    Raises :class:`ParseError` for undecodable JSON and
    :class:`InvalidRequestError` for JSON that is not a JSON-RPC message.
    """
    try:
        payload = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ParseError(str(exc)) from exc
    return parse_obj(payload)


def parse_obj(payload: Any) -> Message:
    """Validate an already-decoded JSON value as a message."""
    if isinstance(payload, list):
        msg = "batch messages are not supported"
        raise InvalidRequestError(msg)
    if not isinstance(payload, dict):
        msg = "message must be a JSON object"
        raise InvalidRequestError(msg)

    request_id = _recover_id(payload)
    if payload.get("jsonrpc") != JSONRPC_VERSION:
        msg = "'jsonrpc' must be exactly '2.0'"
        raise InvalidRequestError(msg, request_id)

    model: type[BaseModel]
    if "method" in payload:
        model = JsonRpcRequest if "id" in payload else JsonRpcNotification
    elif "result" in payload or "error" in payload:
        model = JsonRpcResponse
    else:
        msg = "message has neither 'method' nor 'result'/'error'"
        raise InvalidRequestError(msg, request_id)

    try:
        return model.model_validate(payload)  # type: ignore[return-value]
    except ValidationError as exc:
        raise InvalidRequestError(_describe(exc), request_id) from exc


def serialize(message: Message) -> bytes:
    """Encode a message as compact UTF-8 JSON (no trailing newline)."""
    payload = message.model_dump(mode="json")
    if isinstance(message, JsonRpcResponse):
        payload.pop("error" if message.error is None else "result")
        if message.error is not None and message.error.data is None:
            payload["error"].pop("data")
    elif payload.get("params") is None:
        payload.pop("params")
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode()


def _recover_id(payload: dict[str, Any]) -> int | str | None:
    request_id = payload.get("id")
    if isinstance(request_id, bool) or not isinstance(request_id, (int, str)):
        return None
    return request_id


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "message"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)
