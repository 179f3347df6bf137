"""Tests for the JSON-RPC message model and codec."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from eligibility_mcp.protocol import (
    InvalidRequestError,
    JsonRpcError,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    ParseError,
    parse,
    serialize,
)
from eligibility_mcp.protocol.models import CallToolParams


class TestParse:
    def test_request(self) -> None:
        message = parse(b'{"jsonrpc":"2.0","id":1,"method":"tools/list"}')
        assert isinstance(message, JsonRpcRequest)
        assert message.id == 1
        assert message.method == "tools/list"
        assert message.params is None

    def test_notification(self) -> None:
        message = parse('{"jsonrpc":"2.0","method":"notifications/initialized"}')
        assert isinstance(message, JsonRpcNotification)

    def test_response(self) -> None:
        message = parse('{"jsonrpc":"2.0","id":"a","result":{}}')
        assert isinstance(message, JsonRpcResponse)
        assert message.id == "a"

    def test_numeric_id_stays_numeric(self) -> None:
        message = parse('{"jsonrpc":"2.0","id":7,"method":"ping"}')
        assert isinstance(message.id, int)
        assert b'"id":7' in serialize(JsonRpcResponse.success(message.id, {}))

    def test_string_id_stays_string(self) -> None:
        message = parse('{"jsonrpc":"2.0","id":"7","method":"ping"}')
        assert message.id == "7"
        assert b'"id":"7"' in serialize(JsonRpcResponse.success(message.id, {}))

    def test_invalid_json(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse(b"{not json")
        assert exc_info.value.code == -32700
        assert not isinstance(exc_info.value, InvalidRequestError)

    def test_invalid_utf8(self) -> None:
        with pytest.raises(ParseError):
            parse(b'"\xc3\x28"')

    def test_wrong_version(self) -> None:
        with pytest.raises(InvalidRequestError) as exc_info:
            parse('{"jsonrpc":"1.0","id":3,"method":"ping"}')
        assert exc_info.value.code == -32600
        assert exc_info.value.request_id == 3

    def test_batch_rejected(self) -> None:
        with pytest.raises(InvalidRequestError, match="batch"):
            parse('[{"jsonrpc":"2.0","id":1,"method":"ping"}]')

    def test_non_object_rejected(self) -> None:
        with pytest.raises(InvalidRequestError):
            parse("42")

    @pytest.mark.parametrize("bad_id", ["true", "1.5", "null", "[1]"])
    def test_bad_id_types_rejected(self, bad_id: str) -> None:
        with pytest.raises(InvalidRequestError) as exc_info:
            parse(f'{{"jsonrpc":"2.0","id":{bad_id},"method":"ping"}}')
        assert exc_info.value.request_id is None

    def test_missing_method_and_result(self) -> None:
        with pytest.raises(InvalidRequestError):
            parse('{"jsonrpc":"2.0","id":1}')

    def test_params_must_be_object(self) -> None:
        with pytest.raises(InvalidRequestError) as exc_info:
            parse('{"jsonrpc":"2.0","id":9,"method":"ping","params":[1,2]}')
        assert exc_info.value.request_id == 9


class TestSerialize:
    def test_compact_single_line(self) -> None:
        data = serialize(JsonRpcResponse.success(1, {"text": "a\nb"}))
        assert b"\n" not in data
        assert json.loads(data) == {"jsonrpc": "2.0", "id": 1, "result": {"text": "a\nb"}}

    def test_error_response_omits_result_and_empty_data(self) -> None:
        response = JsonRpcResponse.failure(2, JsonRpcError(code=-32601, message="Method not found: x"))
        assert json.loads(serialize(response)) == {
            "jsonrpc": "2.0",
            "id": 2,
            "error": {"code": -32601, "message": "Method not found: x"},
        }

    def test_null_id_kept_for_uncorrelated_errors(self) -> None:
        response = JsonRpcResponse.failure(None, JsonRpcError(code=-32700, message="Parse error"))
        assert json.loads(serialize(response))["id"] is None

    def test_notification_without_params(self) -> None:
        data = serialize(JsonRpcNotification(method="notifications/initialized"))
        assert json.loads(data) == {"jsonrpc": "2.0", "method": "notifications/initialized"}

    def test_non_ascii_preserved(self) -> None:
        data = serialize(JsonRpcResponse.success(1, {"amount": "725 €"}))
        assert "€".encode() in data


class TestResponseInvariant:
    def test_both_result_and_error_rejected(self) -> None:
        with pytest.raises(ValidationError):
            JsonRpcResponse(id=1, result={}, error=JsonRpcError(code=-1, message="x"))

    def test_neither_rejected(self) -> None:
        with pytest.raises(ValidationError):
            JsonRpcResponse(id=1)


class TestCallToolParams:
    def test_progress_token_from_meta(self) -> None:
        params = CallToolParams.model_validate({"name": "t", "_meta": {"progressToken": "tok"}})
        assert params.progress_token == "tok"

    def test_no_meta(self) -> None:
        assert CallToolParams(name="t").progress_token is None

    def test_boolean_token_ignored(self) -> None:
        params = CallToolParams.model_validate({"name": "t", "_meta": {"progressToken": True}})
        assert params.progress_token is None
