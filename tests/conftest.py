"""Shared fixtures and message builders."""

from __future__ import annotations

from typing import Any

import pytest

from eligibility_mcp.eligibility import TOOL_NAME
from eligibility_mcp.protocol import Dispatcher, JsonRpcRequest, Session
from eligibility_mcp.server import build_dispatcher

THIRD_CHILD = {
    "relationship": "father",
    "situation": "birth",
    "is_single_parent": False,
    "total_children_after": 3,
}


def request(request_id: int | str, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
    """Build a JSON-RPC request as a plain dict."""
    message: dict[str, Any] = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        message["params"] = params
    return message


def initialize(request_id: int | str = 0, *, progress: bool = False) -> dict[str, Any]:
    capabilities: dict[str, Any] = {"experimental": {"progress": True}} if progress else {}
    return request(
        request_id,
        "initialize",
        {
            "protocolVersion": "2025-06-18",
            "capabilities": capabilities,
            "clientInfo": {"name": "pytest", "version": "1"},
        },
    )


def call_tool(request_id: int | str, arguments: dict[str, Any], name: str = TOOL_NAME) -> dict[str, Any]:
    return request(request_id, "tools/call", {"name": name, "arguments": arguments})


@pytest.fixture
def dispatcher() -> Dispatcher:
    return build_dispatcher()


@pytest.fixture
def session(dispatcher: Dispatcher) -> Session:
    """A session that has completed ``initialize``."""
    session = Session()
    response = dispatcher.dispatch(session, JsonRpcRequest.model_validate(initialize()))
    assert response is not None and response.error is None
    return session
