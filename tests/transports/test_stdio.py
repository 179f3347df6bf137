"""Tests for the line (stdio) transport."""

from __future__ import annotations

import io
import json
from typing import Any
from unittest.mock import MagicMock

from eligibility_mcp.eligibility import EligibilityInput, EligibilityResult, evaluate
from eligibility_mcp.protocol import SessionState
from eligibility_mcp.server import build_dispatcher
from eligibility_mcp.transports.stdio import LineTransport
from tests.conftest import THIRD_CHILD, call_tool, initialize, request


def _encode(*messages: dict[str, Any] | bytes) -> bytes:
    lines = [m if isinstance(m, bytes) else json.dumps(m).encode() for m in messages]
    return b"".join(line + b"\n" for line in lines)


def _decode(output: io.BytesIO) -> list[dict[str, Any]]:
    return [json.loads(line) for line in output.getvalue().splitlines()]


class TestLineTransport:
    def test_request_response_round(self) -> None:
        output = io.BytesIO()
        transport = LineTransport(
            build_dispatcher(),
            io.BytesIO(_encode(initialize(0), request(1, "tools/list"), call_tool(2, THIRD_CHILD))),
            output,
        )
        session = transport.serve()

        responses = _decode(output)
        assert [r["id"] for r in responses] == [0, 1, 2]
        assert responses[2]["result"]["structuredContent"]["case"] == "B"
        assert session.state is SessionState.CLOSED

    def test_each_response_written_before_next_dispatch(self) -> None:
        output = io.BytesIO()
        written_at_call: list[int] = []

        def recording(applicant: EligibilityInput) -> EligibilityResult:
            written_at_call.append(len(output.getvalue().splitlines()))
            return evaluate(applicant)

        transport = LineTransport(
            build_dispatcher(recording),
            io.BytesIO(_encode(initialize(0), call_tool(1, THIRD_CHILD), call_tool(2, THIRD_CHILD))),
            output,
        )
        transport.serve()

        assert written_at_call == [1, 2]
        assert len(_decode(output)) == 3

    def test_malformed_line_closes_session(self) -> None:
        decision = MagicMock(side_effect=evaluate)
        output = io.BytesIO()
        transport = LineTransport(
            build_dispatcher(decision),
            io.BytesIO(_encode(initialize(0), b"{this is not json", call_tool(1, THIRD_CHILD))),
            output,
        )
        session = transport.serve()

        responses = _decode(output)
        assert len(responses) == 2
        assert responses[1]["id"] is None
        assert responses[1]["error"]["code"] == -32700
        assert session.state is SessionState.CLOSED
        decision.assert_not_called()

    def test_invalid_envelope_keeps_id(self) -> None:
        output = io.BytesIO()
        bad = {"jsonrpc": "1.0", "id": 5, "method": "ping"}
        LineTransport(build_dispatcher(), io.BytesIO(_encode(bad)), output).serve()

        (response,) = _decode(output)
        assert response["id"] == 5
        assert response["error"]["code"] == -32600

    def test_protocol_errors_keep_session_open(self) -> None:
        output = io.BytesIO()
        LineTransport(
            build_dispatcher(),
            io.BytesIO(_encode(request(1, "tools/list"), initialize(2), request(3, "ping"))),
            output,
        ).serve()

        responses = _decode(output)
        assert responses[0]["error"]["code"] == -32002
        assert responses[1]["result"]["serverInfo"]["name"] == "eligibility-engine"
        assert responses[2]["result"] == {}

    def test_blank_lines_skipped(self) -> None:
        output = io.BytesIO()
        data = b"\n   \n" + _encode(initialize(0)) + b"\n"
        LineTransport(build_dispatcher(), io.BytesIO(data), output).serve()
        assert [r["id"] for r in _decode(output)] == [0]

    def test_notifications_produce_no_output(self) -> None:
        output = io.BytesIO()
        LineTransport(
            build_dispatcher(),
            io.BytesIO(_encode(initialize(0), {"jsonrpc": "2.0", "method": "notifications/initialized"})),
            output,
        ).serve()
        assert len(_decode(output)) == 1

    def test_progress_notification_precedes_response(self) -> None:
        message = call_tool(1, THIRD_CHILD)
        message["params"]["_meta"] = {"progressToken": 11}
        output = io.BytesIO()
        LineTransport(
            build_dispatcher(), io.BytesIO(_encode(initialize(0, progress=True), message)), output
        ).serve()

        frames = _decode(output)
        assert frames[1]["method"] == "notifications/progress"
        assert frames[1]["params"]["progressToken"] == 11
        assert frames[2]["id"] == 1

    def test_empty_input_closes(self) -> None:
        session = LineTransport(build_dispatcher(), io.BytesIO(b""), io.BytesIO()).serve()
        assert session.is_closed

    def test_broken_pipe_closes(self) -> None:
        output = MagicMock()
        output.write.side_effect = BrokenPipeError()
        session = LineTransport(build_dispatcher(), io.BytesIO(_encode(initialize(0))), output).serve()
        assert session.is_closed

    def test_sessions_are_independent(self) -> None:
        dispatcher = build_dispatcher()
        broken = LineTransport(dispatcher, io.BytesIO(b"garbage\n"), io.BytesIO())
        healthy_output = io.BytesIO()
        healthy = LineTransport(dispatcher, io.BytesIO(_encode(initialize(0), request(1, "ping"))), healthy_output)

        broken.serve()
        healthy.serve()

        assert [r["id"] for r in _decode(healthy_output)] == [0, 1]
        assert "error" not in _decode(healthy_output)[1]
