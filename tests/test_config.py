"""Tests for ServerConfig and environment parsing."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from eligibility_mcp.config import ServerConfig, parse_bind_address


class TestDefaults:
    def test_defaults(self) -> None:
        config = ServerConfig()
        assert config.bind_address == "127.0.0.1:8001"
        assert config.log_level == "INFO"
        assert (config.sse_path, config.message_path, config.mcp_path) == ("/sse", "/messages", "/mcp")
        assert config.outbound_queue_limit == 64
        assert config.max_in_flight == 32
        assert config.keepalive_interval == 15.0

    def test_frozen(self) -> None:
        config = ServerConfig()
        with pytest.raises(ValidationError):
            config.port = 9000  # type: ignore[misc]

    @pytest.mark.parametrize("field", ["outbound_queue_limit", "max_in_flight"])
    def test_bounds_must_be_positive(self, field: str) -> None:
        with pytest.raises(ValidationError):
            ServerConfig(**{field: 0})


class TestFromEnv:
    def test_empty_environment(self) -> None:
        assert ServerConfig.from_env({}) == ServerConfig()

    def test_bind_address_and_log_level(self) -> None:
        config = ServerConfig.from_env({"BIND_ADDRESS": "0.0.0.0:9100", "LOG_LEVEL": "debug"})
        assert config.host == "0.0.0.0"
        assert config.port == 9100
        assert config.log_level == "DEBUG"

    def test_otlp_endpoint(self) -> None:
        config = ServerConfig.from_env({"OTEL_EXPORTER_OTLP_ENDPOINT": "http://collector:4317"})
        assert config.otlp_endpoint == "http://collector:4317"

    def test_overrides_win(self) -> None:
        config = ServerConfig.from_env({"BIND_ADDRESS": "0.0.0.0:9100"}, port=7000, host=None)
        assert config.host == "0.0.0.0"
        assert config.port == 7000

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValidationError):
            ServerConfig.from_env({"LOG_LEVEL": "chatty"})

    def test_reads_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BIND_ADDRESS", "127.0.0.1:8123")
        assert ServerConfig.from_env().port == 8123


class TestParseBindAddress:
    @pytest.mark.parametrize(
        ("address", "expected"),
        [
            ("127.0.0.1:8001", ("127.0.0.1", 8001)),
            (":8080", ("0.0.0.0", 8080)),
            ("[::1]:9000", ("::1", 9000)),
            ("localhost:1", ("localhost", 1)),
        ],
    )
    def test_valid(self, address: str, expected: tuple[str, int]) -> None:
        assert parse_bind_address(address) == expected

    @pytest.mark.parametrize("address", ["8001", "host:", "host:port"])
    def test_invalid(self, address: str) -> None:
        with pytest.raises(ValueError, match="bind address"):
            parse_bind_address(address)
