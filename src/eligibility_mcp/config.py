"""Server configuration — built once at startup and passed to each transport."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_BIND_ADDRESS = "127.0.0.1:8001"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class ServerConfig(BaseModel):
    """Explicit configuration for the transports.

    Nothing inside the protocol layer reads the environment; only the CLI calls
    :meth:`from_env`.
    """

    model_config = ConfigDict(frozen=True)

    host: str = "127.0.0.1"
    port: int = Field(default=8001, ge=0, le=65535)
    log_level: LogLevel = "INFO"

    sse_path: str = "/sse"
    message_path: str = "/messages"
    mcp_path: str = "/mcp"
    metrics_path: str = "/metrics"
    health_path: str = "/health"

    outbound_queue_limit: int = Field(
        default=64,
        ge=1,
        description="Frames buffered for a slow streaming-HTTP reader before the session is failed.",
    )
    max_in_flight: int = Field(
        default=32,
        ge=1,
        description="Concurrent requests per session; further requests are rejected as busy.",
    )
    keepalive_interval: float = Field(
        default=15.0,
        gt=0,
        description="Seconds between keepalive comments on an idle event stream.",
    )

    telemetry: bool = False
    otlp_endpoint: str | None = None

    @property
    def bind_address(self) -> str:
        return f"{self.host}:{self.port}"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: object) -> ServerConfig:
        """Read ``BIND_ADDRESS`` and ``LOG_LEVEL``; explicit *overrides* win."""
        env = os.environ if environ is None else environ
        host, port = parse_bind_address(env.get("BIND_ADDRESS") or DEFAULT_BIND_ADDRESS)
        values: dict[str, object] = {"host": host, "port": port}
        if env.get("LOG_LEVEL"):
            values["log_level"] = env["LOG_LEVEL"].upper()
        if env.get("OTEL_EXPORTER_OTLP_ENDPOINT"):
            values["otlp_endpoint"] = env["OTEL_EXPORTER_OTLP_ENDPOINT"]
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(values)


def parse_bind_address(address: str) -> tuple[str, int]:
    """Split ``host:port``; the host may be empty or a bracketed IPv6 literal."""
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        msg = f"Invalid bind address (expected host:port): {address!r}"
        raise ValueError(msg)
    host = host.strip("[]") or "0.0.0.0"
    return host, int(port)
