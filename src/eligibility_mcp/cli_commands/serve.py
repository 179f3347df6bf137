"""``eligibility-mcp serve`` — run the server on one transport."""

from __future__ import annotations

import asyncio
import sys

import click

from eligibility_mcp.cli_commands._output import configure_logging, err_console


@click.command()
@click.option(
    "--transport",
    "-t",
    type=click.Choice(["stdio", "sse", "http"]),
    default="stdio",
    help="Transport binding to serve.",
)
@click.option("--host", default=None, help="Bind host (overrides BIND_ADDRESS).")
@click.option("--port", type=int, default=None, help="Bind port (overrides BIND_ADDRESS).")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Log verbosity (overrides LOG_LEVEL).",
)
@click.option("--queue-limit", type=int, default=None, help="Outbound frame bound for streaming HTTP.")
@click.option("--max-in-flight", type=int, default=None, help="Concurrent requests per session.")
@click.option("--telemetry", is_flag=True, help="Export trace spans to the console (stderr).")
def serve(
    transport: str,
    host: str | None,
    port: int | None,
    log_level: str | None,
    queue_limit: int | None,
    max_in_flight: int | None,
    telemetry: bool,
) -> None:
    """Serve the eligibility tool over TRANSPORT."""
    from pydantic import ValidationError

    from eligibility_mcp.config import ServerConfig
    from eligibility_mcp.server import build_dispatcher

    try:
        config = ServerConfig.from_env(
            host=host,
            port=port,
            log_level=log_level.upper() if log_level else None,
            outbound_queue_limit=queue_limit,
            max_in_flight=max_in_flight,
            telemetry=telemetry or None,
        )
    except (ValueError, ValidationError) as exc:
        err_console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(2)

    configure_logging(config.log_level)

    if config.telemetry or config.otlp_endpoint:
        from eligibility_mcp.utils.telemetry import configure_telemetry

        try:
            configure_telemetry(
                export_to_console=config.telemetry, otlp_endpoint=config.otlp_endpoint
            )
        except ImportError as exc:
            err_console.print(f"[yellow]Telemetry disabled:[/yellow] {exc}")

    dispatcher = build_dispatcher()

    if transport == "stdio":
        from eligibility_mcp.transports.stdio import LineTransport

        LineTransport(dispatcher, sys.stdin.buffer, sys.stdout.buffer).serve()
        return

    from eligibility_mcp.transports.app import serve_http

    try:
        asyncio.run(serve_http(config, transport, dispatcher))  # type: ignore[arg-type]
    except KeyboardInterrupt:
        err_console.print("Shutting down.")
    except OSError as exc:
        err_console.print(f"[red]Cannot start server:[/red] {exc}")
        sys.exit(1)
