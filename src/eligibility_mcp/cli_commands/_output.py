"""Shared CLI output formatters."""

from __future__ import annotations

import json
import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from eligibility_mcp.eligibility import EligibilityResult  # noqa: TC001
from eligibility_mcp.protocol import ToolDescriptor  # noqa: TC001

console = Console()
# stdout is the line transport's data channel; diagnostics go to stderr.
err_console = Console(stderr=True)


def configure_logging(level: str) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def print_tools_table(descriptors: list[ToolDescriptor], *, as_json: bool = False) -> None:
    """Pretty-print registered tools as a table."""
    if as_json:
        console.print_json(json.dumps([d.to_wire() for d in descriptors]))
        return

    table = Table(title="Registered Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Required arguments")

    for descriptor in descriptors:
        required = descriptor.input_schema.get("required", [])
        table.add_row(
            descriptor.name,
            _truncate(descriptor.description),
            ", ".join(required) or "-",
        )

    console.print(table)


def print_result(result: EligibilityResult, *, as_json: bool = False) -> None:
    """Pretty-print an eligibility determination."""
    if as_json:
        console.print_json(result.model_dump_json(exclude_none=True))
        return

    if result.potentially_eligible:
        console.print(f"[green]Potentially eligible[/green] — case {result.case.value if result.case else '?'}")
    else:
        console.print("[red]Not eligible[/red]")
    if result.description:
        console.print(f"  Description: {result.description}")
    if result.monthly_benefit is not None:
        console.print(f"  Monthly benefit: {result.monthly_benefit} EUR")
    if result.additional_requirements:
        console.print(f"  Requirements: {result.additional_requirements}")
    for error in result.errors:
        console.print(f"  [red]error:[/red] {error}")
    for warning in result.warnings:
        console.print(f"  [yellow]warning:[/yellow] {warning}")


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
