"""``eligibility-mcp tools`` — inspect the registered tools."""

from __future__ import annotations

import click

from eligibility_mcp.cli_commands._output import print_tools_table


@click.group()
def tools() -> None:
    """Inspect registered tools."""


@tools.command("list")
@click.option("--json", "as_json", is_flag=True, help="Print the tools/list payload as JSON.")
def list_tools(as_json: bool) -> None:
    """List the tools exposed over every transport."""
    from eligibility_mcp.server import build_registry

    print_tools_table(build_registry().list(), as_json=as_json)
