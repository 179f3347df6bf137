"""Eligibility MCP CLI entrypoint."""

from __future__ import annotations

import click

from eligibility_mcp import __version__


@click.group()
@click.version_option(version=__version__, prog_name="eligibility-mcp")
def main() -> None:
    """Eligibility Engine MCP — serve and exercise the eligibility tool."""


# Register subcommands
from eligibility_mcp.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
