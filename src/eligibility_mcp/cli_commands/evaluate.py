"""``eligibility-mcp evaluate`` — run one evaluation without a transport."""

from __future__ import annotations

import sys

import click

from eligibility_mcp.cli_commands._output import console, print_result
from eligibility_mcp.eligibility import Relationship, Situation


@click.command()
@click.option(
    "--relationship",
    "-r",
    required=True,
    type=click.Choice([r.value for r in Relationship]),
    help="Family relationship with the person who needs care.",
)
@click.option(
    "--situation",
    "-s",
    required=True,
    type=click.Choice([s.value for s in Situation]),
    help="Situation that motivates the need for care.",
)
@click.option("--single-parent/--no-single-parent", default=False, help="Single-parent family.")
@click.option("--children", "-c", type=float, default=None, help="Total children after the event.")
@click.option("--json", "as_json", is_flag=True, help="Print the raw result as JSON.")
def evaluate(
    relationship: str,
    situation: str,
    single_parent: bool,
    children: float | None,
    as_json: bool,
) -> None:
    """Evaluate unpaid leave eligibility for one applicant."""
    from eligibility_mcp.eligibility import TOOL_NAME, EligibilityResult
    from eligibility_mcp.protocol import SchemaValidationError
    from eligibility_mcp.server import build_registry

    arguments: dict[str, object] = {
        "relationship": relationship,
        "situation": situation,
        "is_single_parent": single_parent,
    }
    if children is not None:
        arguments["total_children_after"] = children

    try:
        payload = build_registry().invoke(TOOL_NAME, arguments)
    except SchemaValidationError as exc:
        console.print("[red]Validation error:[/red]")
        for error in exc.errors:
            console.print(f"  {error}")
        sys.exit(1)

    print_result(EligibilityResult.model_validate(payload), as_json=as_json)
