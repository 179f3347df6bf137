"""Registration of the eligibility tool on a :class:`ToolRegistry`."""

from __future__ import annotations

from typing import TYPE_CHECKING

from eligibility_mcp.eligibility.engine import DecisionFunction, evaluate
from eligibility_mcp.eligibility.models import EligibilityInput, EligibilityResult
from eligibility_mcp.protocol.models import ToolDescriptor

if TYPE_CHECKING:
    from eligibility_mcp.protocol.registry import ToolRegistry

TOOL_NAME = "evaluate_unpaid_leave_eligibility"

TOOL_DESCRIPTION = (
    "Evaluates unpaid leave assistance eligibility according to the regulations. "
    "Determines the case (A-E) and the monthly amount (0/500/725 EUR). "
    "CASES: A=sick family care (725), B=third child or later (500), C=adoption or "
    "foster care (500), D=multiple birth/adoption/foster care (500), E=single-parent "
    "family (500). Use the exact enumerated values for relationship and situation."
)

INSTRUCTIONS = """\
Eligibility engine for unpaid leave assistance.

Tool usage:
1. Always use the exact values listed for each parameter; they are case sensitive.
2. relationship: father, mother, parent, son, daughter, spouse, partner, husband, wife, foster_parent.
3. situation: birth, adoption, foster_care, multiple_birth, multiple_adoption,
   multiple_foster_care, illness, accident. When more than one child arrives at the
   same time use the multiple_* values.
4. is_single_parent: true for single-parent families, otherwise false. Use false when
   there is no information about the family structure.
5. total_children_after: a whole number, required for birth, adoption and foster care
   situations; omit or use 0 for illness and accident.

Examples:
- Single father with a baby: relationship=father, situation=birth, is_single_parent=true, total_children_after=1
- Caring for a sick father: relationship=father, situation=illness, is_single_parent=false
- Family with a third child: relationship=mother, situation=birth, is_single_parent=false, total_children_after=3
"""

DESCRIPTOR = ToolDescriptor(
    name=TOOL_NAME,
    description=TOOL_DESCRIPTION,
    input_model=EligibilityInput,
    output_model=EligibilityResult,
)


def register_eligibility_tool(registry: ToolRegistry, decision: DecisionFunction = evaluate) -> None:
    """Register the eligibility tool backed by *decision*."""
    registry.register(DESCRIPTOR, decision)
