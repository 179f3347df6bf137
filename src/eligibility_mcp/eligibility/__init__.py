"""Unpaid leave eligibility — input model, decision function, and tool."""

from eligibility_mcp.eligibility.engine import DecisionFunction, evaluate
from eligibility_mcp.eligibility.models import (
    CaseId,
    EligibilityInput,
    EligibilityResult,
    Relationship,
    Situation,
)
from eligibility_mcp.eligibility.tool import TOOL_NAME, register_eligibility_tool

__all__ = [
    "TOOL_NAME",
    "CaseId",
    "DecisionFunction",
    "EligibilityInput",
    "EligibilityResult",
    "Relationship",
    "Situation",
    "evaluate",
    "register_eligibility_tool",
]
