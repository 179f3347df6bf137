"""Startup wiring — build the frozen registry and the shared dispatcher."""

from __future__ import annotations

from eligibility_mcp.eligibility import DecisionFunction, evaluate, register_eligibility_tool
from eligibility_mcp.eligibility.tool import INSTRUCTIONS
from eligibility_mcp.protocol import Dispatcher, ServerInfo, ToolRegistry


def build_registry(decision: DecisionFunction = evaluate) -> ToolRegistry:
    """Register the eligibility tool and close registration."""
    registry = ToolRegistry()
    register_eligibility_tool(registry, decision)
    registry.freeze()
    return registry


def build_dispatcher(decision: DecisionFunction = evaluate) -> Dispatcher:
    """Return the one dispatcher every transport and session shares."""
    return Dispatcher(build_registry(decision), server_info=ServerInfo(instructions=INSTRUCTIONS))
