"""Eligibility Engine MCP — unpaid leave eligibility served over the Model Context Protocol."""

from __future__ import annotations

__version__ = "0.1.0"
