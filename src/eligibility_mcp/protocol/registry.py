"""ToolRegistry — maps tool names to descriptors and invocation functions."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ValidationError

from eligibility_mcp.protocol.errors import (
    InvokerError,
    RpcError,
    SchemaValidationError,
    ToolNotFoundError,
)
from eligibility_mcp.protocol.models import ToolDescriptor

logger = logging.getLogger(__name__)

Invoker = Callable[[Any], "BaseModel | dict[str, Any]"]


class ToolRegistry:
    """Append-only at startup, read-only once frozen.

    Usage::

        registry = ToolRegistry()
        registry.register(descriptor, invoker)
        registry.freeze()

        registry.list()                        # ordered descriptors
        registry.invoke("tool_name", {...})    # validated, then invoked
    """

    def __init__(self) -> None:
        self._tools: dict[str, tuple[ToolDescriptor, Invoker]] = {}
        self._frozen = False

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, descriptor: ToolDescriptor, invoker: Invoker) -> None:
        """Add a tool; names are unique and registration closes at :meth:`freeze`."""
        if self._frozen:
            msg = f"registry is frozen; cannot register tool: {descriptor.name}"
            raise RuntimeError(msg)
        if descriptor.name in self._tools:
            msg = f"tool already registered: {descriptor.name}"
            raise ValueError(msg)
        self._tools[descriptor.name] = (descriptor, invoker)
        logger.debug("Registered tool %s", descriptor.name)

    def freeze(self) -> None:
        """Close registration before any transport accepts traffic."""
        self._frozen = True

    def list(self) -> list[ToolDescriptor]:
        """Return descriptors in registration order."""
        return [descriptor for descriptor, _ in self._tools.values()]

    def get(self, name: str) -> ToolDescriptor:
        entry = self._tools.get(name)
        if entry is None:
            raise ToolNotFoundError(name)
        return entry[0]

    def invoke(self, name: str, params: dict[str, Any] | None) -> dict[str, Any]:
        """Validate *params* against the input schema, then call the invoker.

        Schema failures raise :class:`SchemaValidationError`; anything the
        invoker raises is wrapped in :class:`InvokerError`.
        """
        entry = self._tools.get(name)
        if entry is None:
            raise ToolNotFoundError(name)
        descriptor, invoker = entry

        try:
            validated = descriptor.input_model.model_validate(params or {})
        except ValidationError as exc:
            raise SchemaValidationError(name, field_errors(exc)) from exc

        try:
            result = invoker(validated)
        except RpcError:
            raise
        except Exception as exc:
            logger.exception("Invoker for tool %s failed", name)
            raise InvokerError(name, f"{type(exc).__name__}: {exc}") from exc

        if isinstance(result, BaseModel):
            return result.model_dump(mode="json", exclude_none=True)
        return dict(result)


def field_errors(exc: ValidationError) -> list[dict[str, Any]]:
    """Flatten a pydantic ``ValidationError`` into field-level detail."""
    fields: list[dict[str, Any]] = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "input"
        fields.append({"field": loc, "message": err["msg"], "type": err["type"]})
    return fields
