"""Deterministic tool registration primitives."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

ToolHandler = Callable[[dict[str, object]], dict[str, object]]


@dataclass(slots=True, frozen=True)
class ToolDispatchError(Exception):
    """A tool failure reported to the client as an error envelope."""

    code: str
    message: str

    @classmethod
    def invalid_params(cls, message: str) -> ToolDispatchError:
        return cls(code="INVALID_PARAMS", message=message)


@dataclass(slots=True)
class ToolRegistry:
    """Named tool handlers kept in registration order."""

    _handlers: dict[str, ToolHandler] = field(default_factory=dict)

    def register(self, name: str, handler: ToolHandler) -> None:
        """Register a handler; names must be unique."""
        if name in self._handlers:
            raise ValueError(f"Tool already registered: {name}")
        self._handlers[name] = handler

    def names(self) -> tuple[str, ...]:
        """Return registered tool names in registration order."""
        return tuple(self._handlers)

    def dispatch(self, name: str, arguments: dict[str, object]) -> dict[str, object]:
        """Run the handler registered under ``name``."""
        handler = self._handlers.get(name)
        if handler is None:
            raise ToolDispatchError(code="UNKNOWN_TOOL", message=f"Unknown tool: {name}")
        return handler(arguments)
