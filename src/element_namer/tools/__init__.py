"""Tool interfaces and registrations for the STDIO server."""

from .registry import ToolDispatchError, ToolHandler, ToolRegistry

__all__ = ["ToolDispatchError", "ToolHandler", "ToolRegistry"]
