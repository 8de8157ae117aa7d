"""Tool system: base classes, registry, and output truncation."""

from shellwright.tool.base import BaseTool, ToolResult, ToolOk, ToolError
from shellwright.tool.registry import ToolRegistry
from shellwright.tool.truncation import truncate_output

__all__ = [
    "BaseTool",
    "ToolResult",
    "ToolOk",
    "ToolError",
    "ToolRegistry",
    "truncate_output",
]
