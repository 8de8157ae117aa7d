"""Tool registry: register and dispatch tools by name."""

from __future__ import annotations

import logging
from typing import Any

from shellwright.errors import InvalidParamsError
from shellwright.tool.base import BaseTool, ToolError, ToolResult

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Registry of available tools, looked up and dispatched by name."""

    def __init__(self) -> None:
        self._tools: dict[str, BaseTool] = {}

    def register(self, tool: BaseTool) -> None:
        """Register a tool instance."""
        if tool.name in self._tools:
            logger.warning("Tool %s already registered, overwriting", tool.name)
        self._tools[tool.name] = tool

    def register_many(self, tools: list[BaseTool]) -> None:
        for tool in tools:
            self.register(tool)

    def get(self, name: str) -> BaseTool | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools.keys())

    def get_specs(self) -> list[dict[str, Any]]:
        return [t.to_mcp_spec() for t in self._tools.values()]

    async def run(self, name: str, arguments: dict[str, Any]) -> ToolResult:
        """Dispatch to the named tool; unknown names yield an INVALID_PARAMS error."""
        tool = self._tools.get(name)
        if tool is None:
            return ToolError.from_exception(
                InvalidParamsError(
                    f"Unknown tool: {name}. Available tools: {', '.join(self.names())}"
                )
            )
        return await tool.run(arguments)

    async def dispatch(self, name: str, arguments: dict[str, Any]) -> tuple[str, bool]:
        """Dispatch and render.

        Returns:
            (content, is_error) tuple.
        """
        result = await self.run(name, arguments)
        return result.render(), result.is_error
