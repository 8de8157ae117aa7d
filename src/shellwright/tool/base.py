"""Base tool classes with Pydantic parameter validation."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from shellwright.errors import ErrorCode, InvalidParamsError, ShellwrightError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


@dataclass
class ToolResult:
    """Base result from a tool execution."""

    data: dict[str, Any] = field(default_factory=dict)
    is_error: bool = False

    def render(self) -> str:
        return json.dumps(self.data, indent=2, ensure_ascii=False)


@dataclass
class ToolOk(ToolResult):
    """Successful tool result."""

    is_error: bool = False


@dataclass
class ToolError(ToolResult):
    """Failed tool result carrying a structured error payload."""

    is_error: bool = True

    @classmethod
    def from_exception(cls, err: ShellwrightError) -> ToolError:
        return cls(data=err.to_dict())


class BaseTool(ABC, Generic[T]):
    """Base class for all tools.

    Tools are pure functions: structured input -> structured output.
    Each tool declares its parameters as a Pydantic model (the type parameter T)
    and returns a JSON-serializable payload.

    Usage:
        class MyParams(BaseModel):
            path: str

        class MyTool(BaseTool[MyParams]):
            name = "my_tool"
            description = "Does something useful"
            param_model = MyParams

            async def execute(self, params: MyParams) -> ToolResult:
                return ToolOk(data={"done": True})
    """

    name: ClassVar[str]
    description: ClassVar[str]
    param_model: ClassVar[type[BaseModel]]

    async def run(self, arguments: dict[str, Any]) -> ToolResult:
        """Validate arguments and execute, converting every failure to a ToolError."""
        try:
            params = self.param_model.model_validate(arguments)
        except ValidationError as e:
            return ToolError.from_exception(
                InvalidParamsError(
                    f"Invalid parameters: {e.error_count()} validation error(s)",
                    details={"errors": e.errors(include_url=False, include_context=False)},
                )
            )

        try:
            return await self.execute(params)  # type: ignore[arg-type]
        except ShellwrightError as e:
            return ToolError.from_exception(e)
        except Exception as e:
            logger.error("Tool %s execution error: %s", self.name, e, exc_info=True)
            return ToolError.from_exception(
                ShellwrightError(
                    f"Error executing {self.name}: {e}", code=ErrorCode.UNKNOWN_ERROR
                )
            )

    async def __call__(self, arguments: dict[str, Any]) -> tuple[str, bool]:
        """Run the tool.

        Returns:
            (content, is_error) tuple with the JSON-rendered payload.
        """
        result = await self.run(arguments)
        return result.render(), result.is_error

    @abstractmethod
    async def execute(self, params: T) -> ToolResult:
        """Execute the tool with validated parameters."""
        ...

    def to_mcp_spec(self) -> dict[str, Any]:
        """Name, description and JSON schema for the tool's parameters."""
        schema = self.param_model.model_json_schema()
        schema.pop("title", None)
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": schema,
        }
