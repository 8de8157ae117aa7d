"""Edit file tool."""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, Field

from shellwright.errors import ErrorCode, ShellwrightError
from shellwright.paths import normalize_path
from shellwright.tool.base import BaseTool, ToolOk, ToolResult


class EditFileParams(BaseModel):
    path: str = Field(description="Path to the file to edit.")
    old_text: str = Field(min_length=1, description="Exact text to find.")
    new_text: str = Field(description="Replacement text.")
    occurrence: int = Field(
        default=1,
        description="Which match to replace: 1 is the first, -1 the last, 0 replaces all.",
    )


class EditFileTool(BaseTool[EditFileParams]):
    """Replace text in a file by exact match."""

    name: ClassVar[str] = "file_edit"
    description: ClassVar[str] = (
        "Replace an exact text match in a file. "
        "occurrence selects the match (1 = first, -1 = last, 0 = all)."
    )
    param_model: ClassVar[type[BaseModel]] = EditFileParams

    def __init__(self, cwd: str | None = None) -> None:
        self._cwd = normalize_path(cwd or "~")

    async def execute(self, params: EditFileParams) -> ToolResult:
        path = normalize_path(params.path, base=self._cwd)
        try:
            with open(path, "r", encoding="utf-8") as f:
                content = f.read()
        except OSError as e:
            raise ShellwrightError.from_os_error(e, path) from e

        positions = []
        pos = content.find(params.old_text)
        while pos != -1:
            positions.append(pos)
            pos = content.find(params.old_text, pos + 1)

        if not positions:
            raise ShellwrightError(
                f"Text not found in file: {path}",
                details={
                    "searched_for": params.old_text[:100],
                    "file_preview": content[:500],
                },
                code=ErrorCode.TEXT_NOT_FOUND,
            )

        if params.occurrence == 0:
            updated = content.replace(params.old_text, params.new_text)
            replacements = content.count(params.old_text)
        else:
            if params.occurrence > 0:
                index = params.occurrence - 1
            else:
                index = len(positions) + params.occurrence
            if not 0 <= index < len(positions):
                raise ShellwrightError(
                    f"Occurrence {params.occurrence} not found "
                    f"(only {len(positions)} occurrences exist)",
                    code=ErrorCode.TEXT_NOT_FOUND,
                )
            start = positions[index]
            updated = (
                content[:start] + params.new_text + content[start + len(params.old_text) :]
            )
            replacements = 1

        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(updated)
        except OSError as e:
            raise ShellwrightError.from_os_error(e, path) from e

        return ToolOk(data={"replacements": replacements, "path": path})
