"""Write file tool."""

from __future__ import annotations

import os
from typing import ClassVar, Literal

from pydantic import BaseModel, Field

from shellwright.errors import ShellwrightError
from shellwright.paths import normalize_path
from shellwright.tool.base import BaseTool, ToolOk, ToolResult


class WriteFileParams(BaseModel):
    path: str = Field(description="Path to the file to write.")
    content: str = Field(description="Content to write to the file.")
    mode: Literal["overwrite", "append"] = Field(
        default="overwrite", description="Overwrite the file or append to it."
    )
    create_dirs: bool = Field(
        default=True, description="Create missing parent directories."
    )


class WriteFileTool(BaseTool[WriteFileParams]):
    """Write or append content to a file."""

    name: ClassVar[str] = "file_write"
    description: ClassVar[str] = (
        "Write content to a file, creating it (and parent directories) if needed. "
        "mode='append' adds to the end instead of overwriting."
    )
    param_model: ClassVar[type[BaseModel]] = WriteFileParams

    def __init__(self, cwd: str | None = None) -> None:
        self._cwd = normalize_path(cwd or "~")

    async def execute(self, params: WriteFileParams) -> ToolResult:
        path = normalize_path(params.path, base=self._cwd)
        existed = os.path.exists(path)

        try:
            if params.create_dirs:
                os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, "a" if params.mode == "append" else "w", encoding="utf-8") as f:
                f.write(params.content)
        except OSError as e:
            raise ShellwrightError.from_os_error(e, path) from e

        return ToolOk(
            data={
                "path": path,
                "bytes_written": len(params.content.encode("utf-8")),
                "created": not existed,
            }
        )
