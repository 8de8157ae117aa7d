"""Read file tool."""

from __future__ import annotations

import os
from typing import ClassVar

from pydantic import BaseModel, Field

from shellwright.errors import ErrorCode, ShellwrightError
from shellwright.paths import normalize_path
from shellwright.tool.base import BaseTool, ToolOk, ToolResult


class ReadFileParams(BaseModel):
    path: str = Field(description="Absolute or relative path to the file to read.")
    start_line: int = Field(
        default=0,
        description="First line to read (0-indexed). Negative values read that many lines from the end.",
    )
    end_line: int = Field(
        default=-1, ge=-1, description="Last line to read, inclusive. -1 reads to the end."
    )


class ReadFileTool(BaseTool[ReadFileParams]):
    """Read file contents, optionally a line range."""

    name: ClassVar[str] = "file_read"
    description: ClassVar[str] = (
        "Read a text file. Supports a line range (start_line/end_line, 0-indexed, inclusive) "
        "and tail reads with a negative start_line."
    )
    param_model: ClassVar[type[BaseModel]] = ReadFileParams

    def __init__(self, cwd: str | None = None, max_file_read_mb: int = 10) -> None:
        self._cwd = normalize_path(cwd or "~")
        self._max_bytes = max_file_read_mb * 1024 * 1024

    async def execute(self, params: ReadFileParams) -> ToolResult:
        path = normalize_path(params.path, base=self._cwd)

        try:
            if os.path.isdir(path):
                raise ShellwrightError(
                    f"Path is a directory: {path}", code=ErrorCode.NOT_A_FILE
                )
            size = os.path.getsize(path)
            if size > self._max_bytes:
                raise ShellwrightError(
                    f"File too large: {size} bytes (max {self._max_bytes} bytes)",
                    code=ErrorCode.INVALID_ARGUMENT,
                )
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                content = f.read()
        except OSError as e:
            raise ShellwrightError.from_os_error(e, path) from e

        lines = content.split("\n")
        total = len(lines)

        if params.start_line < 0:
            start = max(0, total + params.start_line)
            end = total
        else:
            start = min(params.start_line, total)
            end = total if params.end_line == -1 else min(params.end_line + 1, total)
        end = max(start, end)

        return ToolOk(
            data={
                "content": "\n".join(lines[start:end]),
                "total_lines": total,
                "read_lines": end - start,
                "truncated": end < total,
            }
        )
