"""Move file tool."""

from __future__ import annotations

import os
import shutil
from typing import ClassVar

from pydantic import BaseModel, Field

from shellwright.errors import ErrorCode, ShellwrightError
from shellwright.paths import normalize_path
from shellwright.tool.base import BaseTool, ToolOk, ToolResult


class MoveFileParams(BaseModel):
    source: str = Field(description="File or directory to move.")
    destination: str = Field(description="Target path.")
    overwrite: bool = Field(
        default=False, description="Replace the destination if it exists."
    )


class MoveFileTool(BaseTool[MoveFileParams]):
    """Move or rename a file or directory, across filesystems if needed."""

    name: ClassVar[str] = "file_move"
    description: ClassVar[str] = (
        "Move or rename a file or directory. Parent directories of the destination "
        "are created. Fails if the destination exists unless overwrite=true."
    )
    param_model: ClassVar[type[BaseModel]] = MoveFileParams

    def __init__(self, cwd: str | None = None) -> None:
        self._cwd = normalize_path(cwd or "~")

    async def execute(self, params: MoveFileParams) -> ToolResult:
        source = normalize_path(params.source, base=self._cwd)
        destination = normalize_path(params.destination, base=self._cwd)

        if not os.path.lexists(source):
            raise ShellwrightError(
                f"File or directory not found: {source}", code=ErrorCode.FILE_NOT_FOUND
            )
        existed = os.path.lexists(destination)
        if existed and not params.overwrite:
            raise ShellwrightError(
                f"Destination already exists: {destination}. "
                "Use overwrite=true to replace.",
                code=ErrorCode.ALREADY_EXISTS,
            )

        try:
            os.makedirs(os.path.dirname(destination), exist_ok=True)
            if existed and os.path.isdir(destination) and not os.path.islink(destination):
                shutil.rmtree(destination)
            # shutil.move falls back to copy + delete across devices
            shutil.move(source, destination)
        except OSError as e:
            raise ShellwrightError.from_os_error(e, source) from e

        return ToolOk(
            data={"source": source, "destination": destination, "overwritten": existed}
        )
