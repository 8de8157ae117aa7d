"""Delete file tool."""

from __future__ import annotations

import os
import shutil
from typing import ClassVar

from pydantic import BaseModel, Field

from shellwright.errors import ErrorCode, ShellwrightError
from shellwright.paths import normalize_path
from shellwright.tool.base import BaseTool, ToolOk, ToolResult


class DeleteFileParams(BaseModel):
    path: str = Field(description="File or directory to delete.")
    recursive: bool = Field(
        default=False, description="Required to delete a directory and its contents."
    )


class DeleteFileTool(BaseTool[DeleteFileParams]):
    """Delete a file, or a directory tree when ``recursive`` is set."""

    name: ClassVar[str] = "file_delete"
    description: ClassVar[str] = (
        "Delete a file. Directories require recursive=true."
    )
    param_model: ClassVar[type[BaseModel]] = DeleteFileParams

    def __init__(self, cwd: str | None = None) -> None:
        self._cwd = normalize_path(cwd or "~")

    async def execute(self, params: DeleteFileParams) -> ToolResult:
        path = normalize_path(params.path, base=self._cwd)
        try:
            is_dir = os.path.isdir(path) and not os.path.islink(path)
            if is_dir and not params.recursive:
                raise ShellwrightError(
                    f"Cannot delete directory without recursive flag: {path}",
                    code=ErrorCode.INVALID_ARGUMENT,
                )
            if is_dir:
                shutil.rmtree(path)
            else:
                os.remove(path)
        except OSError as e:
            raise ShellwrightError.from_os_error(e, path) from e

        return ToolOk(data={"deleted": True, "path": path, "was_directory": is_dir})
