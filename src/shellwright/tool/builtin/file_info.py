"""File info tool."""

from __future__ import annotations

import os
import stat
from datetime import datetime, timezone
from typing import Any, ClassVar

from pydantic import BaseModel, Field

from shellwright.errors import ShellwrightError
from shellwright.paths import format_bytes, normalize_path
from shellwright.tool.base import BaseTool, ToolOk, ToolResult

# Files at or above this size are not read for a line count
LINE_COUNT_LIMIT = 10 * 1024 * 1024


class FileInfoParams(BaseModel):
    path: str = Field(description="File or directory to inspect.")


def _timestamp(seconds: float) -> str:
    return datetime.fromtimestamp(seconds, tz=timezone.utc).isoformat()


def _count_lines(path: str) -> int | None:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read().count("\n") + 1
    except (OSError, UnicodeDecodeError):
        return None


class FileInfoTool(BaseTool[FileInfoParams]):
    """Report metadata for a path; a missing path is reported, not an error."""

    name: ClassVar[str] = "file_info"
    description: ClassVar[str] = (
        "Get metadata for a file or directory: existence, size, timestamps, "
        "read-only and hidden flags, and the line count of text files."
    )
    param_model: ClassVar[type[BaseModel]] = FileInfoParams

    def __init__(self, cwd: str | None = None) -> None:
        self._cwd = normalize_path(cwd or "~")

    async def execute(self, params: FileInfoParams) -> ToolResult:
        path = normalize_path(params.path, base=self._cwd)
        try:
            st = os.stat(path)
        except FileNotFoundError:
            return ToolOk(data=self._missing(path))
        except OSError as e:
            raise ShellwrightError.from_os_error(e, path) from e

        is_dir = stat.S_ISDIR(st.st_mode)
        line_count = None
        if not is_dir and st.st_size < LINE_COUNT_LIMIT:
            line_count = _count_lines(path)

        # st_birthtime only exists on some platforms
        created = getattr(st, "st_birthtime", st.st_ctime)
        return ToolOk(
            data={
                "path": path,
                "exists": True,
                "is_directory": is_dir,
                "size_bytes": st.st_size,
                "size_human": format_bytes(st.st_size),
                "created": _timestamp(created),
                "modified": _timestamp(st.st_mtime),
                "accessed": _timestamp(st.st_atime),
                "readonly": not st.st_mode & stat.S_IWUSR,
                "hidden": os.path.basename(path).startswith("."),
                "line_count": line_count,
            }
        )

    @staticmethod
    def _missing(path: str) -> dict[str, Any]:
        return {
            "path": path,
            "exists": False,
            "is_directory": False,
            "size_bytes": 0,
            "size_human": "0 B",
            "created": None,
            "modified": None,
            "accessed": None,
            "readonly": False,
            "hidden": False,
            "line_count": None,
        }
