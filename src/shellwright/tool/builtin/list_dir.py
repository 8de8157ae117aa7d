"""Directory listing and creation tools."""

from __future__ import annotations

import fnmatch
import logging
import os
from datetime import datetime, timezone
from typing import Any, ClassVar

from pydantic import BaseModel, Field

from shellwright.errors import ErrorCode, ShellwrightError
from shellwright.paths import normalize_path
from shellwright.tool.base import BaseTool, ToolOk, ToolResult

logger = logging.getLogger(__name__)

MAX_DIR_ITEMS = 500


class ListDirParams(BaseModel):
    path: str = Field(default=".", description="Directory to list.")
    depth: int = Field(
        default=1, ge=1, le=10, description="Levels to descend (1 = direct children)."
    )
    include_hidden: bool = Field(default=False, description="Include dotfiles.")
    pattern: str = Field(
        default="*", description="Glob matched against entry names (case-insensitive)."
    )


class ListDirTool(BaseTool[ListDirParams]):
    """List a directory, optionally recursively, directories first."""

    name: ClassVar[str] = "dir_list"
    description: ClassVar[str] = (
        "List directory contents with type, size and modification time. "
        f"Supports depth, hidden files and a name glob; at most {MAX_DIR_ITEMS} items."
    )
    param_model: ClassVar[type[BaseModel]] = ListDirParams

    def __init__(self, cwd: str | None = None) -> None:
        self._cwd = normalize_path(cwd or "~")

    async def execute(self, params: ListDirParams) -> ToolResult:
        root = normalize_path(params.path, base=self._cwd)
        if not os.path.exists(root):
            raise ShellwrightError(
                f"File or directory not found: {root}", code=ErrorCode.FILE_NOT_FOUND
            )
        if not os.path.isdir(root):
            raise ShellwrightError(
                f"Not a directory: {root}", code=ErrorCode.NOT_A_DIRECTORY
            )

        items: list[dict[str, Any]] = []
        try:
            truncated = self._scan(root, 1, params, items)
        except OSError as e:
            raise ShellwrightError.from_os_error(e, root) from e

        items.sort(key=lambda i: (i["type"] != "directory", i["name"].lower()))
        return ToolOk(
            data={
                "path": root,
                "items": items,
                "total_items": len(items),
                "truncated": truncated,
            }
        )

    def _scan(
        self, path: str, level: int, params: ListDirParams, items: list[dict[str, Any]]
    ) -> bool:
        """Append matching entries under ``path``; returns True if the cap was hit."""
        pattern = params.pattern.lower()
        with os.scandir(path) as entries:
            for entry in entries:
                if len(items) >= MAX_DIR_ITEMS:
                    return True
                if not params.include_hidden and entry.name.startswith("."):
                    continue
                try:
                    is_dir = entry.is_dir()
                    st = entry.stat()
                except OSError as e:
                    logger.debug("Skipping %s: %s", entry.path, e)
                    continue
                if fnmatch.fnmatchcase(entry.name.lower(), pattern):
                    items.append(
                        {
                            "name": entry.name,
                            "path": entry.path,
                            "type": "directory" if is_dir else "file",
                            "size_bytes": st.st_size,
                            "modified": datetime.fromtimestamp(
                                st.st_mtime, tz=timezone.utc
                            ).isoformat(),
                        }
                    )
                if is_dir and level < params.depth:
                    try:
                        if self._scan(entry.path, level + 1, params, items):
                            return True
                    except OSError as e:
                        logger.debug("Skipping unreadable directory %s: %s", entry.path, e)
        return False


class CreateDirParams(BaseModel):
    path: str = Field(description="Directory to create, with any missing parents.")


class CreateDirTool(BaseTool[CreateDirParams]):
    """Create a directory tree; an existing directory is not an error."""

    name: ClassVar[str] = "dir_create"
    description: ClassVar[str] = (
        "Create a directory including missing parents. "
        "Succeeds if it already exists."
    )
    param_model: ClassVar[type[BaseModel]] = CreateDirParams

    def __init__(self, cwd: str | None = None) -> None:
        self._cwd = normalize_path(cwd or "~")

    async def execute(self, params: CreateDirParams) -> ToolResult:
        path = normalize_path(params.path, base=self._cwd)
        existed = os.path.isdir(path)
        if not existed and os.path.exists(path):
            raise ShellwrightError(
                f"Path exists but is not a directory: {path}",
                code=ErrorCode.NOT_A_DIRECTORY,
            )
        try:
            os.makedirs(path, exist_ok=True)
        except OSError as e:
            raise ShellwrightError.from_os_error(e, path) from e

        return ToolOk(
            data={"path": path, "created": not existed, "already_existed": existed}
        )
