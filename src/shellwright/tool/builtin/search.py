"""Search tool: find files by name or lines by content under a directory."""

from __future__ import annotations

import fnmatch
import logging
import os
import re
import time
from typing import Any, ClassVar, Iterator, Literal

from pydantic import BaseModel, Field

from shellwright.errors import ErrorCode, ShellwrightError
from shellwright.paths import normalize_path
from shellwright.tool.base import BaseTool, ToolOk, ToolResult

logger = logging.getLogger(__name__)

# Directories never worth descending into
SKIP_DIRS = {".git", ".hg", ".svn", "node_modules", "__pycache__", ".venv"}
MAX_SEARCH_FILE_BYTES = 5 * 1024 * 1024
CONTEXT_LINES = 2


class SearchParams(BaseModel):
    path: str = Field(default=".", description="Directory to search under.")
    pattern: str = Field(
        min_length=1,
        description="For type=files, a substring or glob of the file name; "
        "for type=content, a regular expression.",
    )
    type: Literal["files", "content"] = Field(
        default="files", description="Match file names or file contents."
    )
    file_pattern: str = Field(
        default="*", description="Glob restricting which files are searched by content."
    )
    ignore_case: bool = Field(default=True)
    max_results: int = Field(default=100, ge=1, le=1000)


class SearchTool(BaseTool[SearchParams]):
    """Walk a directory tree matching names or contents."""

    name: ClassVar[str] = "search"
    description: ClassVar[str] = (
        "Search under a directory. type=files matches file names (substring or glob); "
        "type=content greps file contents with a regular expression and returns "
        "matching lines with surrounding context."
    )
    param_model: ClassVar[type[BaseModel]] = SearchParams

    def __init__(self, cwd: str | None = None) -> None:
        self._cwd = normalize_path(cwd or "~")

    async def execute(self, params: SearchParams) -> ToolResult:
        root = normalize_path(params.path, base=self._cwd)
        if not os.path.isdir(root):
            raise ShellwrightError(
                f"Not a directory: {root}",
                code=ErrorCode.NOT_A_DIRECTORY
                if os.path.exists(root)
                else ErrorCode.FILE_NOT_FOUND,
            )

        started = time.monotonic()
        if params.type == "files":
            results = self._find_files(root, params)
        else:
            try:
                flags = re.IGNORECASE if params.ignore_case else 0
                regex = re.compile(params.pattern, flags)
            except re.error as e:
                raise ShellwrightError(
                    f"Invalid regular expression: {e}", code=ErrorCode.INVALID_ARGUMENT
                ) from e
            results = self._grep(root, regex, params)

        return ToolOk(
            data={
                "results": results,
                "total_matches": len(results),
                "truncated": len(results) >= params.max_results,
                "search_time_ms": int((time.monotonic() - started) * 1000),
            }
        )

    def _find_files(self, root: str, params: SearchParams) -> list[dict[str, Any]]:
        pattern = params.pattern.lower() if params.ignore_case else params.pattern
        is_glob = any(ch in pattern for ch in "*?[")
        results = []
        for path in _walk_files(root):
            name = os.path.basename(path)
            candidate = name.lower() if params.ignore_case else name
            if is_glob:
                matched = fnmatch.fnmatchcase(candidate, pattern)
            else:
                matched = pattern in candidate
            if matched:
                results.append({"path": path, "name": name})
                if len(results) >= params.max_results:
                    break
        return results

    def _grep(
        self, root: str, regex: re.Pattern[str], params: SearchParams
    ) -> list[dict[str, Any]]:
        results: list[dict[str, Any]] = []
        for path in _walk_files(root):
            name = os.path.basename(path)
            if not fnmatch.fnmatch(name, params.file_pattern):
                continue
            lines = _read_text_lines(path)
            if lines is None:
                continue
            for i, line in enumerate(lines):
                if not regex.search(line):
                    continue
                before = lines[max(0, i - CONTEXT_LINES) : i]
                after = lines[i + 1 : i + 1 + CONTEXT_LINES]
                results.append(
                    {
                        "path": path,
                        "name": name,
                        "match": line.strip(),
                        "line": i + 1,
                        "context": "\n".join(before + after),
                    }
                )
                if len(results) >= params.max_results:
                    return results
        return results


def _walk_files(root: str) -> Iterator[str]:
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRS)
        for filename in sorted(filenames):
            yield os.path.join(dirpath, filename)


def _read_text_lines(path: str) -> list[str] | None:
    """Lines of a text file, or None for large, binary or unreadable files."""
    try:
        if os.path.getsize(path) > MAX_SEARCH_FILE_BYTES:
            return None
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        logger.debug("Skipping %s: %s", path, e)
        return None
    if b"\x00" in data:
        return None
    return data.decode("utf-8", errors="replace").splitlines()
