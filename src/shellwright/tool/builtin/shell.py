"""Shell tool: run a command to completion and return its captured streams."""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import time
from typing import ClassVar

from pydantic import BaseModel, Field

from shellwright.errors import ErrorCode, ShellwrightError
from shellwright.paths import normalize_path
from shellwright.tool.base import BaseTool, ToolOk, ToolResult
from shellwright.tool.truncation import clean_output, truncate_output

logger = logging.getLogger(__name__)


class ShellParams(BaseModel):
    command: str = Field(description="The shell command to execute.")
    cwd: str | None = Field(
        default=None, description="Working directory. Defaults to the configured cwd."
    )
    timeout_ms: int | None = Field(
        default=None, gt=0, description="Timeout in milliseconds."
    )
    stdin: str | None = Field(
        default=None,
        description="Optional input to feed to the command's stdin. "
        "Without it, the command receives EOF immediately.",
    )


class ShellTool(BaseTool[ShellParams]):
    """Execute a one-shot command through the system shell.

    The command runs in its own process group so a timeout can kill the
    whole tree.  For programs that need a conversation, use
    ``process_interactive`` instead.
    """

    name: ClassVar[str] = "shell_exec"
    description: ClassVar[str] = (
        "Execute a shell command and wait for it to finish. "
        "Returns stdout, stderr, exit_code and duration_ms. "
        "Use process_interactive for REPLs and long-running programs."
    )
    param_model: ClassVar[type[BaseModel]] = ShellParams

    def __init__(self, cwd: str | None = None, default_timeout_ms: int = 30_000) -> None:
        self._cwd = normalize_path(cwd or "~")
        self._default_timeout_ms = default_timeout_ms

    async def execute(self, params: ShellParams) -> ToolResult:
        workdir = normalize_path(params.cwd, base=self._cwd) if params.cwd else self._cwd
        if not os.path.exists(workdir):
            raise ShellwrightError(
                f"Directory does not exist: {workdir}", code=ErrorCode.FILE_NOT_FOUND
            )
        if not os.path.isdir(workdir):
            raise ShellwrightError(
                f"Not a directory: {workdir}", code=ErrorCode.NOT_A_DIRECTORY
            )

        timeout_ms = params.timeout_ms or self._default_timeout_ms
        started = time.monotonic()

        try:
            process = await asyncio.create_subprocess_shell(
                params.command,
                stdin=asyncio.subprocess.PIPE
                if params.stdin is not None
                else asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=workdir,
                start_new_session=True,
                env={**os.environ, "TERM": "dumb"},
            )
        except OSError as e:
            raise ShellwrightError(
                f"Failed to execute command: {e}", code=ErrorCode.PROCESS_ERROR
            ) from e

        try:
            stdin_bytes = params.stdin.encode("utf-8") if params.stdin is not None else None
            stdout, stderr = await asyncio.wait_for(
                process.communicate(input=stdin_bytes),
                timeout=timeout_ms / 1000,
            )
        except asyncio.TimeoutError:
            try:
                os.killpg(process.pid, signal.SIGKILL)
            except ProcessLookupError:
                pass
            await process.wait()
            logger.info("Command timed out after %dms: %s", timeout_ms, params.command)
            raise ShellwrightError(
                f"Command timed out after {timeout_ms}ms: {params.command}",
                details={"timeout_ms": timeout_ms},
                code=ErrorCode.TIMEOUT,
            )

        return ToolOk(
            data={
                "stdout": _decode(stdout),
                "stderr": _decode(stderr),
                "exit_code": process.returncode,
                "duration_ms": int((time.monotonic() - started) * 1000),
            }
        )


def _decode(data: bytes | None) -> str:
    if not data:
        return ""
    return truncate_output(clean_output(data.decode("utf-8", errors="replace")))
