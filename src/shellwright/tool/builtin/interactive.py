"""Interactive process tool: start, drive, and stop long-running children.

One tool covers the whole session lifecycle through its ``action``
parameter: ``start`` a REPL or server, ``write`` to its stdin, ``read``
new output with a bounded wait, ``kill`` it, or ``list`` live sessions.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, ClassVar, Literal

from pydantic import BaseModel, Field

from shellwright.errors import InvalidParamsError
from shellwright.paths import normalize_path
from shellwright.tool.base import BaseTool, ToolOk, ToolResult
from shellwright.tool.truncation import truncate_output

if TYPE_CHECKING:
    from shellwright.interactive.manager import SessionManager, SessionOutput

logger = logging.getLogger(__name__)


class ProcessInteractiveParams(BaseModel):
    action: Literal["start", "write", "read", "kill", "list"] = Field(
        description="Operation to perform."
    )
    command: str | None = Field(
        default=None, description="Command line to start (required for start)."
    )
    cwd: str | None = Field(
        default=None, description="Working directory for start. Defaults to the configured cwd."
    )
    session_id: str | None = Field(
        default=None, description="Target session (required for write, read, kill)."
    )
    input: str | None = Field(
        default=None,
        description="Text to send to stdin (required for write). "
        "Sent as-is; include a trailing newline where the program expects Enter.",
    )
    timeout_ms: int | None = Field(
        default=None, ge=0, description="Maximum wait for read, in milliseconds."
    )


class ProcessInteractiveTool(BaseTool[ProcessInteractiveParams]):
    """Drive interactive processes through a ``SessionManager``."""

    name: ClassVar[str] = "process_interactive"
    description: ClassVar[str] = (
        "Manage interactive processes (REPLs, dev servers, interactive CLIs). "
        "Actions: start (returns session_id and initial output), write (send input, "
        "returns output produced shortly after), read (wait up to timeout_ms for new "
        "output), kill (terminate and return final output), list (all sessions). "
        "Output capture is time-boxed and best-effort: slow responses show up on a later read."
    )
    param_model: ClassVar[type[BaseModel]] = ProcessInteractiveParams

    def __init__(self, manager: SessionManager, cwd: str | None = None) -> None:
        self._manager = manager
        self._cwd = normalize_path(cwd or "~")

    async def execute(self, params: ProcessInteractiveParams) -> ToolResult:
        if params.action == "start":
            if not params.command:
                raise InvalidParamsError("command required for start action")
            cwd = normalize_path(params.cwd, base=self._cwd) if params.cwd else self._cwd
            return self._ok(await self._manager.start(params.command, cwd))

        if params.action == "list":
            sessions = await self._manager.list()
            return ToolOk(data={"sessions": [s.to_dict() for s in sessions]})

        if not params.session_id:
            raise InvalidParamsError(f"session_id required for {params.action} action")

        if params.action == "write":
            if params.input is None:
                raise InvalidParamsError("input required for write action")
            return self._ok(await self._manager.write(params.session_id, params.input))

        if params.action == "read":
            return self._ok(await self._manager.read(params.session_id, params.timeout_ms))

        return self._ok(await self._manager.kill(params.session_id))

    @staticmethod
    def _ok(result: SessionOutput) -> ToolOk:
        data = result.to_dict()
        data["output"] = truncate_output(result.output)
        return ToolOk(data=data)
