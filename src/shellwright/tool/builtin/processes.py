"""Process listing and kill tools backed by psutil."""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Any, ClassVar, Literal

import psutil
from pydantic import BaseModel, Field

from shellwright.errors import ErrorCode, ShellwrightError
from shellwright.tool.base import BaseTool, ToolOk, ToolResult

logger = logging.getLogger(__name__)

PROCESS_ATTRS = ["pid", "name", "memory_info", "cpu_percent", "status", "create_time"]


class ProcessesParams(BaseModel):
    sort_by: Literal["memory", "cpu", "name", "pid"] = Field(default="memory")
    limit: int = Field(default=30, ge=1, le=1000)
    filter: str | None = Field(
        default=None, description="Case-insensitive substring of the process name."
    )


def _process_row(info: dict[str, Any]) -> dict[str, Any]:
    mem = info.get("memory_info")
    created = info.get("create_time")
    return {
        "pid": info["pid"],
        "name": info.get("name") or "Unknown",
        "memory_mb": round((mem.rss if mem else 0) / (1024 * 1024), 1),
        "cpu_percent": info.get("cpu_percent") or 0.0,
        "status": info.get("status") or "unknown",
        "start_time": datetime.fromtimestamp(created, tz=timezone.utc).isoformat()
        if created
        else None,
    }


_SORT_KEYS = {
    "memory": (lambda p: p["memory_mb"], True),
    "cpu": (lambda p: p["cpu_percent"], True),
    "name": (lambda p: p["name"].lower(), False),
    "pid": (lambda p: p["pid"], False),
}


class ProcessesTool(BaseTool[ProcessesParams]):
    """List running processes.

    CPU percentages are measured since the previous listing; psutil caches
    process handles across ``process_iter`` calls, so the first listing
    reports 0.0 for processes it has not seen before.
    """

    name: ClassVar[str] = "processes"
    description: ClassVar[str] = (
        "List running processes with memory (MB), CPU percent, status and start "
        "time. Sort by memory, cpu, name or pid; filter by name substring."
    )
    param_model: ClassVar[type[BaseModel]] = ProcessesParams

    async def execute(self, params: ProcessesParams) -> ToolResult:
        needle = params.filter.lower() if params.filter else None
        rows = []
        # Vanished and inaccessible attributes come back as None in info
        for proc in psutil.process_iter(PROCESS_ATTRS, ad_value=None):
            info = proc.info
            if needle and needle not in (info.get("name") or "").lower():
                continue
            rows.append(_process_row(info))

        key, reverse = _SORT_KEYS[params.sort_by]
        rows.sort(key=key, reverse=reverse)
        return ToolOk(
            data={"processes": rows[: params.limit], "total_count": len(rows)}
        )


class ProcessKillParams(BaseModel):
    pid: int | None = Field(default=None, ge=1, description="Process id to kill.")
    name: str | None = Field(
        default=None, description="Kill every process with exactly this name."
    )
    force: bool = Field(
        default=False, description="Send SIGKILL instead of SIGTERM."
    )


class ProcessKillTool(BaseTool[ProcessKillParams]):
    """Signal processes by pid or by name.

    A pid that cannot be signalled is reported under ``failed``; a name that
    matches nothing is an error. The server's own process is never matched.
    """

    name: ClassVar[str] = "process_kill"
    description: ClassVar[str] = (
        "Terminate a process by pid, or every process with a given name. "
        "force=true sends SIGKILL."
    )
    param_model: ClassVar[type[BaseModel]] = ProcessKillParams

    async def execute(self, params: ProcessKillParams) -> ToolResult:
        if params.pid is None and not params.name:
            raise ShellwrightError(
                "Must specify either pid or name", code=ErrorCode.INVALID_ARGUMENT
            )
        if params.pid is not None:
            pids = [params.pid]
        else:
            pids = self._pids_named(params.name or "")
            if not pids:
                raise ShellwrightError(
                    f"No processes found matching: {params.name}",
                    code=ErrorCode.PROCESS_NOT_FOUND,
                )

        killed: list[int] = []
        failed: list[int] = []
        for pid in pids:
            try:
                proc = psutil.Process(pid)
                if params.force:
                    proc.kill()
                else:
                    proc.terminate()
            except (psutil.NoSuchProcess, psutil.AccessDenied) as e:
                logger.info("Could not signal pid %d: %s", pid, e)
                failed.append(pid)
            else:
                killed.append(pid)

        return ToolOk(data={"killed": killed, "failed": failed, "count": len(killed)})

    @staticmethod
    def _pids_named(name: str) -> list[int]:
        own = os.getpid()
        return [
            proc.info["pid"]
            for proc in psutil.process_iter(["pid", "name"], ad_value=None)
            if proc.info["name"] == name and proc.info["pid"] != own
        ]
