"""Tests for the process and system information tools."""

from __future__ import annotations

import asyncio
import os
import shutil
import signal
import sys
from pathlib import Path

import psutil
import pytest

from shellwright.tool.builtin import ProcessesTool, ProcessKillTool, SystemInfoTool


async def _spawn(*argv: str) -> asyncio.subprocess.Process:
    return await asyncio.create_subprocess_exec(*argv)


# ---------------------------------------------------------------------------
# processes
# ---------------------------------------------------------------------------


class TestProcessesTool:
    async def test_finds_own_process(self) -> None:
        own_name = psutil.Process().name()
        result = await ProcessesTool().run(
            {"filter": own_name.upper(), "sort_by": "pid", "limit": 1000}
        )
        assert not result.is_error
        rows = result.data["processes"]
        assert os.getpid() in [row["pid"] for row in rows]
        assert [row["pid"] for row in rows] == sorted(row["pid"] for row in rows)
        own = next(row for row in rows if row["pid"] == os.getpid())
        assert own["memory_mb"] > 0
        assert own["start_time"] is not None

    async def test_limit_and_memory_order(self) -> None:
        result = await ProcessesTool().run({"limit": 5})
        rows = result.data["processes"]
        assert len(rows) <= 5
        assert result.data["total_count"] >= len(rows)
        memory = [row["memory_mb"] for row in rows]
        assert memory == sorted(memory, reverse=True)

    async def test_unknown_sort(self) -> None:
        result = await ProcessesTool().run({"sort_by": "age"})
        assert result.data["code"] == "INVALID_PARAMS"


# ---------------------------------------------------------------------------
# process_kill
# ---------------------------------------------------------------------------


class TestProcessKillTool:
    async def test_requires_pid_or_name(self) -> None:
        result = await ProcessKillTool().run({})
        assert result.data["code"] == "INVALID_ARGUMENT"

    async def test_kill_by_pid(self) -> None:
        proc = await _spawn(sys.executable, "-c", "import time; time.sleep(30)")
        result = await ProcessKillTool().run({"pid": proc.pid})
        assert result.data == {"killed": [proc.pid], "failed": [], "count": 1}
        assert await asyncio.wait_for(proc.wait(), 5) == -signal.SIGTERM

    async def test_force_sends_sigkill(self) -> None:
        proc = await _spawn(sys.executable, "-c", "import time; time.sleep(30)")
        result = await ProcessKillTool().run({"pid": proc.pid, "force": True})
        assert result.data["count"] == 1
        assert await asyncio.wait_for(proc.wait(), 5) == -signal.SIGKILL

    async def test_gone_pid_is_reported_failed(self) -> None:
        proc = await _spawn(sys.executable, "-c", "pass")
        await proc.wait()
        result = await ProcessKillTool().run({"pid": proc.pid})
        assert not result.is_error
        assert result.data == {"killed": [], "failed": [proc.pid], "count": 0}

    async def test_kill_by_name(self, tmp_path: Path) -> None:
        sleep = shutil.which("sleep")
        if sleep is None:
            pytest.skip("sleep not available")
        renamed = tmp_path / "swkilltarget"
        shutil.copy(sleep, renamed)
        procs = [await _spawn(str(renamed), "30") for _ in range(2)]

        result = await ProcessKillTool().run({"name": "swkilltarget"})
        assert sorted(result.data["killed"]) == sorted(p.pid for p in procs)
        assert result.data["count"] == 2
        for proc in procs:
            await asyncio.wait_for(proc.wait(), 5)

    async def test_unknown_name(self) -> None:
        result = await ProcessKillTool().run({"name": "no-such-process-name"})
        assert result.data["code"] == "PROCESS_NOT_FOUND"


# ---------------------------------------------------------------------------
# system_info
# ---------------------------------------------------------------------------


class TestSystemInfoTool:
    async def test_shape(self) -> None:
        result = await SystemInfoTool().run({})
        data = result.data
        assert set(data) == {"hostname", "os", "uptime_hours", "cpu", "memory", "disks"}
        assert data["cpu"]["cores"] >= 1
        assert 0 <= data["cpu"]["usage_percent"] <= 100
        assert data["memory"]["total_gb"] >= data["memory"]["used_gb"]
        assert data["uptime_hours"] >= 0
        for disk in data["disks"]:
            assert set(disk) == {"name", "total_gb", "free_gb", "percent_used"}
