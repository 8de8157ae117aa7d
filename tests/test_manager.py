"""Tests for shellwright.interactive.manager.SessionManager."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from conftest import SLEEPER, fast_config, python_cmd
from shellwright.errors import (
    ErrorCode,
    ProcessDiedError,
    ProcessSpawnError,
    SessionLimitError,
    SessionNotFoundError,
)
from shellwright.interactive.manager import SessionManager
from shellwright.interactive.reaper import Reaper
from shellwright.interactive.store import SessionStore

PYTHON_REPL = python_cmd("-u", "-i", "-q")


async def _read_until(manager: SessionManager, session_id: str, needle: str) -> str:
    """Accumulate read output until a line equals ``needle`` (or give up)."""
    collected: list[str] = []
    for _ in range(20):
        result = await manager.read(session_id, timeout_ms=500)
        if result.output:
            collected.extend(result.output.split("\n"))
        if needle in collected or not result.is_running:
            break
    return "\n".join(collected)


# ---------------------------------------------------------------------------
# Full conversation with a REPL
# ---------------------------------------------------------------------------


class TestReplConversation:
    async def test_python_repl(self, manager: SessionManager, tmp_path: Path) -> None:
        started = await manager.start(PYTHON_REPL, str(tmp_path))
        assert started.is_running is True
        sid = started.session_id
        assert len(sid) == 8

        result = await manager.write(sid, "2 + 2\n")
        output = result.output
        if "4" not in output.split("\n"):
            output += "\n" + await _read_until(manager, sid, "4")
        assert "4" in output.split("\n")

        result = await manager.write(sid, "exit()\n")
        if result.is_running:
            result = await manager.read(sid, timeout_ms=5000)
        assert result.is_running is False

        # Reading an exited (but still registered) session does not fail
        again = await manager.read(sid, timeout_ms=100)
        assert again.is_running is False

        with pytest.raises(ProcessDiedError) as exc_info:
            await manager.write(sid, "1\n")
        assert exc_info.value.code == ErrorCode.PROCESS_DIED
        assert "exit_code" in exc_info.value.details
        assert "final_output" in exc_info.value.details

        assert await manager.list() == []
        with pytest.raises(SessionNotFoundError):
            await manager.read(sid)

    async def test_write_returns_only_new_output(
        self, manager: SessionManager, tmp_path: Path
    ) -> None:
        started = await manager.start("cat", str(tmp_path))
        sid = started.session_id
        first = await manager.write(sid, "one\n")
        second = await manager.write(sid, "two\n")
        assert first.output == "one"
        assert second.output == "two"
        assert second.is_running is True

    async def test_initial_output(self, manager: SessionManager, tmp_path: Path) -> None:
        command = "echo banner; " + SLEEPER
        started = await manager.start(command, str(tmp_path))
        assert started.output == "banner"


# ---------------------------------------------------------------------------
# start failures
# ---------------------------------------------------------------------------


class TestStartFailures:
    async def test_process_dies_during_settle(self, tmp_path: Path) -> None:
        async with SessionManager(fast_config(start_settle_ms=1000)) as manager:
            with pytest.raises(ProcessDiedError) as exc_info:
                await manager.start("echo bye; exit 3", str(tmp_path))
            err = exc_info.value
            assert err.code == ErrorCode.PROCESS_DIED
            assert "bye" in err.details["output"]
            assert err.details["exit_code"] == 3
            assert await manager.list() == []
            assert manager.store.occupancy == 0

    async def test_null_byte_does_not_leak_slot(self, tmp_path: Path) -> None:
        async with SessionManager(fast_config(max_sessions=1)) as manager:
            with pytest.raises(ProcessSpawnError):
                await manager.start("echo a\x00b", str(tmp_path))
            assert manager.store.occupancy == 0
            started = await manager.start(SLEEPER, str(tmp_path))
            assert started.is_running is True

    async def test_bad_cwd(self, manager: SessionManager, tmp_path: Path) -> None:
        with pytest.raises(ProcessSpawnError) as exc_info:
            await manager.start("true", str(tmp_path / "missing"))
        assert exc_info.value.code == ErrorCode.PROCESS_ERROR
        assert manager.store.occupancy == 0


# ---------------------------------------------------------------------------
# Limits
# ---------------------------------------------------------------------------


class TestSessionLimit:
    async def test_concurrent_starts_respect_cap(
        self, manager: SessionManager, tmp_path: Path
    ) -> None:
        results = await asyncio.gather(
            *(manager.start(SLEEPER, str(tmp_path)) for _ in range(11)),
            return_exceptions=True,
        )
        rejected = [r for r in results if isinstance(r, SessionLimitError)]
        started = [r for r in results if not isinstance(r, BaseException)]
        assert len(rejected) == 1
        assert len(started) == 10
        assert rejected[0].code == ErrorCode.LIMIT_EXCEEDED
        assert "Maximum 10 sessions allowed" in rejected[0].message
        assert len(await manager.list()) == 10

        await manager.kill(started[0].session_id)
        replacement = await manager.start(SLEEPER, str(tmp_path))
        assert replacement.is_running is True
        assert len(await manager.list()) == 10

    async def test_custom_cap(self, tmp_path: Path) -> None:
        async with SessionManager(fast_config(max_sessions=1)) as manager:
            await manager.start(SLEEPER, str(tmp_path))
            with pytest.raises(SessionLimitError):
                await manager.start(SLEEPER, str(tmp_path))


# ---------------------------------------------------------------------------
# read / kill / list
# ---------------------------------------------------------------------------


class TestReadKillList:
    async def test_read_times_out_empty(
        self, manager: SessionManager, tmp_path: Path
    ) -> None:
        started = await manager.start(SLEEPER, str(tmp_path))
        loop = asyncio.get_running_loop()
        t0 = loop.time()
        result = await manager.read(started.session_id, timeout_ms=300)
        assert result.output == ""
        assert result.is_running is True
        assert loop.time() - t0 >= 0.25

    async def test_read_returns_early_on_output(
        self, manager: SessionManager, tmp_path: Path
    ) -> None:
        command = python_cmd("-u", "-c", "import time; time.sleep(0.5); print('late')")
        started = await manager.start(command + "; " + SLEEPER, str(tmp_path))
        loop = asyncio.get_running_loop()
        t0 = loop.time()
        result = await manager.read(started.session_id, timeout_ms=10_000)
        assert result.output == "late"
        assert loop.time() - t0 < 5.0

    async def test_zero_timeout(self, manager: SessionManager, tmp_path: Path) -> None:
        started = await manager.start(SLEEPER, str(tmp_path))
        result = await manager.read(started.session_id, timeout_ms=0)
        assert result.output == ""

    async def test_kill_returns_output_and_unregisters(
        self, manager: SessionManager, tmp_path: Path
    ) -> None:
        started = await manager.start("echo hello; " + SLEEPER, str(tmp_path))
        result = await manager.kill(started.session_id)
        assert result.is_running is False
        assert result.output == "hello"
        assert await manager.list() == []
        with pytest.raises(SessionNotFoundError):
            await manager.kill(started.session_id)

    async def test_kill_exited_session(
        self, manager: SessionManager, tmp_path: Path
    ) -> None:
        command = python_cmd("-c", "import time; time.sleep(0.3)")
        started = await manager.start(command, str(tmp_path))
        await asyncio.sleep(0.6)
        result = await manager.kill(started.session_id)
        assert result.is_running is False
        assert await manager.list() == []

    async def test_list(self, manager: SessionManager, tmp_path: Path) -> None:
        a = await manager.start(SLEEPER, str(tmp_path))
        b = await manager.start("cat", str(tmp_path))
        infos = {i.id: i for i in await manager.list()}
        assert set(infos) == {a.session_id, b.session_id}
        assert infos[b.session_id].command == "cat"
        assert infos[b.session_id].is_running is True
        assert infos[b.session_id].cwd == str(tmp_path)

    @pytest.mark.parametrize("op", ["write", "read", "kill"])
    async def test_unknown_session(self, manager: SessionManager, op: str) -> None:
        with pytest.raises(SessionNotFoundError) as exc_info:
            if op == "write":
                await manager.write("deadbeef", "x\n")
            elif op == "read":
                await manager.read("deadbeef", timeout_ms=0)
            else:
                await manager.kill("deadbeef")
        assert exc_info.value.code == ErrorCode.NOT_FOUND
        assert "deadbeef" in exc_info.value.message


# ---------------------------------------------------------------------------
# Reaper and shutdown
# ---------------------------------------------------------------------------


class TestReaper:
    async def test_run_once(self, tmp_path: Path) -> None:
        store = SessionStore()
        alive = await store.create(SLEEPER, str(tmp_path))
        dead = await store.create("true", str(tmp_path))
        await store.commit(alive)
        await store.commit(dead)
        await dead.wait_exit(5.0)

        reaper = Reaper(store, interval=60.0)
        reaped = await reaper.run_once()
        assert [s.id for s in reaped] == [dead.id]
        assert await store.get(alive.id) is alive

        task = alive.terminate(grace=0.5)
        assert task is not None
        await task

    async def test_start_stop(self) -> None:
        reaper = Reaper(SessionStore(), interval=60.0)
        reaper.start()
        reaper.start()
        assert reaper.running is True
        await reaper.stop()
        assert reaper.running is False

    async def test_periodic_sweep(self, tmp_path: Path) -> None:
        config = fast_config(reap_interval_s=0.05)
        async with SessionManager(config) as manager:
            assert manager.reaper.running is True
            command = python_cmd("-c", "import time; time.sleep(0.3)")
            await manager.start(command, str(tmp_path))
            assert len(manager) == 1
            for _ in range(100):
                if len(manager) == 0:
                    break
                await asyncio.sleep(0.05)
            assert len(manager) == 0


class TestShutdown:
    async def test_close_kills_everything(self, tmp_path: Path) -> None:
        manager = SessionManager(fast_config())
        await manager.open()
        started = [await manager.start(SLEEPER, str(tmp_path)) for _ in range(3)]
        sessions = [await manager.store.get(s.session_id) for s in started]

        await manager.close()
        assert len(manager) == 0
        assert manager.reaper.running is False
        for session in sessions:
            assert session is not None
            assert session.running is False
