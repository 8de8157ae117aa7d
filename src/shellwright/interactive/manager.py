"""Session manager: the start/write/read/kill/list facade."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from shellwright.config import SessionConfig
from shellwright.errors import ProcessDiedError, SessionNotFoundError
from shellwright.interactive.reaper import Reaper
from shellwright.interactive.session import InteractiveSession, SessionInfo
from shellwright.interactive.store import SessionStore

logger = logging.getLogger(__name__)


@dataclass
class SessionOutput:
    """Result of start/write/read/kill."""

    session_id: str
    output: str
    is_running: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "output": self.output,
            "is_running": self.is_running,
        }


class SessionManager:
    """Supervises interactive child processes for concurrent callers.

    Owns a ``SessionStore`` and the ``Reaper`` that sweeps it.  The reaper
    is started on first use (it needs a running event loop) or explicitly
    via ``open()``; ``close()`` stops it and kills every live session.

    Failures are raised as ``ShellwrightError`` subclasses carrying a stable
    code; none of them affect other sessions.
    """

    def __init__(
        self,
        config: SessionConfig | None = None,
        store: SessionStore | None = None,
    ) -> None:
        self.config = config or SessionConfig()
        self.store = store or SessionStore(
            max_sessions=self.config.max_sessions,
            max_output_lines=self.config.max_output_lines,
        )
        self.reaper = Reaper(self.store, interval=self.config.reap_interval_s)
        self._escalations: set[asyncio.Task[None]] = set()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        self.reaper.start()

    async def close(self) -> None:
        """Stop the reaper and terminate every session, waiting for teardown."""
        await self.reaper.stop()
        for session in await self.store.clear():
            self._terminate(session)
        if self._escalations:
            await asyncio.gather(*self._escalations, return_exceptions=True)
        logger.info("All interactive sessions cleaned up")

    async def __aenter__(self) -> SessionManager:
        await self.open()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def start(
        self,
        command: str,
        cwd: str,
        env: dict[str, str] | None = None,
    ) -> SessionOutput:
        """Spawn a session and return its id with the initial output.

        Waits up to the start settle interval so banners and prompts are
        captured.  A process that exits within that window is never
        registered.

        Raises:
            SessionLimitError: the store is at capacity.
            ProcessSpawnError: the process could not be created.
            ProcessDiedError: the process exited during the settle interval.
        """
        self.reaper.start()

        session = await self.store.create(command, cwd, env=env)
        try:
            exited = await session.wait_exit(self.config.start_settle_ms / 1000)
        except asyncio.CancelledError:
            self._terminate(session)
            await self.store.discard(session)
            raise
        if exited:
            await session.drain()
            await self.store.discard(session)
            logger.info(
                "Session %s died during start (code=%s)", session.id, session.returncode
            )
            raise ProcessDiedError(
                "Process exited immediately",
                details={
                    "output": session.buffer.read_all(),
                    "exit_code": session.returncode,
                },
            )

        await self.store.commit(session)
        return SessionOutput(
            session_id=session.id,
            output=session.buffer.read_all(),
            is_running=True,
        )

    async def write(self, session_id: str, data: str) -> SessionOutput:
        """Send input and return the output produced within the write settle interval.

        Output that arrives later is picked up by a subsequent ``read``.

        Raises:
            SessionNotFoundError: unknown id.
            ProcessDiedError: the process had already exited; the session
                is removed.
            WriteError: stdin is broken.
        """
        session = await self._get(session_id)

        if not session.running:
            await self.store.remove(session_id)
            raise ProcessDiedError(
                "Process is no longer running",
                details={
                    "final_output": session.buffer.read_all(),
                    "exit_code": session.returncode,
                },
            )

        mark = session.buffer.mark()
        await session.write(data)
        await asyncio.sleep(self.config.write_settle_ms / 1000)

        return SessionOutput(
            session_id=session_id,
            output="\n".join(session.buffer.since(mark)),
            is_running=session.running,
        )

    async def read(self, session_id: str, timeout_ms: int | None = None) -> SessionOutput:
        """Wait for new output, process exit, or the timeout, whichever is first.

        Raises:
            SessionNotFoundError: unknown id.
        """
        session = await self._get(session_id)
        if timeout_ms is None:
            timeout_ms = self.config.read_timeout_ms

        mark = session.buffer.mark()
        lines = await session.wait_for_output(
            mark,
            timeout=max(timeout_ms, 0) / 1000,
            poll_interval=self.config.read_poll_ms / 1000,
        )
        return SessionOutput(
            session_id=session_id,
            output="\n".join(lines),
            is_running=session.running,
        )

    async def kill(self, session_id: str) -> SessionOutput:
        """Unregister a session immediately and terminate its process.

        SIGTERM is sent now; SIGKILL follows after the grace period on a
        background task the caller does not wait for.

        Raises:
            SessionNotFoundError: unknown id.
        """
        session = await self.store.remove(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found")

        final_output = session.buffer.read_all()
        self._terminate(session)
        logger.info("Killed session %s: %s", session_id, session.command)
        return SessionOutput(session_id=session_id, output=final_output, is_running=False)

    async def list(self) -> list[SessionInfo]:
        return [s.info() for s in await self.store.list()]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _get(self, session_id: str) -> InteractiveSession:
        session = await self.store.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        return session

    def _terminate(self, session: InteractiveSession) -> None:
        task = session.terminate(self.config.kill_grace_ms / 1000)
        if task is not None:
            self._escalations.add(task)
            task.add_done_callback(self._escalations.discard)

    def __len__(self) -> int:
        return len(self.store)
