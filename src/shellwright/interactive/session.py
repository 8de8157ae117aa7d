"""Interactive session: one supervised child process and its output."""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
import signal
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from shellwright.errors import WriteError
from shellwright.interactive.buffer import LineBuffer
from shellwright.tool.truncation import clean_output

logger = logging.getLogger(__name__)

READ_CHUNK = 4096
# An unterminated line is published once its stream is idle this long (prompts)
PARTIAL_FLUSH_S = 0.05
MAX_PARTIAL_CHARS = 64 * 1024
GROUP_POLL_S = 0.05


def new_session_id() -> str:
    """32 random bits, hex encoded."""
    return uuid.uuid4().hex[:8]


def split_complete_lines(text: str) -> tuple[str, str]:
    """Split decoded output into its terminated lines and the unterminated rest.

    A trailing CR stays in the rest, since its LF may be in the next chunk.
    """
    cut = max(text.rfind("\n"), text.rfind("\r", 0, len(text) - 1)) + 1
    return text[:cut], text[cut:]


@dataclass
class SessionInfo:
    """Snapshot of a session for ``list``."""

    id: str
    command: str
    cwd: str
    started: str
    is_running: bool
    output_line_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "command": self.command,
            "cwd": self.cwd,
            "started": self.started,
            "is_running": self.is_running,
            "output_line_count": self.output_line_count,
        }


@dataclass
class InteractiveSession:
    """A long-running child process with merged, buffered output.

    The process is started through the system shell in its own process
    group (``start_new_session``) so termination signals reach the whole
    tree.  stdout and stderr are read by two background tasks into one
    ``LineBuffer``; append order is preserved per stream, interleaving
    across the two streams is best-effort.

    ``running`` is never cached: it is read from the process handle's
    exit status every time.
    """

    command: str
    cwd: str
    id: str = field(default_factory=new_session_id)
    env: dict[str, str] = field(default_factory=dict)
    max_output_lines: int = 1000
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    buffer: LineBuffer = field(init=False)
    _proc: asyncio.subprocess.Process | None = field(default=None, init=False)
    _reader_tasks: list[asyncio.Task[None]] = field(default_factory=list, init=False)
    _exit_task: asyncio.Task[None] | None = field(default=None, init=False)
    _write_lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)

    def __post_init__(self) -> None:
        self.buffer = LineBuffer(max_lines=self.max_output_lines)

    async def spawn(self) -> None:
        """Start the process and its reader/exit-watcher tasks.

        Raises:
            OSError: the process could not be created (bad cwd, no shell...).
            ValueError: the command, cwd or env contains a NUL byte.
        """
        self.buffer.attach_loop(asyncio.get_running_loop())

        self._proc = await asyncio.create_subprocess_shell(
            self.command,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=self.cwd,
            env={**os.environ, **self.env},
            start_new_session=True,
        )

        self._reader_tasks = [
            asyncio.create_task(
                self._read_stream(self._proc.stdout),  # type: ignore[arg-type]
                name=f"session-{self.id}-stdout",
            ),
            asyncio.create_task(
                self._read_stream(self._proc.stderr),  # type: ignore[arg-type]
                name=f"session-{self.id}-stderr",
            ),
        ]
        self._exit_task = asyncio.create_task(
            self._watch_exit(), name=f"session-{self.id}-exit"
        )

        logger.info(
            "Session %s started: pid=%d cwd=%s cmd=%s",
            self.id,
            self._proc.pid,
            self.cwd,
            self.command,
        )

    async def _read_stream(self, stream: asyncio.StreamReader) -> None:
        """Decode chunks from one pipe into the shared buffer until EOF."""
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        partial = ""
        while True:
            try:
                if partial:
                    data = await asyncio.wait_for(
                        stream.read(READ_CHUNK), timeout=PARTIAL_FLUSH_S
                    )
                else:
                    data = await stream.read(READ_CHUNK)
            except asyncio.TimeoutError:
                self.buffer.append_text(clean_output(partial))
                partial = ""
                continue
            except (OSError, ValueError) as e:
                logger.debug("Session %s reader ended: %s", self.id, e)
                break
            if not data:
                break
            complete, partial = split_complete_lines(partial + decoder.decode(data))
            if len(partial) >= MAX_PARTIAL_CHARS:
                complete, partial = complete + partial, ""
            if complete:
                self.buffer.append_text(clean_output(complete))
        tail = partial + decoder.decode(b"", final=True)
        if tail:
            self.buffer.append_text(clean_output(tail))

    async def _watch_exit(self) -> None:
        assert self._proc is not None
        code = await self._proc.wait()
        logger.info("Session %s exited (code=%s)", self.id, code)
        self.buffer.notify()

    @property
    def running(self) -> bool:
        return self._proc is not None and self._proc.returncode is None

    @property
    def returncode(self) -> int | None:
        return self._proc.returncode if self._proc is not None else None

    async def wait_exit(self, timeout: float) -> bool:
        """Wait up to ``timeout`` seconds for the process to exit.

        Returns True if it exited within the window.
        """
        if self._exit_task is None:
            return True
        if self._exit_task.done():
            return True
        done, _ = await asyncio.wait({self._exit_task}, timeout=timeout)
        return bool(done)

    async def drain(self, timeout: float = 0.2) -> None:
        """Give the readers a moment to flush output after the process exits."""
        pending = [t for t in self._reader_tasks if not t.done()]
        if pending:
            await asyncio.wait(pending, timeout=timeout)

    async def write(self, data: str) -> None:
        """Write ``data`` to the process's stdin and flush it.

        Raises:
            WriteError: the pipe is closed or broken.
        """
        if self._proc is None or self._proc.stdin is None:
            raise WriteError(f"Session {self.id} has no stdin")
        async with self._write_lock:
            try:
                self._proc.stdin.write(data.encode("utf-8"))
                await self._proc.stdin.drain()
            except (BrokenPipeError, ConnectionResetError, RuntimeError) as e:
                raise WriteError(f"Failed to write: {e}") from e

    async def wait_for_output(
        self, mark: int, timeout: float, poll_interval: float
    ) -> list[str]:
        """Wait until output appears after ``mark``, the process exits, or timeout.

        Each wait is bounded by ``poll_interval`` so the deadline is honoured
        within that granularity even if a wake-up is missed.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while True:
            lines = self.buffer.since(mark)
            if lines or not self.running:
                return lines
            remaining = deadline - loop.time()
            if remaining <= 0:
                return lines
            await self.buffer.wait_for_data(timeout=min(remaining, poll_interval))

    def terminate(self, grace: float) -> asyncio.Task[None] | None:
        """Ask the process group to exit, escalating to SIGKILL after ``grace``.

        Returns the escalation task (not awaited here), or None if the
        process had already exited.
        """
        if not self.running or self._proc is None:
            return None
        self._signal(signal.SIGTERM)
        return asyncio.create_task(
            self._escalate(grace), name=f"session-{self.id}-escalate"
        )

    async def _escalate(self, grace: float) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + grace
        if await self.wait_exit(grace):
            # The leader is gone; the rest of the group gets what is left of the grace
            while self._group_alive():
                remaining = deadline - loop.time()
                if remaining <= 0:
                    break
                await asyncio.sleep(min(remaining, GROUP_POLL_S))
            else:
                return
            logger.info("Session %s group outlived its leader, sending SIGKILL", self.id)
        else:
            logger.info(
                "Session %s ignored SIGTERM for %.1fs, sending SIGKILL", self.id, grace
            )
        self._signal(signal.SIGKILL)
        await self.wait_exit(grace)

    def _group_alive(self) -> bool:
        assert self._proc is not None
        try:
            os.killpg(self._proc.pid, 0)
        except ProcessLookupError:
            return False
        except PermissionError:
            return True
        return True

    def _signal(self, sig: signal.Signals) -> None:
        assert self._proc is not None
        try:
            os.killpg(self._proc.pid, sig)
            logger.debug("Sent %s to session %s (pgid=%d)", sig.name, self.id, self._proc.pid)
        except ProcessLookupError:
            logger.debug("Process group already gone: %d", self._proc.pid)
        except PermissionError as e:
            logger.warning("Cannot signal group of session %s: %s", self.id, e)

    def info(self) -> SessionInfo:
        return SessionInfo(
            id=self.id,
            command=self.command,
            cwd=self.cwd,
            started=self.started_at.isoformat(),
            is_running=self.running,
            output_line_count=self.buffer.line_count,
        )
