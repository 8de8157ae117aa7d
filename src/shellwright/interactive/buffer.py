"""Bounded line buffer for interactive session output."""

from __future__ import annotations

import asyncio
import threading
from collections import deque


class LineBuffer:
    """Thread-safe, append-only line buffer with FIFO eviction.

    Holds at most ``max_lines`` lines; appending past capacity silently
    drops the oldest lines.  Consumers take a *mark* (the number of lines
    ever appended) and later ask for everything appended since that mark.
    Because marks count total appends rather than the current length,
    deltas stay correct after eviction starts; a delta only loses lines
    that were already evicted.

    Waiters are woken through a generation event: every ``notify()``
    sets the current event and installs a fresh one, so concurrent waiters
    never clear each other's wake-up.  Call ``attach_loop()`` once from the
    asyncio thread to enable this.
    """

    def __init__(self, max_lines: int = 1000) -> None:
        if max_lines < 1:
            raise ValueError("max_lines must be at least 1")
        self._lines: deque[str] = deque(maxlen=max_lines)
        self._total_lines: int = 0  # Total lines ever added
        self._lock = threading.Lock()
        self._data_event: asyncio.Event | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    def attach_loop(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Attach an asyncio event loop so appends can wake waiters.

        Must be called from the asyncio thread (or pass an explicit loop).
        """
        self._loop = loop or asyncio.get_running_loop()
        self._data_event = asyncio.Event()

    @property
    def capacity(self) -> int:
        return self._lines.maxlen or 0

    def append(self, line: str) -> None:
        """Append a single line."""
        with self._lock:
            self._lines.append(line)
            self._total_lines += 1
        self.notify()

    def append_text(self, text: str) -> int:
        """Split ``text`` on newlines and append each piece as a line.

        A trailing newline terminates the last line rather than opening an
        empty one, so ``"4\\n"`` appends ``["4"]`` while a bare prompt like
        ``">>> "`` is appended as its own line.

        Returns:
            Number of lines appended.
        """
        if not text:
            return 0
        pieces = text.split("\n")
        if pieces[-1] == "":
            pieces.pop()
        with self._lock:
            self._lines.extend(pieces)
            self._total_lines += len(pieces)
        self.notify()
        return len(pieces)

    def notify(self) -> None:
        """Wake every current waiter (thread-safe)."""
        if self._loop is None or self._loop.is_closed():
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            self._wake()
        else:
            self._loop.call_soon_threadsafe(self._wake)

    def _wake(self) -> None:
        event = self._data_event
        self._data_event = asyncio.Event()
        if event is not None:
            event.set()

    async def wait_for_data(self, timeout: float | None = None) -> bool:
        """Wait until the next ``notify()`` (or timeout).

        Returns True if woken, False on timeout.  Without an attached loop
        this degrades to sleeping for ``timeout``.
        """
        event = self._data_event
        if event is None:
            await asyncio.sleep(timeout or 0)
            return False
        try:
            await asyncio.wait_for(event.wait(), timeout=timeout)
            return True
        except asyncio.TimeoutError:
            return False

    def mark(self) -> int:
        """Position to pass to ``since()`` later."""
        with self._lock:
            return self._total_lines

    def since(self, mark: int) -> list[str]:
        """Lines appended after ``mark`` that are still retained."""
        with self._lock:
            appended = self._total_lines - mark
            if appended <= 0:
                return []
            retained = min(appended, len(self._lines))
            return list(self._lines)[len(self._lines) - retained :]

    def read_all(self) -> str:
        """All retained lines joined with newlines."""
        with self._lock:
            return "\n".join(self._lines)

    def read_tail(self, n: int = 100) -> list[str]:
        """Read the last N lines."""
        with self._lock:
            lines = list(self._lines)
        return lines[-n:] if len(lines) > n else lines

    @property
    def line_count(self) -> int:
        """Current number of lines in the buffer."""
        with self._lock:
            return len(self._lines)

    @property
    def total_lines(self) -> int:
        """Total number of lines ever added."""
        with self._lock:
            return self._total_lines
