"""Session store: bounded registry of interactive sessions."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from shellwright.errors import ProcessSpawnError, SessionLimitError
from shellwright.interactive.session import InteractiveSession, new_session_id

logger = logging.getLogger(__name__)


class SessionStore:
    """Registry of sessions keyed by id, capped at ``max_sessions``.

    Creation is two-phase.  ``create()`` reserves a slot and spawns the
    process; the session stays *pending* (invisible to ``get``/``list``)
    until ``commit()`` registers it or ``discard()`` drops it.  Pending
    reservations count against the cap, so concurrent creates can never
    overshoot it.

    Every mutation of the registry happens under one ``asyncio.Lock``,
    which the reaper shares through ``sweep()``.
    """

    def __init__(
        self,
        max_sessions: int = 10,
        max_output_lines: int = 1000,
        id_factory: Callable[[], str] = new_session_id,
    ) -> None:
        self.max_sessions = max_sessions
        self.max_output_lines = max_output_lines
        self._id_factory = id_factory
        self._sessions: dict[str, InteractiveSession] = {}
        self._pending: dict[str, InteractiveSession] = {}
        self._lock = asyncio.Lock()

    def _allocate_id(self) -> str:
        """Draw ids until one is free. Must hold _lock."""
        while True:
            session_id = self._id_factory()
            if session_id not in self._sessions and session_id not in self._pending:
                return session_id
            logger.debug("Session id collision on %s, redrawing", session_id)

    async def create(
        self,
        command: str,
        cwd: str,
        env: dict[str, str] | None = None,
    ) -> InteractiveSession:
        """Reserve a slot and spawn a pending session.

        Raises:
            SessionLimitError: the store is full (nothing is spawned).
            ProcessSpawnError: the process could not be started.
        """
        async with self._lock:
            if len(self._sessions) + len(self._pending) >= self.max_sessions:
                raise SessionLimitError(
                    f"Maximum {self.max_sessions} sessions allowed. Kill some first."
                )
            session = InteractiveSession(
                command=command,
                cwd=cwd,
                id=self._allocate_id(),
                env=env or {},
                max_output_lines=self.max_output_lines,
            )
            self._pending[session.id] = session

        try:
            await session.spawn()
        except (OSError, ValueError) as e:
            # ValueError: embedded null byte in command, cwd or env
            await self.discard(session)
            raise ProcessSpawnError(f"Failed to start: {e}") from e
        except BaseException:
            await self.discard(session)
            raise
        return session

    async def commit(self, session: InteractiveSession) -> None:
        """Register a pending session."""
        async with self._lock:
            self._pending.pop(session.id, None)
            self._sessions[session.id] = session

    async def discard(self, session: InteractiveSession) -> None:
        """Release a pending session's reservation without registering it."""
        async with self._lock:
            self._pending.pop(session.id, None)

    async def get(self, session_id: str) -> InteractiveSession | None:
        async with self._lock:
            return self._sessions.get(session_id)

    async def remove(self, session_id: str) -> InteractiveSession | None:
        """Unregister a session. Removing an unknown id is a no-op."""
        async with self._lock:
            return self._sessions.pop(session_id, None)

    async def list(self) -> list[InteractiveSession]:
        """Snapshot of the registered sessions."""
        async with self._lock:
            return list(self._sessions.values())

    async def sweep(self) -> list[InteractiveSession]:
        """Unregister every session whose process has exited."""
        async with self._lock:
            dead = [s for s in self._sessions.values() if not s.running]
            for s in dead:
                del self._sessions[s.id]
        return dead

    async def clear(self) -> list[InteractiveSession]:
        """Unregister everything (used on shutdown)."""
        async with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        return sessions

    @property
    def occupancy(self) -> int:
        """Registered sessions plus pending reservations."""
        return len(self._sessions) + len(self._pending)

    def __len__(self) -> int:
        return len(self._sessions)
