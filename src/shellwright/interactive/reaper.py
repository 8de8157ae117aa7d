"""Reaper: periodically drops sessions whose process already exited."""

from __future__ import annotations

import asyncio
import logging

from shellwright.interactive.session import InteractiveSession
from shellwright.interactive.store import SessionStore

logger = logging.getLogger(__name__)


class Reaper:
    """Background sweep that keeps abandoned, dead sessions from filling the store."""

    def __init__(self, store: SessionStore, interval: float = 300.0) -> None:
        self._store = store
        self._interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the sweep loop on the running event loop (idempotent)."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="session-reaper")
        logger.debug("Reaper started (interval=%.1fs)", self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def run_once(self) -> list[InteractiveSession]:
        reaped = await self._store.sweep()
        for session in reaped:
            logger.info(
                "Reaped session %s (code=%s): %s",
                session.id,
                session.returncode,
                session.command,
            )
        return reaped

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self.run_once()
            except Exception:
                logger.exception("Reaper sweep failed")
