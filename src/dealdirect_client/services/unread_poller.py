"""Periodic unread-count refresh, the safety net behind push updates."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


class UnreadPoller:
    def __init__(self, refresh: Callable[[], Awaitable[Any]], *, interval: float) -> None:
        self._refresh = refresh
        self._interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="chat-unread-poller")
        logger.debug("Unread poller started (interval=%.1fs)", self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        if task is asyncio.current_task():
            # stopped from inside a refresh; _run exits after it returns
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("Unread poller stopped")

    async def _run(self) -> None:
        while self._task is asyncio.current_task():
            await asyncio.sleep(self._interval)
            try:
                await self._refresh()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Unread count refresh failed")
