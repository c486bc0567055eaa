"""Debounced typing notifications: one start, one stop per burst of keystrokes."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

Emit = Callable[[str], Awaitable[None]]


class TypingDebouncer:
    def __init__(self, on_start: Emit, on_stop: Emit, *, delay: float) -> None:
        self._on_start = on_start
        self._on_stop = on_stop
        self._delay = delay
        self._active: str | None = None
        self._timer: asyncio.Task[None] | None = None

    @property
    def active(self) -> str | None:
        return self._active

    async def keystroke(self, conversation_id: str) -> None:
        if self._active is not None and self._active != conversation_id:
            await self.flush()
        if self._active is None:
            self._active = conversation_id
            await self._on_start(conversation_id)
        self._restart_timer()

    async def flush(self) -> None:
        """Emit the pending stop right away (used on send and close)."""
        self._cancel_timer()
        conversation_id, self._active = self._active, None
        if conversation_id is not None:
            await self._on_stop(conversation_id)

    def cancel(self) -> None:
        """Forget the burst without emitting anything."""
        self._cancel_timer()
        self._active = None

    def _restart_timer(self) -> None:
        self._cancel_timer()
        self._timer = asyncio.create_task(self._expire(), name="typing-debounce")

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def _expire(self) -> None:
        await asyncio.sleep(self._delay)
        self._timer = None
        conversation_id, self._active = self._active, None
        if conversation_id is None:
            return
        try:
            await self._on_stop(conversation_id)
        except Exception:
            logger.exception("stop_typing emit failed for %s", conversation_id)
