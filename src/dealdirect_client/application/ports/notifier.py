from __future__ import annotations

from typing import Any, Awaitable, Callable, Protocol

EventHandler = Callable[[Any], Awaitable[None]]


class LiveNotifier(Protocol):
    """Low-latency push channel. Never trusted to persist anything."""

    @property
    def connected(self) -> bool: ...

    def on(self, event: str, handler: EventHandler) -> None: ...

    async def connect(self, url: str, *, headers: dict[str, str] | None = None) -> None: ...

    async def emit(self, event: str, data: Any = None) -> None: ...

    async def disconnect(self) -> None: ...
