"""Socket.IO implementation of the live notification channel."""
from __future__ import annotations

import asyncio
import logging
from typing import Any

import socketio
from socketio.exceptions import ConnectionError as SocketConnectionError

from dealdirect_client.application.exceptions import NetworkError
from dealdirect_client.application.ports.notifier import EventHandler

logger = logging.getLogger(__name__)


class SocketIONotifier:
    """Implements application.ports.notifier.LiveNotifier.

    Reconnection follows the Socket.IO client's own policy; the ``connect``
    handler fires again after every successful reconnect. That policy only
    covers drops after a first successful connect, so a failed initial
    connect keeps retrying here in the background with capped backoff.
    """

    def __init__(
        self,
        *,
        transports: list[str] | None = None,
        retry_delay: float = 1.0,
        retry_delay_max: float = 5.0,
    ) -> None:
        self._transports = transports or ["websocket", "polling"]
        self._retry_delay = retry_delay
        self._retry_delay_max = retry_delay_max
        self._sio = socketio.AsyncClient(reconnection=True)
        self._retry_task: asyncio.Task[None] | None = None

    @property
    def connected(self) -> bool:
        return self._sio.connected

    @property
    def retrying(self) -> bool:
        return self._retry_task is not None and not self._retry_task.done()

    def on(self, event: str, handler: EventHandler) -> None:
        self._sio.on(event, handler)

    async def connect(self, url: str, *, headers: dict[str, str] | None = None) -> None:
        logger.info("Opening live channel to %s", url)
        headers = headers or {}
        try:
            await self._sio.connect(url, headers=headers, transports=self._transports)
        except SocketConnectionError as exc:
            if not self.retrying:
                self._retry_task = asyncio.create_task(
                    self._retry_connect(url, headers), name="live-channel-connect-retry",
                )
            raise NetworkError(f"Live channel connect failed: {exc}") from exc

    async def _retry_connect(self, url: str, headers: dict[str, str]) -> None:
        delay = self._retry_delay
        attempt = 0
        while True:
            await asyncio.sleep(delay)
            attempt += 1
            try:
                await self._sio.connect(url, headers=headers, transports=self._transports)
            except SocketConnectionError as exc:
                logger.info("Live channel connect attempt %d failed: %s", attempt, exc)
                delay = min(delay * 2, self._retry_delay_max)
                continue
            logger.info("Live channel connected after %d retries", attempt)
            return

    async def emit(self, event: str, data: Any = None) -> None:
        if not self._sio.connected:
            logger.debug("Live channel down, dropping %s", event)
            return
        await self._sio.emit(event, data)

    async def disconnect(self) -> None:
        task, self._retry_task = self._retry_task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        await self._sio.disconnect()
        logger.info("Live channel closed")
