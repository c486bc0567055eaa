"""Short-lived socket handshake token, reused across reconnects until it expires."""
from __future__ import annotations

import logging
import time
from typing import Awaitable, Callable

import jwt

logger = logging.getLogger(__name__)

TokenFetcher = Callable[[], Awaitable[str | None]]


def token_expiry(token: str) -> float | None:
    """Read ``exp`` without verifying: the server verifies, we only schedule refresh."""
    try:
        payload = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError:
        return None
    exp = payload.get("exp")
    return float(exp) if isinstance(exp, (int, float)) else None


class SocketTokenCache:
    def __init__(
        self,
        fetcher: TokenFetcher,
        *,
        leeway_seconds: float = 15,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._fetcher = fetcher
        self._leeway = leeway_seconds
        self._clock = clock
        self._token: str | None = None
        self._expires_at: float | None = None

    async def get(self) -> str | None:
        if self._token is not None and self._expires_at is not None:
            if self._clock() < self._expires_at - self._leeway:
                return self._token

        token = await self._fetcher()
        self._token = None
        self._expires_at = None
        if token is None:
            return None

        expires_at = token_expiry(token)
        if expires_at is None:
            # Opaque or exp-less tokens are treated as single use.
            logger.debug("Socket token has no readable exp, not caching")
            return token
        self._token = token
        self._expires_at = expires_at
        return token

    def clear(self) -> None:
        self._token = None
        self._expires_at = None
