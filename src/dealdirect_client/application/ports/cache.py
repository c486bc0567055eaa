from __future__ import annotations

from typing import Any, Protocol


class PageCache(Protocol):
    """Revalidating store for server-side page data."""

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None: ...
