"""Redis-backed revalidation cache for server-side page data."""
from __future__ import annotations

import logging
from typing import Any

import redis.asyncio as aioredis

from dealdirect_client.infrastructure.cache.serializer import deserialize_value, serialize_value

logger = logging.getLogger(__name__)

KEY_PREFIX = "ssr:"


class RedisPageCache:
    """Implements application.ports.cache.PageCache."""

    def __init__(self, redis: aioredis.Redis, *, prefix: str = KEY_PREFIX) -> None:
        self._redis = redis
        self._prefix = prefix

    async def get(self, key: str) -> Any | None:
        raw = await self._redis.get(self._prefix + key)
        return deserialize_value(raw)

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        await self._redis.set(self._prefix + key, serialize_value(value), ex=ttl_seconds)
        logger.debug("Cached %s for %ds", key, ttl_seconds)

    async def ping(self) -> bool:
        return bool(await self._redis.ping())
