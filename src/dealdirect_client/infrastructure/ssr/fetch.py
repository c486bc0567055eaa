"""Server-side page data fetching.

Every call is bounded by a timeout and degrades to ``None`` instead of
raising, so a page can render with empty sections when the backend is slow
or down.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Sequence

import httpx

from dealdirect_client.application.dto.ssr import SsrRequest
from dealdirect_client.application.ports.cache import PageCache
from dealdirect_client.config import settings
from dealdirect_client.infrastructure.ssr.context import request_id_ctx

logger = logging.getLogger(__name__)

SSR_HEADERS = {
    "Accept": "application/json",
    "X-SSR-Request": "true",
}


def get_server_api_base() -> str:
    return settings.server_api_base


async def _get_json(client: httpx.AsyncClient, url: str) -> tuple[int, Any]:
    headers = dict(SSR_HEADERS)
    request_id = request_id_ctx.get()
    if request_id:
        headers["X-Request-ID"] = request_id
    resp = await client.get(url, headers=headers)
    if not resp.is_success:
        return resp.status_code, None
    return resp.status_code, resp.json()


async def ssr_fetch(
    path: str,
    *,
    revalidate: int | None = None,
    timeout_ms: int | None = None,
    client: httpx.AsyncClient | None = None,
    cache: PageCache | None = None,
    base_url: str | None = None,
) -> Any | None:
    """GET ``path`` from the backend; parsed JSON on 2xx, otherwise ``None``."""
    revalidate = settings.SSR_DEFAULT_REVALIDATE if revalidate is None else revalidate
    timeout_ms = settings.SSR_TIMEOUT_MS if timeout_ms is None else timeout_ms
    url = f"{(base_url or get_server_api_base()).rstrip('/')}{path}"
    use_cache = cache is not None and revalidate > 0

    if use_cache:
        try:
            cached = await cache.get(path)
        except Exception:
            logger.warning("[SSR] cache read failed for %s", path, exc_info=True)
            cached = None
        if cached is not None:
            return cached

    own_client = client is None
    http = client or httpx.AsyncClient()
    try:
        status, data = await asyncio.wait_for(_get_json(http, url), timeout=timeout_ms / 1000)
    except asyncio.TimeoutError:
        logger.error("[SSR] TIMEOUT after %dms: %s", timeout_ms, path)
        return None
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("[SSR] Fetch failed for %s: %s", path, exc)
        return None
    finally:
        if own_client:
            await http.aclose()

    if data is None:
        logger.warning("[SSR] %s responded with %d", path, status)
        return None

    if use_cache:
        try:
            await cache.set(path, data, revalidate)
        except Exception:
            logger.warning("[SSR] cache write failed for %s", path, exc_info=True)
    return data


async def ssr_fetch_all(
    requests: Sequence[SsrRequest],
    *,
    client: httpx.AsyncClient | None = None,
    cache: PageCache | None = None,
) -> list[Any | None]:
    """Run several ``ssr_fetch`` calls concurrently; one failure never affects the others."""
    results = await asyncio.gather(
        *(
            ssr_fetch(
                r.path,
                revalidate=r.revalidate,
                timeout_ms=r.timeout_ms,
                client=client,
                cache=cache,
            )
            for r in requests
        ),
        return_exceptions=True,
    )
    return [None if isinstance(r, BaseException) else r for r in results]
