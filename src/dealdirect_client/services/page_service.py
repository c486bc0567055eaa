"""Server-side page data. Every loader degrades to empty sections, never raises."""
from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from dealdirect_client.application.dto.ssr import SsrRequest
from dealdirect_client.application.ports.cache import PageCache
from dealdirect_client.infrastructure.ssr.fetch import ssr_fetch, ssr_fetch_all

PROPERTIES_TTL = 120
PROPERTY_DETAIL_TTL = 60
TAXONOMY_TTL = 3600
BLOG_LIST_TTL = 120
BLOG_POST_TTL = 600
LATEST_POSTS_TTL = 600

DEFAULT_PAGINATION = {"page": 1, "pages": 1, "total": 0}


def _items(body: Any, *keys: str) -> list[Any]:
    """First list found under ``keys``, else the body itself if it is a list."""
    if isinstance(body, dict):
        for key in keys:
            value = body.get(key)
            if isinstance(value, list):
                return value
        return []
    return body if isinstance(body, list) else []


async def load_home(
    *,
    client: httpx.AsyncClient | None = None,
    cache: PageCache | None = None,
) -> dict[str, list[Any]]:
    properties, categories, property_types, posts = await ssr_fetch_all(
        [
            SsrRequest("/api/properties/property-list", revalidate=PROPERTIES_TTL),
            SsrRequest("/api/categories/list-category", revalidate=TAXONOMY_TTL),
            SsrRequest("/api/propertyTypes/list-propertytype", revalidate=TAXONOMY_TTL),
            SsrRequest("/api/blogs?limit=3", revalidate=LATEST_POSTS_TTL),
        ],
        client=client,
        cache=cache,
    )
    latest_posts = _items(posts, "data") if isinstance(posts, dict) and posts.get("success") else []
    return {
        "properties": _items(properties, "data"),
        "categories": _items(categories, "data"),
        "property_types": _items(property_types, "data"),
        "latest_posts": latest_posts,
    }


async def load_property_list(
    *,
    client: httpx.AsyncClient | None = None,
    cache: PageCache | None = None,
) -> dict[str, list[Any]]:
    properties, categories = await ssr_fetch_all(
        [
            SsrRequest("/api/properties/list?limit=50", revalidate=PROPERTIES_TTL),
            SsrRequest("/api/categories/list-category", revalidate=TAXONOMY_TTL),
        ],
        client=client,
        cache=cache,
    )
    return {
        "properties": _items(properties, "data", "properties"),
        "categories": _items(categories, "data"),
    }


async def load_property(
    property_id: str,
    *,
    client: httpx.AsyncClient | None = None,
    cache: PageCache | None = None,
) -> dict[str, Any] | None:
    if not property_id:
        return None
    body = await ssr_fetch(
        f"/api/properties/{quote(property_id, safe='')}",
        revalidate=PROPERTY_DETAIL_TTL,
        client=client,
        cache=cache,
    )
    if not isinstance(body, dict):
        return None
    if "success" in body and not body["success"]:
        return None
    data = body.get("data")
    return data if isinstance(data, dict) else body


async def load_blog_list(
    page: int = 1,
    limit: int = 9,
    *,
    client: httpx.AsyncClient | None = None,
    cache: PageCache | None = None,
) -> dict[str, Any]:
    body = await ssr_fetch(
        f"/api/blogs?page={page}&limit={limit}",
        revalidate=BLOG_LIST_TTL,
        client=client,
        cache=cache,
    )
    if isinstance(body, dict) and body.get("success"):
        return {
            "posts": _items(body, "data"),
            "pagination": body.get("pagination") or dict(DEFAULT_PAGINATION),
        }
    return {"posts": [], "pagination": dict(DEFAULT_PAGINATION)}


async def load_blog_post(
    slug: str,
    *,
    client: httpx.AsyncClient | None = None,
    cache: PageCache | None = None,
) -> dict[str, Any] | None:
    body = await ssr_fetch(
        f"/api/blogs/{quote(slug, safe='')}",
        revalidate=BLOG_POST_TTL,
        client=client,
        cache=cache,
    )
    if not isinstance(body, dict) or not body.get("success"):
        return None
    return {"blog": body.get("data"), "related": body.get("related") or []}
