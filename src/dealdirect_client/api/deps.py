"""FastAPI dependency injection helpers."""
from __future__ import annotations

from typing import Annotated

import httpx
from fastapi import Depends, Request

from dealdirect_client.application.ports.cache import PageCache


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http


def get_page_cache(request: Request) -> PageCache | None:
    return getattr(request.app.state, "page_cache", None)


HttpClientDep = Annotated[httpx.AsyncClient, Depends(get_http_client)]
PageCacheDep = Annotated[PageCache | None, Depends(get_page_cache)]
