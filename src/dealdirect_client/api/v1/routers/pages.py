from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query

from dealdirect_client.api.deps import HttpClientDep, PageCacheDep
from dealdirect_client.api.v1.schemas.pages import (
    BlogListPageResponse,
    BlogPostPageResponse,
    HomePageResponse,
    PropertyListPageResponse,
)
from dealdirect_client.application.exceptions import NotFoundError
from dealdirect_client.services import page_service

router = APIRouter(prefix="/pages", tags=["pages"])


@router.get("/home", response_model=HomePageResponse)
async def home(client: HttpClientDep, cache: PageCacheDep) -> HomePageResponse:
    data = await page_service.load_home(client=client, cache=cache)
    return HomePageResponse(**data)


@router.get("/properties", response_model=PropertyListPageResponse)
async def property_list(client: HttpClientDep, cache: PageCacheDep) -> PropertyListPageResponse:
    data = await page_service.load_property_list(client=client, cache=cache)
    return PropertyListPageResponse(**data)


@router.get("/properties/{property_id}")
async def property_detail(
    property_id: str,
    client: HttpClientDep,
    cache: PageCacheDep,
) -> dict[str, Any]:
    prop = await page_service.load_property(property_id, client=client, cache=cache)
    if prop is None:
        raise NotFoundError(404, "Property not found")
    return prop


@router.get("/blog", response_model=BlogListPageResponse)
async def blog_list(
    client: HttpClientDep,
    cache: PageCacheDep,
    page: int = Query(1, ge=1),
    limit: int = Query(9, ge=1, le=50),
) -> BlogListPageResponse:
    data = await page_service.load_blog_list(page, limit, client=client, cache=cache)
    return BlogListPageResponse(**data)


@router.get("/blog/{slug}", response_model=BlogPostPageResponse)
async def blog_post(slug: str, client: HttpClientDep, cache: PageCacheDep) -> BlogPostPageResponse:
    data = await page_service.load_blog_post(slug, client=client, cache=cache)
    if data is None:
        raise NotFoundError(404, "Blog post not found")
    return BlogPostPageResponse(**data)
