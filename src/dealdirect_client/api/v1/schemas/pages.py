from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class HomePageResponse(BaseModel):
    properties: list[Any] = Field(default_factory=list)
    categories: list[Any] = Field(default_factory=list)
    property_types: list[Any] = Field(default_factory=list)
    latest_posts: list[Any] = Field(default_factory=list)


class PropertyListPageResponse(BaseModel):
    properties: list[Any] = Field(default_factory=list)
    categories: list[Any] = Field(default_factory=list)


class Pagination(BaseModel):
    page: int = 1
    pages: int = 1
    total: int = 0


class BlogListPageResponse(BaseModel):
    posts: list[Any] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)


class BlogPostPageResponse(BaseModel):
    blog: dict[str, Any] | None = None
    related: list[Any] = Field(default_factory=list)
