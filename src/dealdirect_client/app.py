from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dealdirect_client.api.middleware.correlation_id import CorrelationIdMiddleware
from dealdirect_client.api.middleware.timing import RequestTimingMiddleware
from dealdirect_client.api.v1.routers import health, pages
from dealdirect_client.application.exceptions import NotFoundError, ValidationError
from dealdirect_client.config import settings
from dealdirect_client.infrastructure.cache.redis_cache import RedisPageCache

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    app.state.http = httpx.AsyncClient()
    app.state.redis = None
    app.state.page_cache = None
    if settings.REDIS_URL:
        app.state.redis = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
        app.state.page_cache = RedisPageCache(app.state.redis)
        logger.info("Redis page cache enabled")

    yield

    await app.state.http.aclose()
    if app.state.redis is not None:
        await app.state.redis.aclose()
        logger.info("Redis connection pool closed")


def create_app() -> FastAPI:
    app = FastAPI(
        title="DealDirect Page Data",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(pages.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.detail})
