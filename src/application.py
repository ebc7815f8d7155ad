"""FastAPI application factory and bootstrap helpers."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.routes import include_api_routes
from src.config import settings
from src.services.cache.tagged_cache import close_redis_client
from src.services.commerce.client import close_sfcc_client
from src.services.commerce.errors import (
    AuthError,
    BackendError,
    CommerceError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_ERROR_STATUS: dict[type[CommerceError], int] = {
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    AuthError: status.HTTP_502_BAD_GATEWAY,
    BackendError: status.HTTP_502_BAD_GATEWAY,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events."""
    logger.info(
        "Storefront adapter starting",
        extra={"environment": settings.ENVIRONMENT},
    )

    yield

    await close_sfcc_client()
    await close_redis_client()
    logger.info("Closed commerce and cache clients")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Storefront Commerce Adapter",
        description="Headless storefront adapter for Salesforce Commerce Cloud",
        version="1.0.0",
        lifespan=lifespan,
    )

    _configure_cors(app)
    _register_error_handlers(app)
    include_api_routes(app)

    return app


def _configure_cors(app: FastAPI) -> None:
    """Allow broad access in non-production environments."""

    if settings.is_production:
        return

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _register_error_handlers(app: FastAPI) -> None:
    """Translate commerce failures into HTTP responses."""

    async def handle_commerce_error(request: Request, exc: CommerceError) -> JSONResponse:
        if isinstance(exc, BackendError) and exc.is_not_found:
            status_code = status.HTTP_404_NOT_FOUND
        else:
            status_code = next(
                (code for kind, code in _ERROR_STATUS.items() if isinstance(exc, kind)),
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        if status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    app.add_exception_handler(CommerceError, handle_commerce_error)
