"""System-level routes such as health checks."""

from __future__ import annotations

import logging

from fastapi import APIRouter
from redis.exceptions import RedisError

from src.config import settings
from src.services.cache.tagged_cache import get_redis_client

router = APIRouter(tags=["system"])
logger = logging.getLogger(__name__)


@router.get("/")
async def read_root() -> dict[str, str]:
    """Hello World endpoint used by smoke tests."""

    return {"message": "Hello World"}


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint with cache connectivity check."""

    try:
        await get_redis_client().ping()
        cache_status = "connected"
    except (RedisError, OSError) as exc:
        logger.warning("Cache ping failed: %s", exc)
        cache_status = "disconnected"

    return {
        "status": "healthy",
        "cache": cache_status,
        "environment": settings.ENVIRONMENT,
    }
