"""Webhook receiver that invalidates cached catalog data."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Header

from src.config import settings
from src.models.webhook import RevalidateResponse
from src.services.cache.tagged_cache import TaggedCache, get_tagged_cache
from src.services.commerce.revalidation import revalidate

router = APIRouter(prefix="/api", tags=["webhooks"])

CacheDependency = Annotated[TaggedCache, Depends(get_tagged_cache)]


@router.api_route(
    "/revalidate",
    methods=["GET", "POST"],
    response_model=RevalidateResponse,
    response_model_exclude_none=True,
    summary="Invalidate cached catalog data after a backend change",
)
async def revalidate_cache(
    cache: CacheDependency,
    secret: str | None = None,
    x_sfcc_topic: Annotated[str | None, Header()] = None,
) -> RevalidateResponse:
    return await revalidate(
        cache,
        topic=x_sfcc_topic,
        secret=secret,
        expected_secret=settings.SFCC_REVALIDATION_SECRET,
    )
