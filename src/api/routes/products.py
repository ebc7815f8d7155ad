"""Routes for product search, detail and recommendations."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from src.models.commerce import DEFAULT_SORT_KEY, Product, SortKey
from src.services.commerce.recommendations import (
    RecommendationReader,
    get_recommendation_reader,
)
from src.services.commerce.storefront import CachedCatalog, get_storefront

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["products"])

StorefrontDependency = Annotated[CachedCatalog, Depends(get_storefront)]
RecommendationsDependency = Annotated[
    RecommendationReader, Depends(get_recommendation_reader)
]


@router.get(
    "",
    response_model=list[Product],
    summary="Search the catalog",
)
async def search_products(
    storefront: StorefrontDependency,
    q: str | None = None,
    sort_key: SortKey = DEFAULT_SORT_KEY,
) -> list[Product]:
    logger.debug("Product search q=%r sort_key=%s", q, sort_key)
    return await storefront.get_products(q, sort_key)


@router.get("/{product_id}", response_model=Product)
async def get_product(product_id: str, storefront: StorefrontDependency) -> Product:
    return await storefront.get_product(product_id)


@router.get(
    "/{product_id}/recommendations",
    response_model=list[Product],
    summary="Products recommended alongside a product",
)
async def get_product_recommendations(
    product_id: str,
    recommendations: RecommendationsDependency,
) -> list[Product]:
    return await recommendations.get_recommendations(product_id)
