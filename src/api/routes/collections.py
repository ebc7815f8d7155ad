"""Routes exposing store catalog collections."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from src.models.commerce import DEFAULT_SORT_KEY, Collection, Product, SortKey
from src.services.commerce.storefront import CachedCatalog, get_storefront

router = APIRouter(prefix="/collections", tags=["collections"])

StorefrontDependency = Annotated[CachedCatalog, Depends(get_storefront)]


@router.get("", response_model=list[Collection])
async def list_collections(storefront: StorefrontDependency) -> list[Collection]:
    return await storefront.get_collections()


@router.get("/{handle}", response_model=Collection)
async def get_collection(handle: str, storefront: StorefrontDependency) -> Collection:
    collection = await storefront.get_collection(handle)
    if collection is None:
        raise HTTPException(status_code=404, detail="Unknown collection")
    return collection


@router.get(
    "/{handle}/products",
    response_model=list[Product],
    summary="List the products of a collection",
)
async def get_collection_products(
    handle: str,
    storefront: StorefrontDependency,
    sort_key: SortKey = DEFAULT_SORT_KEY,
) -> list[Product]:
    return await storefront.get_collection_products(handle, sort_key)
