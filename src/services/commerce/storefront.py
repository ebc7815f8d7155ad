"""Cached catalog reads used by storefront pages and cart hydration."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeVar

from pydantic import TypeAdapter

from src.models.commerce import DEFAULT_SORT_KEY, Collection, Product
from src.services.cache.tagged_cache import TaggedCache, get_tagged_cache
from src.services.commerce.auth import get_auth_provider
from src.services.commerce.basket import BasketService
from src.services.commerce.catalog import CatalogReader, get_catalog_reader
from src.services.commerce.client import get_sfcc_client

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Tags:
    COLLECTIONS = "collections"
    PRODUCTS = "products"


_PRODUCT = TypeAdapter(Product)
_PRODUCTS = TypeAdapter(list[Product])
_COLLECTIONS = TypeAdapter(list[Collection])


class CachedCatalog:
    """Catalog reads memoized in the tagged cache."""

    def __init__(self, catalog: CatalogReader, cache: TaggedCache) -> None:
        self._catalog = catalog
        self._cache = cache

    async def get_collections(self) -> list[Collection]:
        return await self._cached(
            "get-collections",
            None,
            [Tags.COLLECTIONS],
            _COLLECTIONS,
            self._catalog.list_categories,
        )

    async def get_collection(self, handle: str) -> Collection | None:
        collections = await self.get_collections()
        return next((c for c in collections if c.handle == handle), None)

    async def get_product(self, product_id: str) -> Product:
        return await self._cached(
            "get-product",
            {"id": product_id},
            [Tags.PRODUCTS],
            _PRODUCT,
            lambda: self._catalog.get_product(product_id),
        )

    async def get_collection_products(
        self, collection: str, sort_key: str | None = None
    ) -> list[Product]:
        sort_key = sort_key or DEFAULT_SORT_KEY
        return await self._cached(
            "get-collection-products",
            {"collection": collection, "sort_key": sort_key},
            [Tags.PRODUCTS, Tags.COLLECTIONS],
            _PRODUCTS,
            lambda: self._catalog.search(category_id=collection, sort_key=sort_key),
        )

    async def get_products(
        self, query: str | None = None, sort_key: str | None = None
    ) -> list[Product]:
        sort_key = sort_key or DEFAULT_SORT_KEY
        return await self._cached(
            "get-products",
            {"query": query or "", "sort_key": sort_key},
            [Tags.PRODUCTS],
            _PRODUCTS,
            lambda: self._catalog.search(query=query, sort_key=sort_key),
        )

    async def _cached(
        self,
        namespace: str,
        params: Any,
        tags: Iterable[str],
        adapter: TypeAdapter[T],
        load: Callable[[], Awaitable[T]],
    ) -> T:
        async def compute() -> str:
            value = await load()
            return adapter.dump_json(value, by_alias=True).decode("utf-8")

        raw = await self._cache.get_or_set(namespace, params, tags, compute)
        return adapter.validate_json(raw)


def get_storefront() -> CachedCatalog:
    """FastAPI dependency factory."""

    return CachedCatalog(get_catalog_reader(), get_tagged_cache())


def get_basket_service() -> BasketService:
    """FastAPI dependency factory; cart lines resolve through the cache."""

    storefront = get_storefront()
    return BasketService(get_sfcc_client(), get_auth_provider(), storefront.get_product)
