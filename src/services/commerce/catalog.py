"""Reads categories and products from the commerce backend."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from src.config import CommerceConfig
from src.models.commerce import DEFAULT_SORT_KEY, Collection, Product
from src.models.sfcc import SFCCProduct
from src.services.commerce.auth import AuthProvider, get_auth_provider
from src.services.commerce.client import SEARCH_PAGE_SIZE, SFCCClient, get_sfcc_client
from src.services.commerce.reshape import (
    reshape_categories,
    reshape_product,
    reshape_products,
)
from src.services.commerce.tasks import gather_or_cancel

logger = logging.getLogger(__name__)


class CatalogReader:
    """Uncached catalog access; every call authenticates and hits the backend."""

    def __init__(
        self,
        config: CommerceConfig,
        client: SFCCClient,
        auth: AuthProvider,
    ) -> None:
        self._config = config
        self._client = client
        self._auth = auth

    @property
    def catalog_ids(self) -> tuple[str, ...]:
        return self._config.catalog_ids

    async def list_categories(self, ids: Iterable[str] | None = None) -> list[Collection]:
        """Return collections for ``ids`` (the store catalog by default)."""

        allowed = list(ids) if ids is not None else list(self.catalog_ids)
        result = await self._auth.authorized(
            lambda token: self._client.get_categories(token, allowed)
        )

        collections = [
            collection
            for collection in reshape_categories(result.data)
            if collection.handle in allowed
        ]
        logger.debug("Loaded %d collections", len(collections))
        return collections

    async def get_product(self, product_id: str) -> Product:
        product = await self._auth.authorized(
            lambda token: self._client.get_product(token, product_id)
        )
        return reshape_product(product)

    async def search(
        self,
        query: str | None = None,
        category_id: str | None = None,
        sort_key: str | None = None,
    ) -> list[Product]:
        """Run one product search and hydrate each hit with its full record.

        Only the first page (``SEARCH_PAGE_SIZE`` hits) is fetched. Detail
        lookups run concurrently, results keep the search ranking, and one
        failed lookup fails the whole search.
        """

        async def run(token: str) -> list[SFCCProduct]:
            results = await self._client.product_search(
                token,
                q=query or "",
                refine=[f"cgid={category_id}"] if category_id else [],
                sort=sort_key or DEFAULT_SORT_KEY,
                limit=SEARCH_PAGE_SIZE,
            )
            hits = results.hits or []
            logger.info(
                "Product search returned %d hits",
                len(hits),
                extra={"query": query, "category_id": category_id},
            )
            return await self._fetch_ranked(token, [hit.product_id for hit in hits])

        products = await self._auth.authorized(run)
        return reshape_products(products)

    async def fetch_products(self, product_ids: Sequence[str]) -> list[Product]:
        """Resolve ``product_ids`` concurrently, preserving their order."""

        if not product_ids:
            return []
        products = await self._auth.authorized(
            lambda token: self._fetch_ranked(token, product_ids)
        )
        return reshape_products(products)

    async def _fetch_ranked(
        self, token: str, product_ids: Sequence[str]
    ) -> list[SFCCProduct]:
        async def fetch(index: int, product_id: str) -> tuple[int, SFCCProduct]:
            return index, await self._client.get_product(token, product_id)

        ranked = await gather_or_cancel(
            *(fetch(index, product_id) for index, product_id in enumerate(product_ids))
        )
        return [product for _, product in sorted(ranked, key=lambda pair: pair[0])]


_catalog_reader: CatalogReader | None = None


def get_catalog_reader() -> CatalogReader:
    global _catalog_reader
    if _catalog_reader is None:
        client = get_sfcc_client()
        _catalog_reader = CatalogReader(client.config, client, get_auth_provider())
    return _catalog_reader
