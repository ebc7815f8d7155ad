"""Product recommendations from the legacy Open Commerce API."""

from __future__ import annotations

import logging

from src.models.commerce import Product
from src.services.commerce.catalog import CatalogReader, get_catalog_reader
from src.services.commerce.client import SFCCClient, get_sfcc_client

logger = logging.getLogger(__name__)


class RecommendationReader:
    def __init__(self, client: SFCCClient, catalog: CatalogReader) -> None:
        self._client = client
        self._catalog = catalog

    async def get_recommendations(self, product_id: str) -> list[Product]:
        """Return recommended products in recommendation rank order."""

        document = await self._client.get_product_recommendations(product_id)
        recommendations = document.recommendations or []
        if not recommendations:
            return []

        logger.debug(
            "Resolving %d recommendations for product %s",
            len(recommendations),
            product_id,
        )
        return await self._catalog.fetch_products(
            [item.recommended_item_id for item in recommendations]
        )


def get_recommendation_reader() -> RecommendationReader:
    """FastAPI dependency factory."""

    return RecommendationReader(get_sfcc_client(), get_catalog_reader())
