"""Cache invalidation triggered by backend change notifications."""

from __future__ import annotations

import hmac
import logging
import time

from src.models.webhook import RevalidateResponse
from src.services.cache.tagged_cache import TaggedCache
from src.services.commerce.storefront import Tags

logger = logging.getLogger(__name__)

COLLECTION_TOPICS = frozenset(
    {"collections/create", "collections/delete", "collections/update"}
)
PRODUCT_TOPICS = frozenset({"products/create", "products/delete", "products/update"})


def secret_matches(provided: str | None, expected: str | None) -> bool:
    if not provided or not expected:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


async def revalidate(
    cache: TaggedCache,
    *,
    topic: str | None,
    secret: str | None,
    expected_secret: str | None,
) -> RevalidateResponse:
    """Invalidate the cache tag matching ``topic``.

    A wrong secret gets the same plain acknowledgement as an ignored topic.
    """

    if not secret_matches(secret, expected_secret):
        logger.error("Invalid revalidation secret.")
        return RevalidateResponse()

    topic = topic or "unknown"
    is_collection_update = topic in COLLECTION_TOPICS
    is_product_update = topic in PRODUCT_TOPICS

    if not is_collection_update and not is_product_update:
        logger.debug("Ignoring webhook topic %s", topic)
        return RevalidateResponse()

    if is_collection_update:
        await cache.invalidate_tag(Tags.COLLECTIONS)
    if is_product_update:
        await cache.invalidate_tag(Tags.PRODUCTS)

    logger.info("Revalidated cache for topic %s", topic)
    return RevalidateResponse(revalidated=True, now=int(time.time() * 1000))
