"""Redis-backed memoization with tag-based invalidation."""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

import redis.asyncio as redis

from src.config import settings

logger = logging.getLogger(__name__)

_redis_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    """Return a singleton Redis client for the current process."""

    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis_client


async def close_redis_client() -> None:
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None


class TaggedCache:
    """Stores serialized results and groups their keys under tags.

    Entries never expire; they disappear only when one of their tags is
    invalidated. A value computed while its tag is being invalidated is
    still stored afterwards and survives until the next invalidation.
    """

    def __init__(self, client: redis.Redis, prefix: str | None = None) -> None:
        self._client = client
        self._prefix = prefix if prefix is not None else settings.CACHE_KEY_PREFIX

    def entry_key(self, namespace: str, params: Any = None) -> str:
        digest = hashlib.sha256(
            json.dumps(params, sort_keys=True, default=str).encode("utf-8")
        ).hexdigest()[:32]
        return f"{self._prefix}entry:{namespace}:{digest}"

    def tag_key(self, tag: str) -> str:
        return f"{self._prefix}tag:{tag}"

    async def get(self, key: str) -> str | None:
        return await self._client.get(key)

    async def set(self, key: str, value: str, tags: Iterable[str]) -> None:
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.set(key, value)
            for tag in tags:
                pipe.sadd(self.tag_key(tag), key)
            await pipe.execute()

    async def get_or_set(
        self,
        namespace: str,
        params: Any,
        tags: Iterable[str],
        compute: Callable[[], Awaitable[str]],
    ) -> str:
        """Return the cached value or compute, store and return it."""

        key = self.entry_key(namespace, params)
        cached = await self.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return cached

        logger.debug("Cache miss for %s", key)
        value = await compute()
        await self.set(key, value, tags)
        return value

    async def invalidate_tag(self, tag: str) -> int:
        """Drop every entry registered under ``tag``; returns the count."""

        tag_key = self.tag_key(tag)
        keys = await self._client.smembers(tag_key)
        async with self._client.pipeline(transaction=True) as pipe:
            if keys:
                pipe.delete(*keys)
            pipe.delete(tag_key)
            await pipe.execute()

        logger.info("Invalidated cache tag %s", tag, extra={"entries": len(keys)})
        return len(keys)


def get_tagged_cache() -> TaggedCache:
    """FastAPI dependency factory."""

    return TaggedCache(get_redis_client())
