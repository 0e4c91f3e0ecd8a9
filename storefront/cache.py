"""Read-through cache for catalog responses.

Redis is used when reachable; otherwise entries live in process memory. Only
successful responses are stored, so a failing backend is always retried on
the next search.
"""
from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol

import redis

from .catalog_client import CatalogClient
from .config import settings
from .models import Product, parse_products
from .text import hash_query

logger = logging.getLogger(__name__)

KEY_PREFIX = "storefront:products:"

ProductRecords = List[Dict[str, Any]]


class CacheBackend(Protocol):
    def get(self, key: str) -> Optional[ProductRecords]: ...

    def set(self, key: str, records: ProductRecords, ttl: int) -> None: ...


@dataclass
class RedisCache:
    client: redis.Redis

    def get(self, key: str) -> Optional[ProductRecords]:
        try:
            raw = self.client.get(KEY_PREFIX + key)
        except redis.RedisError as exc:
            logger.warning("Redis get failed for %s: %s", key, exc)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring undecodable cache entry %s", key)
            return None

    def set(self, key: str, records: ProductRecords, ttl: int) -> None:
        try:
            self.client.setex(KEY_PREFIX + key, ttl, json.dumps(records))
        except redis.RedisError as exc:
            logger.warning("Redis set failed for %s: %s", key, exc)


class InMemoryCache:
    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: Dict[str, tuple[float, ProductRecords]] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def get(self, key: str) -> Optional[ProductRecords]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, records = entry
            if expires_at <= self._clock():
                del self._entries[key]
                return None
            return records

    def set(self, key: str, records: ProductRecords, ttl: int) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + ttl, records)


_cache: CacheBackend | None = None


def get_cache() -> CacheBackend:
    global _cache
    if _cache is not None:
        return _cache
    try:
        client = redis.Redis(host=settings.redis_host, port=settings.redis_port, decode_responses=False)
        client.ping()
        logger.info("Caching catalog responses in Redis at %s:%s", settings.redis_host, settings.redis_port)
        _cache = RedisCache(client)
    except redis.RedisError:
        logger.warning("Redis not available, caching catalog responses in memory")
        _cache = InMemoryCache()
    return _cache


class CachedCatalogClient:
    """Wraps a :class:`CatalogClient`; errors from the inner client pass through."""

    def __init__(self, inner: CatalogClient, cache: CacheBackend, ttl_seconds: int) -> None:
        self.inner = inner
        self.cache = cache
        self.ttl_seconds = ttl_seconds

    async def list_all(self) -> list[Product]:
        return await self._cached("all", self.inner.list_all)

    async def search(self, query: str) -> list[Product]:
        return await self._cached("search:" + hash_query(query), lambda: self.inner.search(query))

    async def aclose(self) -> None:
        await self.inner.aclose()

    async def _cached(self, key: str, fetch: Callable[[], Awaitable[list[Product]]]) -> list[Product]:
        records = self.cache.get(key)
        if records is not None:
            logger.debug("cache hit key=%s", key)
            return parse_products(records)
        products = await fetch()
        self.cache.set(key, [p.model_dump(by_alias=True) for p in products], self.ttl_seconds)
        logger.debug("cache store key=%s ttl=%s", key, self.ttl_seconds)
        return products
