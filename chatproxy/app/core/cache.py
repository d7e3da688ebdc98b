"""Cache abstraction used for provider catalog revalidation.

Provides an in-memory backend (default) and a Redis backend, plus the
``revalidating`` decorator that caches the JSON result of a fetcher for a
fixed window. Only successful results are stored, so a failing fetcher is
retried on the next call.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
import asyncio
import functools
import json
import time
from typing import Any, Awaitable, Callable, TypeVar

import redis.asyncio as aioredis

T = TypeVar("T")


@dataclass
class _CacheEntry:
    """Internal cache entry with TTL tracking."""

    value: bytes
    expires_at: float | None = None

    def is_expired(self) -> bool:
        if self.expires_at is None:
            return False
        return time.time() > self.expires_at


class CacheBackend(ABC):
    """Abstract base class for cache backends."""

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        """Return the cached value, or None if missing or expired."""

    @abstractmethod
    async def set(self, key: str, value: bytes, ttl: int) -> None:
        """Store a value for ``ttl`` seconds (0 keeps it forever)."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a value from the cache."""

    @abstractmethod
    async def clear(self) -> None:
        """Clear all entries from the cache."""


class InMemoryCache(CacheBackend):
    """Process-local cache with TTL support.

    Data is not shared between workers and is lost on restart.
    """

    def __init__(self) -> None:
        self._data: dict[str, _CacheEntry] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> bytes | None:
        async with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            if entry.is_expired():
                del self._data[key]
                return None
            return entry.value

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        async with self._lock:
            expires_at = time.time() + ttl if ttl > 0 else None
            self._data[key] = _CacheEntry(value=value, expires_at=expires_at)

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._data.pop(key, None)

    async def clear(self) -> None:
        async with self._lock:
            self._data.clear()


class RedisCache(CacheBackend):
    """Redis-based cache shared across workers.

    Example:
        >>> cache = RedisCache("redis://localhost:6379/0")
        >>> await cache.set("key", b"value", ttl=300)
    """

    def __init__(self, redis_url: str, prefix: str = "chatproxy:") -> None:
        self._redis_url = redis_url
        self._prefix = prefix
        self._redis: aioredis.Redis | None = None

    def _get_client(self) -> aioredis.Redis:
        if self._redis is None:
            self._redis = aioredis.from_url(self._redis_url)
        return self._redis

    async def get(self, key: str) -> bytes | None:
        return await self._get_client().get(self._prefix + key)

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        client = self._get_client()
        if ttl > 0:
            await client.setex(self._prefix + key, ttl, value)
        else:
            await client.set(self._prefix + key, value)

    async def delete(self, key: str) -> None:
        await self._get_client().delete(self._prefix + key)

    async def clear(self) -> None:
        client = self._get_client()
        async for key in client.scan_iter(match=f"{self._prefix}*"):
            await client.delete(key)

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None


# Global cache instance (singleton pattern)
_cache_instance: CacheBackend | None = None


def get_cache(force_new: bool = False) -> CacheBackend:
    """Get or create the global cache instance.

    Redis is used when ``REDIS_ENABLED`` is set, the in-memory cache
    otherwise.
    """
    global _cache_instance

    if _cache_instance is not None and not force_new:
        return _cache_instance

    from chatproxy.app.core.config import settings

    if settings.redis_enabled:
        _cache_instance = RedisCache(settings.redis_url)
    else:
        _cache_instance = InMemoryCache()
    return _cache_instance


def reset_cache() -> None:
    """Reset the global cache instance (used by tests)."""
    global _cache_instance
    _cache_instance = None


def revalidating(
    key: str, ttl: int | None = None
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Cache the JSON-serialisable result of an async fetcher under ``key``.

    The cached value is served until ``ttl`` seconds elapse (defaults to
    ``CATALOG_REVALIDATE_SECONDS``). Exceptions raised by the fetcher are
    propagated and nothing is stored.
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            from chatproxy.app.core.config import settings

            if not settings.cache_enabled:
                return await func(*args, **kwargs)

            cache = get_cache()
            raw = await cache.get(key)
            if raw is not None:
                return json.loads(raw)

            value = await func(*args, **kwargs)
            window = ttl if ttl is not None else settings.catalog_revalidate_seconds
            await cache.set(key, json.dumps(value).encode("utf-8"), window)
            return value

        return wrapper

    return decorator
