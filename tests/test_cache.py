"""Tests for the cache abstraction layer."""

import time

import pytest

from chatproxy.app.core.cache import (
    InMemoryCache,
    RedisCache,
    _CacheEntry,
    get_cache,
    reset_cache,
    revalidating,
)


class TestCacheEntry:
    """Tests for the internal _CacheEntry class."""

    def test_cache_entry_no_expiry(self):
        entry = _CacheEntry(value=b"test", expires_at=None)
        assert not entry.is_expired()

    def test_cache_entry_expired(self):
        entry = _CacheEntry(value=b"test", expires_at=time.time() - 1)
        assert entry.is_expired()

    def test_cache_entry_not_expired(self):
        entry = _CacheEntry(value=b"test", expires_at=time.time() + 10)
        assert not entry.is_expired()


class TestInMemoryCache:
    """Tests for the InMemoryCache implementation."""

    @pytest.mark.asyncio
    async def test_set_and_get(self):
        cache = InMemoryCache()
        await cache.set("key1", b"value1", ttl=60)
        assert await cache.get("key1") == b"value1"

    @pytest.mark.asyncio
    async def test_get_nonexistent_key(self):
        assert await InMemoryCache().get("nonexistent") is None

    @pytest.mark.asyncio
    async def test_expired_value_is_dropped(self):
        cache = InMemoryCache()
        await cache.set("key1", b"value1", ttl=60)
        cache._data["key1"].expires_at = time.time() - 1
        assert await cache.get("key1") is None
        assert "key1" not in cache._data

    @pytest.mark.asyncio
    async def test_zero_ttl_never_expires(self):
        cache = InMemoryCache()
        await cache.set("key1", b"value1", ttl=0)
        assert cache._data["key1"].expires_at is None

    @pytest.mark.asyncio
    async def test_delete_and_clear(self):
        cache = InMemoryCache()
        await cache.set("a", b"1", ttl=60)
        await cache.set("b", b"2", ttl=60)
        await cache.delete("a")
        assert await cache.get("a") is None
        await cache.clear()
        assert await cache.get("b") is None


class TestGetCache:
    def test_singleton(self):
        assert get_cache() is get_cache()

    def test_in_memory_by_default(self):
        assert isinstance(get_cache(), InMemoryCache)

    def test_redis_when_enabled(self, monkeypatch):
        from chatproxy.app.core.config import settings

        monkeypatch.setattr(settings, "redis_enabled", True)
        reset_cache()
        assert isinstance(get_cache(), RedisCache)


class TestRevalidating:
    """Tests for the revalidating decorator."""

    @pytest.mark.asyncio
    async def test_result_is_cached(self):
        calls = []

        @revalidating("numbers", ttl=60)
        async def fetch():
            calls.append(1)
            return [1, 2, 3]

        assert await fetch() == [1, 2, 3]
        assert await fetch() == [1, 2, 3]
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_exceptions_are_not_cached(self):
        calls = []

        @revalidating("flaky", ttl=60)
        async def fetch():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("upstream down")
            return {"ok": True}

        with pytest.raises(RuntimeError):
            await fetch()
        assert await fetch() == {"ok": True}
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_expired_value_is_refetched(self):
        calls = []

        @revalidating("short", ttl=60)
        async def fetch():
            calls.append(1)
            return len(calls)

        assert await fetch() == 1
        get_cache()._data["short"].expires_at = time.time() - 1
        assert await fetch() == 2

    @pytest.mark.asyncio
    async def test_disabled_cache_always_calls(self, monkeypatch):
        from chatproxy.app.core.config import settings

        monkeypatch.setattr(settings, "cache_enabled", False)
        calls = []

        @revalidating("uncached", ttl=60)
        async def fetch():
            calls.append(1)
            return "value"

        await fetch()
        await fetch()
        assert len(calls) == 2
