"""Tests for MemoryCacheAdapter (TTL + injectable clock)."""

from __future__ import annotations

import pytest

from arflix.infrastructure.cache import MemoryCacheAdapter, create_cache


class TestMemoryCacheAdapter:
    @pytest.mark.asyncio()
    async def test_get_missing_returns_none(self, memory_cache: MemoryCacheAdapter) -> None:
        assert await memory_cache.get("nope") is None

    @pytest.mark.asyncio()
    async def test_set_then_get(self, memory_cache: MemoryCacheAdapter) -> None:
        await memory_cache.set("k", {"a": 1}, ttl=60)
        assert await memory_cache.get("k") == {"a": 1}
        assert await memory_cache.exists("k")

    @pytest.mark.asyncio()
    async def test_expired_entry_is_never_returned(
        self, memory_cache: MemoryCacheAdapter, fake_clock
    ) -> None:
        await memory_cache.set("k", "v", ttl=60)
        fake_clock.advance(59.9)
        assert await memory_cache.get("k") == "v"
        fake_clock.advance(0.1)
        assert await memory_cache.get("k") is None
        assert not await memory_cache.exists("k")

    @pytest.mark.asyncio()
    async def test_default_ttl_applies(self, fake_clock) -> None:
        cache = MemoryCacheAdapter(ttl_seconds=10, clock=fake_clock)
        await cache.set("k", "v")
        fake_clock.advance(10)
        assert await cache.get("k") is None

    @pytest.mark.asyncio()
    async def test_ttl_zero_never_expires(
        self, memory_cache: MemoryCacheAdapter, fake_clock
    ) -> None:
        await memory_cache.set("k", "v", ttl=0)
        fake_clock.advance(10**9)
        assert await memory_cache.get("k") == "v"

    @pytest.mark.asyncio()
    async def test_delete(self, memory_cache: MemoryCacheAdapter) -> None:
        await memory_cache.set("k", "v")
        assert await memory_cache.delete("k") is True
        assert await memory_cache.delete("k") is False

    @pytest.mark.asyncio()
    async def test_clear(self, memory_cache: MemoryCacheAdapter) -> None:
        await memory_cache.set("a", 1)
        await memory_cache.set("b", 2)
        await memory_cache.clear()
        assert await memory_cache.get("a") is None
        assert await memory_cache.get("b") is None

    @pytest.mark.asyncio()
    async def test_context_manager(self) -> None:
        async with MemoryCacheAdapter() as cache:
            await cache.set("k", "v")
            assert await cache.get("k") == "v"


class TestMemoryCacheEviction:
    @pytest.mark.asyncio()
    async def test_expired_keys_swept_on_write(
        self, memory_cache: MemoryCacheAdapter, fake_clock
    ) -> None:
        for i in range(5000):
            await memory_cache.set(f"ids:movie:tt{i}", {"imdb_id": f"tt{i}"}, ttl=3600)

        fake_clock.advance(10_000)
        await memory_cache.set("ids:movie:fresh", {"imdb_id": "fresh"}, ttl=3600)

        assert len(memory_cache._entries) == 1

    @pytest.mark.asyncio()
    async def test_sweep_every_n_writes(self, fake_clock) -> None:
        cache = MemoryCacheAdapter(clock=fake_clock, evict_interval=3)
        await cache.set("a", 1, ttl=10)
        fake_clock.advance(20)
        await cache.set("b", 2, ttl=10)
        assert "a" in cache._entries

        await cache.set("c", 3, ttl=10)

        assert set(cache._entries) == {"b", "c"}

    @pytest.mark.asyncio()
    async def test_size_cap_drops_oldest(self, fake_clock) -> None:
        cache = MemoryCacheAdapter(clock=fake_clock, max_entries=3)
        for key in ("a", "b", "c"):
            await cache.set(key, key)
        await cache.set("a", "a2")
        await cache.set("d", "d")

        assert list(cache._entries) == ["c", "a", "d"]
        assert await cache.get("b") is None

    @pytest.mark.asyncio()
    async def test_size_cap_keeps_entries_without_ttl(self, fake_clock) -> None:
        cache = MemoryCacheAdapter(clock=fake_clock, max_entries=2)
        await cache.set("addons:registry", "[]", ttl=0)
        for key in ("a", "b", "c"):
            await cache.set(key, key)

        assert await cache.get("addons:registry") == "[]"
        assert set(cache._entries) == {"addons:registry", "b", "c"}


class TestCreateCache:
    def test_memory_backend(self) -> None:
        assert isinstance(create_cache("memory"), MemoryCacheAdapter)

    def test_unknown_backend_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown cache backend"):
            create_cache("memcached")  # type: ignore[arg-type]
