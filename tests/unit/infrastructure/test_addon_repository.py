"""Tests for CacheAddonRepository on top of the in-memory cache."""

from __future__ import annotations

from dataclasses import replace

import pytest

from arflix.domain.entities.addons import AddonEndpoint
from arflix.infrastructure.cache.memory_adapter import MemoryCacheAdapter
from arflix.infrastructure.persistence.addon_cache import CacheAddonRepository


def _addon(n: int, **overrides: object) -> AddonEndpoint:
    fields: dict[str, object] = {
        "base_url": f"https://addon{n}.example.com",
        "name": f"Addon {n}",
        "manifest_url": f"https://addon{n}.example.com/manifest.json",
        "addon_id": f"com.example.addon{n}",
        "version": "1.0.0",
        "declared_id_prefixes": ("imdb",),
        "order_position": n,
    }
    fields.update(overrides)
    return AddonEndpoint(**fields)  # type: ignore[arg-type]


class TestCacheAddonRepository:
    @pytest.mark.asyncio()
    async def test_empty(self, memory_cache: MemoryCacheAdapter) -> None:
        repo = CacheAddonRepository(memory_cache)
        assert await repo.list_all() == []
        assert await repo.get_by_manifest_url("https://x/manifest.json") is None

    @pytest.mark.asyncio()
    async def test_save_and_load_round_trip(
        self, memory_cache: MemoryCacheAdapter
    ) -> None:
        repo = CacheAddonRepository(memory_cache)
        addon = _addon(1, icon="https://addon1.example.com/logo.png")

        await repo.save(addon)

        assert await repo.get_by_manifest_url(addon.manifest_url) == addon

    @pytest.mark.asyncio()
    async def test_list_sorted_by_position(
        self, memory_cache: MemoryCacheAdapter
    ) -> None:
        repo = CacheAddonRepository(memory_cache)
        await repo.save(_addon(3))
        await repo.save(_addon(1))
        await repo.save(_addon(2))

        assert [a.order_position for a in await repo.list_all()] == [1, 2, 3]

    @pytest.mark.asyncio()
    async def test_list_enabled(self, memory_cache: MemoryCacheAdapter) -> None:
        repo = CacheAddonRepository(memory_cache)
        await repo.save(_addon(1))
        await repo.save(_addon(2, enabled=False))

        assert [a.name for a in await repo.list_enabled()] == ["Addon 1"]

    @pytest.mark.asyncio()
    async def test_save_replaces_same_manifest_url(
        self, memory_cache: MemoryCacheAdapter
    ) -> None:
        repo = CacheAddonRepository(memory_cache)
        original = _addon(1)
        await repo.save(original)
        await repo.save(replace(original, version="2.0.0"))

        addons = await repo.list_all()
        assert len(addons) == 1
        assert addons[0].version == "2.0.0"

    @pytest.mark.asyncio()
    async def test_registry_never_expires(
        self, memory_cache: MemoryCacheAdapter, fake_clock
    ) -> None:
        repo = CacheAddonRepository(memory_cache)
        await repo.save(_addon(1))

        fake_clock.advance(10 * 365 * 24 * 3600)

        assert len(await repo.list_all()) == 1

    @pytest.mark.asyncio()
    async def test_corrupt_registry_reads_as_empty(
        self, memory_cache: MemoryCacheAdapter
    ) -> None:
        await memory_cache.set("addons:registry", "{not json", ttl=0)
        repo = CacheAddonRepository(memory_cache)
        assert await repo.list_all() == []
