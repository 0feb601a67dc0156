"""Addon repository backed by CachePort (memory/diskcache/redis)."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import structlog

from arflix.domain.entities.addons import AddonEndpoint
from arflix.domain.ports.cache import CachePort

log = structlog.get_logger(__name__)

_REGISTRY_KEY = "addons:registry"


def _serialize_addon(addon: AddonEndpoint) -> dict[str, Any]:
    return {
        "manifest_url": addon.manifest_url,
        "base_url": addon.base_url,
        "name": addon.name,
        "addon_id": addon.addon_id,
        "version": addon.version,
        "icon": addon.icon,
        "declared_id_prefixes": list(addon.declared_id_prefixes),
        "enabled": addon.enabled,
        "order_position": addon.order_position,
    }


def _deserialize_addon(d: dict[str, Any]) -> AddonEndpoint:
    return AddonEndpoint(
        base_url=d["base_url"],
        name=d.get("name", ""),
        declared_id_prefixes=tuple(d.get("declared_id_prefixes", ())),
        enabled=d.get("enabled", True),
        order_position=d.get("order_position", 0),
        manifest_url=d.get("manifest_url", ""),
        addon_id=d.get("addon_id", ""),
        version=d.get("version", ""),
        icon=d.get("icon"),
    )


class CacheAddonRepository:
    """Stores every registered addon as one JSON document, without expiry."""

    def __init__(self, cache: CachePort) -> None:
        self.cache = cache
        self._write_lock = asyncio.Lock()

    async def _load(self) -> list[AddonEndpoint]:
        data = await self.cache.get(_REGISTRY_KEY)
        if data is None:
            return []
        try:
            return [_deserialize_addon(d) for d in json.loads(data)]
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            log.error("addon_registry_deserialize_error", error=str(e))
            return []

    async def list_all(self) -> list[AddonEndpoint]:
        addons = await self._load()
        return sorted(addons, key=lambda a: a.order_position)

    async def list_enabled(self) -> list[AddonEndpoint]:
        return [a for a in await self.list_all() if a.enabled]

    async def get_by_manifest_url(self, manifest_url: str) -> AddonEndpoint | None:
        for addon in await self._load():
            if addon.manifest_url == manifest_url:
                return addon
        return None

    async def save(self, addon: AddonEndpoint) -> None:
        """Insert or replace the addon with the same manifest URL."""
        async with self._write_lock:
            addons = [a for a in await self._load() if a.manifest_url != addon.manifest_url]
            addons.append(addon)
            payload = json.dumps([_serialize_addon(a) for a in addons])
            await self.cache.set(_REGISTRY_KEY, payload, ttl=0)
        log.debug(
            "addon_saved",
            manifest_url=addon.manifest_url,
            order_position=addon.order_position,
        )
