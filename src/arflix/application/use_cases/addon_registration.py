"""Addon registration use case: validate a URL and upsert the addon."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import structlog

from arflix.domain.entities.addons import AddonEndpoint
from arflix.domain.exceptions import AddonConfigurePageError, AddonRegistrationError
from arflix.domain.ports.addon_repository import AddonRepositoryPort
from arflix.domain.ports.manifest import ManifestProbePort

log = structlog.get_logger(__name__)

PrefixDetector = Callable[[Mapping[str, Any]], tuple[str, ...]]


@dataclass(frozen=True)
class RegistrationResult:
    addon: AddonEndpoint
    created: bool


def normalize_addon_url(url: str) -> str:
    url = url.strip()
    if url.startswith("stremio://"):
        url = "https://" + url.removeprefix("stremio://")
    return url


def is_configure_url(url: str) -> bool:
    return "/configure" in url


def base_url_for(manifest_url: str) -> str:
    """Strip query and fragment, then the trailing manifest path."""
    scheme, netloc, path, _, _ = urlsplit(manifest_url)
    return urlunsplit((scheme, netloc, path, "", "")).removesuffix("/manifest.json")


class AddonRegistrationUseCase:
    """Registers or refreshes an addon from a user-supplied URL.

    Capabilities are re-detected on every call, so re-registering an
    addon picks up manifest changes. Existing addons keep their enabled
    flag and position; new ones are appended after the last one.
    """

    def __init__(
        self,
        *,
        addons: AddonRepositoryPort,
        manifests: ManifestProbePort,
        detect_prefixes: PrefixDetector,
    ) -> None:
        self._addons = addons
        self._manifests = manifests
        self._detect_prefixes = detect_prefixes

    async def execute(self, url: str) -> RegistrationResult:
        """Raises AddonRegistrationError (or a subclass) for unusable URLs."""
        normalized = normalize_addon_url(url)
        if not normalized:
            raise AddonRegistrationError("URL is required")
        if is_configure_url(normalized):
            raise AddonConfigurePageError()

        manifest_url, manifest = await self._manifests.probe(normalized)
        logo = manifest.get("logo")
        fields = {
            "base_url": base_url_for(manifest_url),
            "name": manifest["name"],
            "declared_id_prefixes": self._detect_prefixes(manifest),
            "manifest_url": manifest_url,
            "addon_id": manifest["id"],
            "version": manifest["version"],
            "icon": logo if isinstance(logo, str) and logo else None,
        }

        existing = await self._addons.get_by_manifest_url(manifest_url)
        if existing is not None:
            addon = replace(existing, **fields)
            created = False
        else:
            positions = [a.order_position for a in await self._addons.list_all()]
            addon = AddonEndpoint(order_position=max(positions, default=0) + 1, **fields)
            created = True

        await self._addons.save(addon)
        log.info(
            "addon_registered",
            manifest_url=manifest_url,
            addon_id=addon.addon_id,
            created=created,
            prefixes=list(addon.declared_id_prefixes),
        )
        return RegistrationResult(addon=addon, created=created)

    async def set_enabled(self, url: str, enabled: bool) -> AddonEndpoint | None:
        """Flip the enabled flag; None when no addon has this manifest URL."""
        manifest_url = normalize_addon_url(url)
        existing = await self._addons.get_by_manifest_url(manifest_url)
        if existing is None:
            return None
        addon = replace(existing, enabled=enabled)
        await self._addons.save(addon)
        log.info("addon_toggled", manifest_url=manifest_url, enabled=enabled)
        return addon
