"""Port for addon registration records."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from arflix.domain.entities.addons import AddonEndpoint


@runtime_checkable
class AddonRepositoryPort(Protocol):
    """Async interface for storing registered addons.

    ``list_all`` and ``list_enabled`` return addons sorted by
    ``order_position`` (ascending).
    """

    async def list_all(self) -> list[AddonEndpoint]: ...

    async def list_enabled(self) -> list[AddonEndpoint]: ...

    async def get_by_manifest_url(self, manifest_url: str) -> AddonEndpoint | None: ...

    async def save(self, addon: AddonEndpoint) -> None: ...
