"""Port for fetching and validating addon manifests."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ManifestProbePort(Protocol):
    """Async interface for locating an addon's manifest."""

    async def probe(self, url: str) -> tuple[str, dict[str, Any]]:
        """Return ``(canonical_manifest_url, manifest)``.

        Raises:
            AddonRegistrationError: (or a subclass) when no probe succeeded.
        """
        ...
