"""Port for TMDB identifier lookups."""

from __future__ import annotations

from typing import Any, Literal, Protocol, runtime_checkable

TmdbMediaType = Literal["movie", "tv"]


@runtime_checkable
class TmdbClientPort(Protocol):
    """Async interface for TMDB cross-reference lookups."""

    async def get_external_ids(
        self, tmdb_id: int, media_type: TmdbMediaType
    ) -> dict[str, Any] | None:
        """Fetch ``/{movie|tv}/{id}/external_ids``.

        Returns the JSON object, or None when the lookup failed.
        """
        ...
