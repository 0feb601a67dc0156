"""Domain entities for registered Stremio addons."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from arflix.domain.entities.streams import TaggedRawStream

# Default declared prefixes when a manifest gives no usable hints.
DEFAULT_ID_PREFIXES: tuple[str, ...] = ("imdb", "tmdb", "tvdb")

FetchStatus = Literal["streams", "empty", "failed", "skipped"]


@dataclass(frozen=True)
class AddonEndpoint:
    """A registered addon as stored by the addon repository.

    ``declared_id_prefixes`` is derived once from the manifest at
    registration time and reused for every stream request.
    """

    base_url: str
    name: str
    declared_id_prefixes: tuple[str, ...] = DEFAULT_ID_PREFIXES
    enabled: bool = True
    order_position: int = 0
    manifest_url: str = ""
    addon_id: str = ""
    version: str = ""
    icon: str | None = None


@dataclass(frozen=True)
class AddonFetchResult:
    """Outcome of querying one addon for one catalog item.

    ``attempts`` counts issued HTTP requests, ``failures`` the ones that
    errored (network, timeout, status, malformed body).
    """

    addon_name: str
    status: FetchStatus
    streams: tuple[TaggedRawStream, ...] = field(default_factory=tuple)
    attempts: int = 0
    failures: int = 0
