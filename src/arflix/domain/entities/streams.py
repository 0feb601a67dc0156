"""Domain entities for stream aggregation.

Pure value objects. No framework dependencies, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

ContentKind = Literal["movie", "series", "anime"]
TransportKind = Literal["hls", "dash", "mp4", "unknown"]
VideoCodec = Literal["h265", "h264", "vp9", "av1"]
HdrTier = Literal["dolby_vision", "hdr10", "none"]

CONTENT_KINDS: tuple[str, ...] = ("movie", "series", "anime")


@dataclass(frozen=True)
class ExternalIdentifierBundle:
    """Cross-referenced external ids for one content item."""

    imdb_id: str | None = None
    tmdb_movie_id: int | None = None
    tmdb_tv_id: int | None = None
    tvdb_id: int | None = None
    anilist_id: int | None = None

    @property
    def is_empty(self) -> bool:
        return not any(
            (
                self.imdb_id,
                self.tmdb_movie_id,
                self.tmdb_tv_id,
                self.tvdb_id,
                self.anilist_id,
            )
        )

    def to_dict(self) -> dict[str, Any]:
        """Only populated fields, for logging and caching."""
        data = {
            "imdb_id": self.imdb_id,
            "tmdb_movie_id": self.tmdb_movie_id,
            "tmdb_tv_id": self.tmdb_tv_id,
            "tvdb_id": self.tvdb_id,
            "anilist_id": self.anilist_id,
        }
        return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class TaggedRawStream:
    """An untrusted addon stream descriptor plus the addon it came from."""

    addon_name: str
    payload: dict[str, Any]


@dataclass(frozen=True)
class CaptionTrack:
    """External subtitle track attached to a stream."""

    lang: str
    url: str
    mime: str | None = None


@dataclass(frozen=True)
class NormalizedStream:
    """A classified, ranking-ready stream. Never mutated after creation."""

    url: str  # Final URL (may point at the video relay)
    original_url: str  # URL as returned by the addon
    transport_kind: TransportKind = "unknown"
    resolution_tier: int | None = None
    codec: VideoCodec | None = None
    hdr_tier: HdrTier = "none"
    host_label: str = "Unknown"
    display_label: str = "Stream"
    source_addon_name: str = ""
    caption_tracks: tuple[CaptionTrack, ...] = ()
    info_hash: str | None = None
    file_idx: int | None = None
    file_size: str | None = None  # e.g. "4.2 GB"
    audio_codec: str | None = None  # e.g. "Atmos", "EAC3"
    seeds: int | None = None

    @property
    def is_adaptive(self) -> bool:
        return self.transport_kind in ("hls", "dash")


@dataclass(frozen=True)
class StreamsRequest:
    """Parsed request for streams of one catalog item.

    ``native_id`` is the catalog's own id: ``tt1234567``, ``tmdb:550``,
    ``tmdb:tv:1399`` or ``anilist:21``.
    """

    native_id: str
    content_kind: ContentKind
    season: int | None = None
    episode: int | None = None


@dataclass(frozen=True)
class StreamsResponse:
    """Result of one stream aggregation.

    ``best`` is always one of the objects in ``items`` (identity, not copy).
    ``message`` is set whenever ``items`` is empty.
    """

    items: list[NormalizedStream] = field(default_factory=list)
    best: NormalizedStream | None = None
    message: str | None = None
