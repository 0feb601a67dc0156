"""Deterministic best-stream selection.

Ranking (first differing criterion decides):
  1. higher resolution tier (unknown counts as 0)
  2. adaptive (hls/dash) over progressive
  3. hls over dash
  4. earlier position in the input

Streams whose original URL carries a direct-serving marker are ranked
on their own first, if there are any.
"""

from __future__ import annotations

from collections.abc import Sequence

from arflix.domain.entities.streams import NormalizedStream

DEFAULT_DIRECT_MARKERS: tuple[str, ...] = ("mediafusion", "comet", "/playback/")
_PLAYABLE_KINDS = frozenset({"hls", "dash", "mp4"})


def rank_key(stream: NormalizedStream) -> tuple[int, bool, bool]:
    """Smaller sorts first."""
    return (
        -(stream.resolution_tier or 0),
        not stream.is_adaptive,
        stream.transport_kind != "hls",
    )


class StreamSelector:
    """Picks one best stream; never reorders or copies its input."""

    def __init__(self, direct_markers: Sequence[str] = DEFAULT_DIRECT_MARKERS) -> None:
        self._direct_markers = tuple(direct_markers)

    def is_direct(self, stream: NormalizedStream) -> bool:
        return stream.transport_kind in _PLAYABLE_KINDS and any(
            marker in stream.original_url for marker in self._direct_markers
        )

    def select_best(
        self, items: Sequence[NormalizedStream]
    ) -> NormalizedStream | None:
        """Return the best element of ``items`` itself, or None if empty."""
        if not items:
            return None
        direct = [s for s in items if self.is_direct(s)]
        # min() keeps the first of equal keys -> input order breaks ties
        return min(direct or items, key=rank_key)
