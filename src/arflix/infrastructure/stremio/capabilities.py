"""Derive an addon's supported id prefixes from its manifest.

Best-effort heuristic over free-text fields. The first rule that yields
anything wins:

1. ``idPrefixes`` hint (top level or ``behaviorHints``), verbatim
2. markers in catalog ids
3. markers in the manifest's own id
4. ``DEFAULT_ID_PREFIXES``
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from arflix.domain.entities.addons import DEFAULT_ID_PREFIXES

# (prefix, substrings) in output order.
_CATALOG_MARKERS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("imdb", ("imdb", "tt")),
    ("tmdb", ("tmdb",)),
    ("tvdb", ("tvdb",)),
    ("anilist", ("anilist",)),
    ("kitsu", ("kitsu",)),
)
_MANIFEST_ID_MARKERS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("imdb", ("imdb",)),
    *_CATALOG_MARKERS[1:],
)


def _hinted_prefixes(manifest: Mapping[str, Any]) -> list[str]:
    hints = manifest.get("behaviorHints")
    for source in (manifest, hints if isinstance(hints, Mapping) else {}):
        value = source.get("idPrefixes")
        if isinstance(value, list):
            prefixes = [p for p in value if isinstance(p, str) and p]
            if prefixes:
                return prefixes
    return []


def _match_markers(
    texts: list[str], markers: tuple[tuple[str, tuple[str, ...]], ...]
) -> list[str]:
    found: list[str] = []
    for prefix, needles in markers:
        if any(needle in text for text in texts for needle in needles):
            found.append(prefix)
    return found


def detect_prefixes(manifest: Mapping[str, Any]) -> tuple[str, ...]:
    """Return the prefixes an addon is assumed to answer for."""
    hinted = _hinted_prefixes(manifest)
    if hinted:
        return tuple(hinted)

    catalogs = manifest.get("catalogs")
    catalog_ids = [
        c["id"].lower()
        for c in (catalogs if isinstance(catalogs, list) else [])
        if isinstance(c, Mapping) and isinstance(c.get("id"), str)
    ]
    from_catalogs = _match_markers(catalog_ids, _CATALOG_MARKERS)
    if from_catalogs:
        return tuple(from_catalogs)

    manifest_id = manifest.get("id")
    if isinstance(manifest_id, str):
        from_id = _match_markers([manifest_id.lower()], _MANIFEST_ID_MARKERS)
        if from_id:
            return tuple(from_id)

    return DEFAULT_ID_PREFIXES
