"""Build the ordered candidate ids one addon is asked for."""

from __future__ import annotations

from collections.abc import Iterable

from arflix.domain.entities.streams import ContentKind, ExternalIdentifierBundle

_PREFIX_ALIASES: dict[str, str] = {"tt": "imdb"}

# Trial order against a single addon.
MOVIE_PREFIX_ORDER: tuple[str, ...] = ("imdb", "tmdb", "tvdb")
EPISODE_PREFIX_ORDER: tuple[str, ...] = ("imdb", "tmdb", "tvdb", "anilist")


def normalize_prefix(tag: str) -> str:
    """``"TT"`` -> ``"imdb"``, ``"tmdb:"`` -> ``"tmdb"``."""
    cleaned = tag.strip().lower().rstrip(":")
    return _PREFIX_ALIASES.get(cleaned, cleaned)


def _movie_ids(bundle: ExternalIdentifierBundle) -> dict[str, str | None]:
    return {
        "imdb": bundle.imdb_id,
        "tmdb": f"tmdb:{bundle.tmdb_movie_id}" if bundle.tmdb_movie_id else None,
        "tvdb": f"tvdb:{bundle.tvdb_id}" if bundle.tvdb_id else None,
    }


def _episode_ids(bundle: ExternalIdentifierBundle) -> dict[str, str | None]:
    return {
        "imdb": bundle.imdb_id,
        "tmdb": f"tmdb:{bundle.tmdb_tv_id}" if bundle.tmdb_tv_id else None,
        "tvdb": f"tvdb:{bundle.tvdb_id}" if bundle.tvdb_id else None,
        "anilist": f"anilist:{bundle.anilist_id}" if bundle.anilist_id else None,
    }


def build_candidates(
    bundle: ExternalIdentifierBundle,
    content_kind: ContentKind,
    season: int | None,
    episode: int | None,
    allowed_prefixes: Iterable[str],
) -> list[str]:
    """Return candidates in trial order; empty means skip the addon.

    Series and anime need both ``season`` and ``episode``; every
    candidate then carries a ``:S:E`` suffix.
    """
    allowed = {normalize_prefix(p) for p in allowed_prefixes}

    if content_kind == "movie":
        ids = _movie_ids(bundle)
        return [
            ids[prefix]
            for prefix in MOVIE_PREFIX_ORDER
            if prefix in allowed and ids[prefix]
        ]

    if season is None or episode is None:
        return []

    ids = _episode_ids(bundle)
    return [
        f"{ids[prefix]}:{season}:{episode}"
        for prefix in EPISODE_PREFIX_ORDER
        if prefix in allowed and ids[prefix]
    ]
