"""Resolve a catalog-native id into an ExternalIdentifierBundle."""

from __future__ import annotations

import re
from typing import Any

import structlog

from arflix.domain.entities.streams import ContentKind, ExternalIdentifierBundle
from arflix.domain.exceptions import UnresolvableIdentifierError
from arflix.domain.ports.cache import CachePort
from arflix.domain.ports.tmdb import TmdbClientPort, TmdbMediaType

log = structlog.get_logger(__name__)

_IMDB_RE = re.compile(r"^tt\d+$")
_TMDB_RE = re.compile(r"^tmdb:(?:(movie|tv):)?(\d+)$")
_ANILIST_RE = re.compile(r"^anilist:(\d+)$")


def _cache_key(native_id: str, content_kind: ContentKind) -> str:
    return f"ids:{content_kind}:{native_id}"


class IdentifierResolver:
    """Cross-references catalog ids via TMDB, with a TTL cache.

    Supported native ids:
      - ``tt1234567``: IMDb id, no lookup
      - ``tmdb:N`` / ``tmdb:movie:N`` / ``tmdb:tv:N``: one TMDB
        ``external_ids`` call; an explicit segment beats the content kind
      - ``anilist:N``: AniList id, no lookup

    ``tmdb`` may be None (no API key configured); TMDB ids then resolve
    to the TMDB id alone.
    """

    def __init__(
        self,
        *,
        tmdb: TmdbClientPort | None,
        cache: CachePort,
        ttl_seconds: int = 3600,
    ) -> None:
        self._tmdb = tmdb
        self._cache = cache
        self._ttl = ttl_seconds

    async def resolve(
        self, native_id: str, content_kind: ContentKind
    ) -> ExternalIdentifierBundle:
        """Return the bundle for ``native_id``.

        Raises:
            UnresolvableIdentifierError: When no identifier could be derived.
        """
        native_id = native_id.strip()
        key = _cache_key(native_id, content_kind)

        cached = await self._cache.get(key)
        if isinstance(cached, dict):
            log.debug("identifier_cache_hit", native_id=native_id)
            return ExternalIdentifierBundle(**cached)

        bundle, complete = await self._resolve_uncached(native_id, content_kind)
        if bundle.is_empty:
            log.warning("identifier_unresolvable", native_id=native_id)
            raise UnresolvableIdentifierError(native_id)

        if complete:
            await self._cache.set(key, bundle.to_dict(), ttl=self._ttl)
        log.info(
            "identifier_resolved",
            native_id=native_id,
            content_kind=content_kind,
            cached=complete,
            **bundle.to_dict(),
        )
        return bundle

    async def _resolve_uncached(
        self, native_id: str, content_kind: ContentKind
    ) -> tuple[ExternalIdentifierBundle, bool]:
        """Returns (bundle, complete). ``complete`` is False after a failed lookup."""
        if _IMDB_RE.match(native_id):
            return ExternalIdentifierBundle(imdb_id=native_id), True

        if m := _ANILIST_RE.match(native_id):
            return ExternalIdentifierBundle(anilist_id=int(m.group(1))), True

        if m := _TMDB_RE.match(native_id):
            segment, raw_id = m.groups()
            media_type: TmdbMediaType = segment or (
                "movie" if content_kind == "movie" else "tv"
            )
            return await self._resolve_tmdb(int(raw_id), media_type)

        return ExternalIdentifierBundle(), True

    async def _resolve_tmdb(
        self, tmdb_id: int, media_type: TmdbMediaType
    ) -> tuple[ExternalIdentifierBundle, bool]:
        fields: dict[str, Any] = (
            {"tmdb_movie_id": tmdb_id}
            if media_type == "movie"
            else {"tmdb_tv_id": tmdb_id}
        )
        if self._tmdb is None:
            log.debug("tmdb_lookup_disabled", tmdb_id=tmdb_id)
            return ExternalIdentifierBundle(**fields), True

        data = await self._tmdb.get_external_ids(tmdb_id, media_type)
        if data is None:
            log.warning(
                "tmdb_external_ids_unavailable", tmdb_id=tmdb_id, media_type=media_type
            )
            return ExternalIdentifierBundle(**fields), False

        imdb_id = data.get("imdb_id")
        if isinstance(imdb_id, str) and imdb_id:
            fields["imdb_id"] = imdb_id
        tvdb_id = data.get("tvdb_id")
        if isinstance(tvdb_id, int) and not isinstance(tvdb_id, bool) and tvdb_id > 0:
            fields["tvdb_id"] = tvdb_id
        return ExternalIdentifierBundle(**fields), True
