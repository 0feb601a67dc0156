"""Tests for IdentifierResolver (mocked TMDB, real in-memory cache)."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from arflix.domain.entities.streams import ExternalIdentifierBundle
from arflix.domain.exceptions import UnresolvableIdentifierError
from arflix.infrastructure.cache.memory_adapter import MemoryCacheAdapter
from arflix.infrastructure.identifiers.resolver import IdentifierResolver


def _tmdb(return_value: dict | None = None) -> AsyncMock:
    tmdb = AsyncMock()
    tmdb.get_external_ids = AsyncMock(return_value=return_value)
    return tmdb


class TestDirectIds:
    @pytest.mark.asyncio()
    async def test_imdb_needs_no_lookup(self, memory_cache: MemoryCacheAdapter) -> None:
        tmdb = _tmdb()
        resolver = IdentifierResolver(tmdb=tmdb, cache=memory_cache)

        bundle = await resolver.resolve("tt0137523", "movie")

        assert bundle == ExternalIdentifierBundle(imdb_id="tt0137523")
        tmdb.get_external_ids.assert_not_awaited()

    @pytest.mark.asyncio()
    async def test_anilist(self, memory_cache: MemoryCacheAdapter) -> None:
        resolver = IdentifierResolver(tmdb=_tmdb(), cache=memory_cache)
        bundle = await resolver.resolve("anilist:21", "anime")
        assert bundle == ExternalIdentifierBundle(anilist_id=21)

    @pytest.mark.asyncio()
    @pytest.mark.parametrize("native_id", ["kitsu:1", "", "tt", "tmdb:abc", "tmdb:0"])
    async def test_unresolvable(
        self, memory_cache: MemoryCacheAdapter, native_id: str
    ) -> None:
        resolver = IdentifierResolver(tmdb=_tmdb(), cache=memory_cache)
        with pytest.raises(UnresolvableIdentifierError):
            await resolver.resolve(native_id, "movie")


class TestTmdbIds:
    @pytest.mark.asyncio()
    async def test_movie_cross_reference(
        self, memory_cache: MemoryCacheAdapter
    ) -> None:
        tmdb = _tmdb({"imdb_id": "tt0137523", "tvdb_id": None})
        resolver = IdentifierResolver(tmdb=tmdb, cache=memory_cache)

        bundle = await resolver.resolve("tmdb:550", "movie")

        assert bundle == ExternalIdentifierBundle(
            imdb_id="tt0137523", tmdb_movie_id=550
        )
        tmdb.get_external_ids.assert_awaited_once_with(550, "movie")

    @pytest.mark.asyncio()
    async def test_series_uses_tv_lookup(
        self, memory_cache: MemoryCacheAdapter
    ) -> None:
        tmdb = _tmdb({"imdb_id": "tt0944947", "tvdb_id": 121361})
        resolver = IdentifierResolver(tmdb=tmdb, cache=memory_cache)

        bundle = await resolver.resolve("tmdb:1399", "series")

        assert bundle == ExternalIdentifierBundle(
            imdb_id="tt0944947", tmdb_tv_id=1399, tvdb_id=121361
        )
        tmdb.get_external_ids.assert_awaited_once_with(1399, "tv")

    @pytest.mark.asyncio()
    async def test_explicit_segment_wins(
        self, memory_cache: MemoryCacheAdapter
    ) -> None:
        tmdb = _tmdb({"imdb_id": "tt0944947"})
        resolver = IdentifierResolver(tmdb=tmdb, cache=memory_cache)

        bundle = await resolver.resolve("tmdb:tv:1399", "movie")

        assert bundle.tmdb_tv_id == 1399
        assert bundle.tmdb_movie_id is None
        tmdb.get_external_ids.assert_awaited_once_with(1399, "tv")

    @pytest.mark.asyncio()
    async def test_bad_fields_ignored(self, memory_cache: MemoryCacheAdapter) -> None:
        tmdb = _tmdb({"imdb_id": "", "tvdb_id": True})
        resolver = IdentifierResolver(tmdb=tmdb, cache=memory_cache)

        bundle = await resolver.resolve("tmdb:550", "movie")

        assert bundle == ExternalIdentifierBundle(tmdb_movie_id=550)

    @pytest.mark.asyncio()
    async def test_without_tmdb_client(self, memory_cache: MemoryCacheAdapter) -> None:
        resolver = IdentifierResolver(tmdb=None, cache=memory_cache)
        bundle = await resolver.resolve("tmdb:550", "movie")
        assert bundle == ExternalIdentifierBundle(tmdb_movie_id=550)


class TestCaching:
    @pytest.mark.asyncio()
    async def test_second_call_served_from_cache(
        self, memory_cache: MemoryCacheAdapter
    ) -> None:
        tmdb = _tmdb({"imdb_id": "tt0137523"})
        resolver = IdentifierResolver(tmdb=tmdb, cache=memory_cache, ttl_seconds=60)

        first = await resolver.resolve("tmdb:550", "movie")
        second = await resolver.resolve("tmdb:550", "movie")

        assert first == second
        assert tmdb.get_external_ids.await_count == 1

    @pytest.mark.asyncio()
    async def test_expired_entry_refetched(
        self, memory_cache: MemoryCacheAdapter, fake_clock
    ) -> None:
        tmdb = _tmdb({"imdb_id": "tt0137523"})
        resolver = IdentifierResolver(tmdb=tmdb, cache=memory_cache, ttl_seconds=60)

        await resolver.resolve("tmdb:550", "movie")
        fake_clock.advance(59)
        await resolver.resolve("tmdb:550", "movie")
        assert tmdb.get_external_ids.await_count == 1

        fake_clock.advance(2)
        await resolver.resolve("tmdb:550", "movie")
        assert tmdb.get_external_ids.await_count == 2

    @pytest.mark.asyncio()
    async def test_failed_lookup_not_cached(
        self, memory_cache: MemoryCacheAdapter
    ) -> None:
        tmdb = _tmdb(None)
        resolver = IdentifierResolver(tmdb=tmdb, cache=memory_cache)

        partial = await resolver.resolve("tmdb:550", "movie")
        assert partial == ExternalIdentifierBundle(tmdb_movie_id=550)

        tmdb.get_external_ids.return_value = {"imdb_id": "tt0137523"}
        full = await resolver.resolve("tmdb:550", "movie")

        assert full.imdb_id == "tt0137523"
        assert tmdb.get_external_ids.await_count == 2

    @pytest.mark.asyncio()
    async def test_cache_key_includes_kind(
        self, memory_cache: MemoryCacheAdapter
    ) -> None:
        tmdb = _tmdb({"imdb_id": "tt1"})
        resolver = IdentifierResolver(tmdb=tmdb, cache=memory_cache)

        await resolver.resolve("tmdb:100", "movie")
        await resolver.resolve("tmdb:100", "series")

        assert [c.args for c in tmdb.get_external_ids.await_args_list] == [
            (100, "movie"),
            (100, "tv"),
        ]

    @pytest.mark.asyncio()
    async def test_stored_as_plain_dict(self, mock_cache: AsyncMock) -> None:
        resolver = IdentifierResolver(tmdb=None, cache=mock_cache, ttl_seconds=90)

        await resolver.resolve(" tt0137523 ", "movie")

        mock_cache.get.assert_awaited_once_with("ids:movie:tt0137523")
        mock_cache.set.assert_awaited_once_with(
            "ids:movie:tt0137523", {"imdb_id": "tt0137523"}, ttl=90
        )
