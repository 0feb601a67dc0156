"""Tests for stream and addon domain entities."""

from __future__ import annotations

import dataclasses

import pytest

from arflix.domain.entities import (
    DEFAULT_ID_PREFIXES,
    AddonEndpoint,
    ExternalIdentifierBundle,
    NormalizedStream,
    StreamsResponse,
)
from arflix.domain.exceptions import (
    AddonHttpStatusError,
    AddonRegistrationError,
    UnresolvableIdentifierError,
)


class TestExternalIdentifierBundle:
    def test_empty_bundle(self) -> None:
        assert ExternalIdentifierBundle().is_empty

    def test_any_field_makes_it_non_empty(self) -> None:
        assert not ExternalIdentifierBundle(anilist_id=21).is_empty
        assert not ExternalIdentifierBundle(imdb_id="tt0944947").is_empty

    def test_to_dict_skips_unset_fields(self) -> None:
        bundle = ExternalIdentifierBundle(imdb_id="tt0944947", tmdb_tv_id=1399)
        assert bundle.to_dict() == {"imdb_id": "tt0944947", "tmdb_tv_id": 1399}

    def test_to_dict_round_trips_through_constructor(self) -> None:
        bundle = ExternalIdentifierBundle(imdb_id="tt1", tmdb_movie_id=2, tvdb_id=3)
        assert ExternalIdentifierBundle(**bundle.to_dict()) == bundle


class TestNormalizedStream:
    def test_is_frozen(self) -> None:
        stream = NormalizedStream(url="https://a/x.m3u8", original_url="https://a/x.m3u8")
        with pytest.raises(dataclasses.FrozenInstanceError):
            stream.url = "https://b"  # type: ignore[misc]

    @pytest.mark.parametrize(
        ("kind", "adaptive"),
        [("hls", True), ("dash", True), ("mp4", False), ("unknown", False)],
    )
    def test_is_adaptive(self, kind: str, adaptive: bool) -> None:
        stream = NormalizedStream(url="u", original_url="u", transport_kind=kind)  # type: ignore[arg-type]
        assert stream.is_adaptive is adaptive

    def test_defaults(self) -> None:
        stream = NormalizedStream(url="u", original_url="u")
        assert stream.hdr_tier == "none"
        assert stream.display_label == "Stream"
        assert stream.caption_tracks == ()


class TestStreamsResponse:
    def test_defaults_are_empty(self) -> None:
        response = StreamsResponse()
        assert response.items == []
        assert response.best is None
        assert response.message is None


class TestAddonEndpoint:
    def test_default_prefixes(self) -> None:
        addon = AddonEndpoint(base_url="https://a", name="A")
        assert addon.declared_id_prefixes == DEFAULT_ID_PREFIXES == ("imdb", "tmdb", "tvdb")
        assert addon.enabled is True


class TestExceptions:
    def test_http_status_error_message(self) -> None:
        err = AddonHttpStatusError(404)
        assert err.status_code == 404
        assert "returned 404" in str(err)
        assert isinstance(err, AddonRegistrationError)

    def test_unresolvable_keeps_native_id(self) -> None:
        err = UnresolvableIdentifierError("foo:1")
        assert err.native_id == "foo:1"
