"""End-to-end flow through the real app: register an addon, then fetch streams.

Only the addon's HTTP endpoints are mocked (respx); cache, repository,
resolver, fetcher, classifier and selector are the real ones.
"""

from __future__ import annotations

import httpx
import pytest
import respx
from fastapi.testclient import TestClient

from arflix.infrastructure.config.schema import AppConfig, CacheConfig, StreamsConfig
from arflix.interfaces.app import create_app

pytestmark = pytest.mark.integration

_ADDON = "https://addon.example.com/cfg"
_MANIFEST = {
    "id": "com.example.addon",
    "name": "Example",
    "version": "1.0.0",
    "resources": ["stream"],
    "types": ["movie", "series"],
    "idPrefixes": ["tt"],
}


def _app(relay_base_url: str = "") -> TestClient:
    config = AppConfig(
        cache=CacheConfig(backend="memory"),
        streams=StreamsConfig(relay_base_url=relay_base_url),
    )
    return TestClient(create_app(config))


class TestStreamFlow:
    def test_register_then_stream(self) -> None:
        with respx.mock:
            respx.get(f"{_ADDON}/manifest.json").respond(json=_MANIFEST)
            streams = respx.get(f"{_ADDON}/stream/movie/tt0137523.json").respond(
                json={
                    "streams": [
                        {
                            "name": "Example\n720p",
                            "title": "Movie.720p.x264",
                            "url": "https://cdn.example.com/movie.mp4",
                        },
                        {
                            "name": "Example\n1080p HEVC HDR10",
                            "title": "Movie.1080p.HEVC.HDR10",
                            "url": "https://cdn.example.com/hls/master.m3u8",
                        },
                        {"name": "broken", "streamData": {"type": "error"}},
                    ]
                }
            )

            with _app() as client:
                created = client.post("/api/v1/addons", json={"url": _ADDON})
                again = client.post("/api/v1/addons", json={"url": _ADDON})
                resp = client.get("/api/v1/streams/movie/tt0137523")

        assert created.status_code == 201
        assert created.json()["idPrefixes"] == ["tt"]
        assert again.status_code == 200
        assert streams.call_count == 1

        body = resp.json()
        assert resp.status_code == 200
        assert [i["kind"] for i in body["items"]] == ["mp4", "hls"]
        assert body["best"] == body["items"][1]
        assert body["best"]["label"] == "1080p H265 HDR10 (cdn.example.com)"
        assert "message" not in body

    def test_unreachable_addon(self) -> None:
        with respx.mock:
            respx.get(f"{_ADDON}/manifest.json").respond(json=_MANIFEST)
            respx.get(url__startswith=f"{_ADDON}/stream/").mock(
                side_effect=httpx.ConnectError("down")
            )

            with _app() as client:
                client.post("/api/v1/addons", json={"url": _ADDON})
                resp = client.get("/api/v1/streams/movie/tt0137523")

        assert resp.json()["message"] == (
            "Could not reach your add-ons. Check your connection and try again."
        )

    def test_relay_rewrites_mkv(self) -> None:
        with respx.mock:
            respx.get(f"{_ADDON}/manifest.json").respond(json=_MANIFEST)
            respx.get(f"{_ADDON}/stream/movie/tt0137523.json").respond(
                json={"streams": [{"title": "2160p", "url": "https://cdn/m.mkv"}]}
            )

            with _app(relay_base_url="https://relay.example.com/proxy") as client:
                client.post("/api/v1/addons", json={"url": _ADDON})
                resp = client.get("/api/v1/streams/movie/tt0137523")

        best = resp.json()["best"]
        assert best["url"] == (
            "https://relay.example.com/proxy?url=https%3A%2F%2Fcdn%2Fm.mkv"
        )
        assert best["quality"] == 2160
