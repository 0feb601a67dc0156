"""Shared test fixtures for the Arflix test suite."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock

import pytest

from arflix.domain.entities.addons import AddonEndpoint
from arflix.domain.entities.streams import NormalizedStream
from arflix.infrastructure.cache.memory_adapter import MemoryCacheAdapter

# ---------------------------------------------------------------------------
# Clock / cache fixtures
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def memory_cache(fake_clock: FakeClock) -> MemoryCacheAdapter:
    """In-memory CachePort driven by ``fake_clock``."""
    return MemoryCacheAdapter(ttl_seconds=3600, clock=fake_clock)


@pytest.fixture()
def mock_cache() -> AsyncMock:
    """Mock CachePort (always a miss)."""
    cache = AsyncMock()
    cache.get = AsyncMock(return_value=None)
    cache.set = AsyncMock()
    return cache


# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def addon() -> AddonEndpoint:
    """Addon accepting the default prefixes."""
    return AddonEndpoint(
        base_url="https://addon.example.com",
        name="Example",
        manifest_url="https://addon.example.com/manifest.json",
        addon_id="com.example.addon",
        version="1.0.0",
        order_position=1,
    )


@pytest.fixture()
def make_stream() -> Callable[..., NormalizedStream]:
    """Factory for NormalizedStream with sensible defaults."""

    def _make(**overrides: Any) -> NormalizedStream:
        url = overrides.pop("url", "https://cdn.example.com/video.m3u8")
        fields: dict[str, Any] = {
            "url": url,
            "original_url": overrides.pop("original_url", url),
            "transport_kind": "hls",
            "source_addon_name": "Example",
        }
        fields.update(overrides)
        return NormalizedStream(**fields)

    return _make
