"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "arflix",
    "environment": "dev",
    "http": {
        "timeout_seconds": 15.0,
        "user_agent": "Arflix/0.1.0",
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "tmdb": {
        "base_url": "https://api.themoviedb.org/3",
    },
    "cache": {
        "backend": "diskcache",
        "dir": "./.cache/arflix",
        "redis_url": "redis://localhost:6379/0",
        "ttl_seconds": 3600,
    },
    "streams": {
        "addon_timeout_seconds": 10.0,
        "manifest_timeout_seconds": 10.0,
        "max_concurrent_addons": 8,
        "max_manifest_redirects": 5,
        "identifier_cache_ttl_seconds": 3600,
        "preferred_direct_markers": ["mediafusion", "comet", "/playback/"],
        "relay_base_url": "",
        "relay_host_markers": ["real-debrid.com", "torrentio.strem.fun/resolve/"],
    },
}
