"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

import functools
from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from arflix.application.use_cases import (
    AddonRegistrationUseCase,
    StreamAggregationUseCase,
)
from arflix.infrastructure.cache.cache_factory import create_cache
from arflix.infrastructure.identifiers.resolver import IdentifierResolver
from arflix.infrastructure.persistence.addon_cache import CacheAddonRepository
from arflix.infrastructure.stremio.capabilities import detect_prefixes
from arflix.infrastructure.stremio.manifest_client import HttpxManifestClient
from arflix.infrastructure.stremio.stream_classifier import (
    RelayPolicy,
    classify_streams,
)
from arflix.infrastructure.stremio.stream_fetcher import AddonStreamFetcher
from arflix.infrastructure.stremio.stream_selector import StreamSelector
from arflix.infrastructure.tmdb.client import HttpxTmdbClient
from arflix.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize and clean up all resources.

    Order matters:
        1. Cache (identifier cache and addon registry live in it)
        2. HTTP client (shared by TMDB, manifest probing, stream fetching)
        3. Ports and adapters
        4. Use cases
    """
    state = cast(AppState, app.state)
    config = state.config
    streams_cfg = config.streams

    # 1) Cache
    cache = create_cache(
        backend=config.cache.backend,
        directory=str(config.cache.directory),
        redis_url=config.cache.redis_url,
        ttl_seconds=config.cache.ttl_seconds,
    )
    await cache.__aenter__()
    state.cache = cache
    log.info("cache_initialized", backend=config.cache.backend)

    # 2) HTTP client
    state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_timeout_seconds),
        headers={"User-Agent": config.http_user_agent},
    )
    log.info("http_client_initialized", timeout=config.http_timeout_seconds)

    # 3) TMDB client (optional - tmdb: ids then resolve to the TMDB id alone)
    if config.tmdb_api_key:
        state.tmdb_client = HttpxTmdbClient(
            api_key=config.tmdb_api_key,
            http_client=state.http_client,
            base_url=config.tmdb_base_url,
        )
        log.info("tmdb_client_initialized")
    else:
        state.tmdb_client = None
        log.warning("tmdb_client_disabled", reason="no API key configured")

    # 4) Addon registry
    state.addon_repo = CacheAddonRepository(cache=state.cache)

    # 5) Use cases
    state.streams_uc = StreamAggregationUseCase(
        addons=state.addon_repo,
        resolver=IdentifierResolver(
            tmdb=state.tmdb_client,
            cache=state.cache,
            ttl_seconds=streams_cfg.identifier_cache_ttl_seconds,
        ),
        fetcher=AddonStreamFetcher(
            http_client=state.http_client,
            timeout_seconds=streams_cfg.addon_timeout_seconds,
            max_concurrent=streams_cfg.max_concurrent_addons,
        ),
        classify=functools.partial(
            classify_streams,
            relay=RelayPolicy(
                base_url=streams_cfg.relay_base_url,
                host_markers=tuple(streams_cfg.relay_host_markers),
            ),
        ),
        selector=StreamSelector(streams_cfg.preferred_direct_markers),
    )
    state.addon_registration_uc = AddonRegistrationUseCase(
        addons=state.addon_repo,
        manifests=HttpxManifestClient(
            http_client=state.http_client,
            timeout_seconds=streams_cfg.manifest_timeout_seconds,
            max_redirects=streams_cfg.max_manifest_redirects,
        ),
        detect_prefixes=detect_prefixes,
    )

    log.info(
        "app_startup_complete",
        relay_enabled=bool(streams_cfg.relay_base_url),
        max_concurrent_addons=streams_cfg.max_concurrent_addons,
    )

    try:
        yield
    finally:
        await state.http_client.aclose()
        log.info("http_client_closed")

        await state.cache.aclose()
        log.info("cache_closed")

        log.info("app_shutdown_complete")
