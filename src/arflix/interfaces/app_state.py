"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from arflix.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from arflix.application.use_cases import (
        AddonRegistrationUseCase,
        StreamAggregationUseCase,
    )
    from arflix.domain.ports import AddonRepositoryPort, CachePort, TmdbClientPort


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    cache: CachePort
    http_client: httpx.AsyncClient

    # Domain ports
    addon_repo: AddonRepositoryPort
    tmdb_client: TmdbClientPort | None

    # Use cases
    streams_uc: StreamAggregationUseCase
    addon_registration_uc: AddonRegistrationUseCase
