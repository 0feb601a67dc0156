"""TMDB API client - async httpx implementation of TmdbClientPort."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from arflix.domain.ports.tmdb import TmdbMediaType

log = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://api.themoviedb.org/3"


class HttpxTmdbClient:
    """Async TMDB client for cross-reference lookups.

    Caching happens one level up (identifier bundles), so this client
    issues exactly one request per call.
    """

    def __init__(
        self,
        *,
        api_key: str,
        http_client: httpx.AsyncClient,
        base_url: str = DEFAULT_BASE_URL,
    ) -> None:
        self._api_key = api_key
        self._http = http_client
        self._base_url = base_url.rstrip("/")

    async def _get(self, path: str) -> dict[str, Any] | None:
        """GET with error handling. Returns the JSON object or None."""
        url = f"{self._base_url}{path}"
        try:
            resp = await self._http.get(url, params={"api_key": self._api_key})
            if resp.status_code == 401:
                log.error("tmdb_api_key_invalid", status=401)
                return None
            if resp.status_code == 404:
                log.debug("tmdb_resource_not_found", path=path)
                return None
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError:
            log.warning("tmdb_http_error", path=path, exc_info=True)
            return None
        except httpx.HTTPError:
            log.warning("tmdb_network_error", path=path, exc_info=True)
            return None
        except ValueError:
            log.warning("tmdb_invalid_json", path=path)
            return None

        if not isinstance(data, dict):
            log.warning("tmdb_unexpected_payload", path=path)
            return None
        return data

    async def get_external_ids(
        self, tmdb_id: int, media_type: TmdbMediaType
    ) -> dict[str, Any] | None:
        """Fetch imdb/tvdb ids for a TMDB movie or TV show."""
        return await self._get(f"/{media_type}/{tmdb_id}/external_ids")
