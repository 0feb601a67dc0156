"""Query addon stream endpoints.

Concurrent across addons, strictly sequential across one addon's
candidates. A candidate that yields at least one usable stream ends the
loop for that addon. Nothing is retried.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from arflix.domain.entities.addons import AddonEndpoint, AddonFetchResult
from arflix.domain.entities.streams import (
    ContentKind,
    ExternalIdentifierBundle,
    TaggedRawStream,
)
from arflix.infrastructure.stremio.candidates import build_candidates
from arflix.infrastructure.stremio.stream_classifier import is_usable

log = structlog.get_logger(__name__)


def stream_url(base_url: str, content_kind: ContentKind, candidate: str) -> str:
    """``{base}/stream/{kind}/{candidate}.json``; anime is asked for as series."""
    kind = "series" if content_kind == "anime" else content_kind
    return f"{base_url.rstrip('/')}/stream/{kind}/{quote(candidate, safe='')}.json"


class _CandidateFailed(Exception):
    """One candidate request failed (network, status, body)."""


class AddonStreamFetcher:
    """Fetches raw stream descriptors from addons via httpx.

    Args:
        http_client: Shared client (lifespan-owned).
        timeout_seconds: Per-request timeout.
        max_concurrent: Max addons queried at the same time.
    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        timeout_seconds: float = 10.0,
        max_concurrent: int = 8,
    ) -> None:
        self._http = http_client
        self._timeout = timeout_seconds
        self._max_concurrent = max_concurrent

    async def fetch_all(
        self,
        addons: Sequence[AddonEndpoint],
        content_kind: ContentKind,
        bundle: ExternalIdentifierBundle,
        season: int | None = None,
        episode: int | None = None,
    ) -> list[AddonFetchResult]:
        """Query every addon; results come back in addon order."""
        semaphore = asyncio.Semaphore(self._max_concurrent)

        async def _fetch_one(addon: AddonEndpoint) -> AddonFetchResult:
            candidates = build_candidates(
                bundle, content_kind, season, episode, addon.declared_id_prefixes
            )
            if not candidates:
                log.info(
                    "addon_skipped_no_candidates",
                    addon=addon.name,
                    prefixes=list(addon.declared_id_prefixes),
                )
                return AddonFetchResult(addon_name=addon.name, status="skipped")
            async with semaphore:
                try:
                    return await self.fetch_addon(addon, content_kind, candidates)
                except Exception:
                    log.warning("addon_fetch_crashed", addon=addon.name, exc_info=True)
                    return AddonFetchResult(addon_name=addon.name, status="failed")

        return list(await asyncio.gather(*(_fetch_one(a) for a in addons)))

    async def fetch_addon(
        self,
        addon: AddonEndpoint,
        content_kind: ContentKind,
        candidates: Sequence[str],
    ) -> AddonFetchResult:
        """Try ``candidates`` in order until one yields a usable stream."""
        attempts = 0
        failures = 0
        for candidate in candidates:
            attempts += 1
            url = stream_url(addon.base_url, content_kind, candidate)
            try:
                raw_streams = await self._get_streams(url)
            except _CandidateFailed:
                failures += 1
                continue

            usable = sum(1 for s in raw_streams if is_usable(s))
            log.info(
                "addon_candidate_answered",
                addon=addon.name,
                candidate=candidate,
                streams=len(raw_streams),
                usable=usable,
            )
            if usable:
                return AddonFetchResult(
                    addon_name=addon.name,
                    status="streams",
                    streams=tuple(
                        TaggedRawStream(addon_name=addon.name, payload=s)
                        for s in raw_streams
                        if isinstance(s, dict)
                    ),
                    attempts=attempts,
                    failures=failures,
                )

        status = "failed" if failures == attempts else "empty"
        log.info(
            "addon_no_streams",
            addon=addon.name,
            attempts=attempts,
            failures=failures,
            status=status,
        )
        return AddonFetchResult(
            addon_name=addon.name,
            status=status,
            attempts=attempts,
            failures=failures,
        )

    async def _get_streams(self, url: str) -> list[Any]:
        """GET one stream endpoint. Raises _CandidateFailed on any fault."""
        try:
            resp = await self._http.get(
                url,
                timeout=self._timeout,
                headers={"Accept": "application/json"},
            )
            resp.raise_for_status()
            data = resp.json()
        except httpx.TimeoutException:
            log.warning("addon_candidate_timeout", url=url, timeout=self._timeout)
            raise _CandidateFailed(url) from None
        except httpx.HTTPStatusError as e:
            log.warning(
                "addon_candidate_http_error", url=url, status=e.response.status_code
            )
            raise _CandidateFailed(url) from None
        except httpx.HTTPError:
            log.warning("addon_candidate_network_error", url=url, exc_info=True)
            raise _CandidateFailed(url) from None
        except ValueError:
            log.warning("addon_candidate_invalid_json", url=url)
            raise _CandidateFailed(url) from None

        if not isinstance(data, dict):
            log.warning("addon_candidate_unexpected_payload", url=url)
            raise _CandidateFailed(url)

        streams = data.get("streams")
        return streams if isinstance(streams, list) else []
