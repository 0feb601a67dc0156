"""Locate and validate a Stremio addon manifest over HTTP."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal
from urllib.parse import urljoin

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from arflix.domain.exceptions import (
    AddonHttpStatusError,
    AddonNotJsonError,
    AddonRegistrationError,
    AddonUnreachableError,
    InvalidManifestError,
)

log = structlog.get_logger(__name__)

ProbeFailureKind = Literal[
    "unreachable", "not_found", "forbidden", "http_status", "not_json", "invalid"
]


class StremioManifest(BaseModel):
    """Minimum structure an addon manifest must have."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    version: str = Field(min_length=1)
    resources: list[Any]
    types: list[Any]
    logo: str | None = None


@dataclass(frozen=True)
class _ProbeFailure:
    url: str
    kind: ProbeFailureKind
    detail: str


class _ProbeError(Exception):
    def __init__(self, failure: _ProbeFailure) -> None:
        super().__init__(failure.detail)
        self.failure = failure


def probe_urls(url: str) -> list[str]:
    """Manifest URLs to try, in order."""
    if url.endswith(".json") or "manifest.json" in url or "?" in url:
        return [url]
    return [f"{url.rstrip('/')}/manifest.json", url]


def _error_for_failures(failures: list[_ProbeFailure]) -> AddonRegistrationError:
    """Map collected probe failures to the most helpful error."""
    kinds = {f.kind for f in failures}
    if "unreachable" in kinds:
        return AddonUnreachableError()
    if "not_found" in kinds:
        return AddonHttpStatusError(404)
    if "forbidden" in kinds:
        return AddonHttpStatusError(403)
    if "not_json" in kinds:
        return AddonNotJsonError()
    if "invalid" in kinds:
        return InvalidManifestError()
    details = "; ".join(f"{f.detail} at {f.url}" for f in failures)
    return AddonRegistrationError(f"Failed to validate add-on: {details}")


class HttpxManifestClient:
    """Probes manifest URLs, following redirects by hand.

    Args:
        http_client: Shared client (lifespan-owned).
        timeout_seconds: Per-request timeout.
        max_redirects: Redirect hops followed per probe.
    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        timeout_seconds: float = 10.0,
        max_redirects: int = 5,
    ) -> None:
        self._http = http_client
        self._timeout = timeout_seconds
        self._max_redirects = max_redirects

    async def probe(self, url: str) -> tuple[str, dict[str, Any]]:
        failures: list[_ProbeFailure] = []
        for candidate in probe_urls(url):
            try:
                manifest = await self._probe_one(candidate)
            except _ProbeError as e:
                log.info(
                    "manifest_probe_failed",
                    url=candidate,
                    kind=e.failure.kind,
                    detail=e.failure.detail,
                )
                failures.append(e.failure)
                continue
            log.info("manifest_probe_ok", url=candidate, addon_id=manifest["id"])
            return candidate, manifest

        raise _error_for_failures(failures)

    async def _probe_one(self, url: str) -> dict[str, Any]:
        resp = await self._get_following_redirects(url)

        if resp.status_code == 404:
            raise _ProbeError(_ProbeFailure(url, "not_found", "404"))
        if resp.status_code == 403:
            raise _ProbeError(_ProbeFailure(url, "forbidden", "403 Forbidden"))
        if not resp.is_success:
            raise _ProbeError(
                _ProbeFailure(url, "http_status", f"HTTP {resp.status_code}")
            )

        content_type = resp.headers.get("content-type", "")
        if "json" not in content_type:
            raise _ProbeError(
                _ProbeFailure(url, "not_json", f"Not JSON ({content_type})")
            )

        try:
            data = resp.json()
        except ValueError:
            raise _ProbeError(_ProbeFailure(url, "not_json", "Malformed JSON")) from None
        if not isinstance(data, dict):
            raise _ProbeError(_ProbeFailure(url, "invalid", "Manifest is not an object"))

        try:
            StremioManifest.model_validate(data)
        except ValidationError as e:
            detail = f"Invalid manifest structure ({e.error_count()} errors)"
            raise _ProbeError(_ProbeFailure(url, "invalid", detail)) from None
        return data

    async def _get_following_redirects(self, url: str) -> httpx.Response:
        current = url
        for _ in range(self._max_redirects + 1):
            try:
                resp = await self._http.get(
                    current,
                    timeout=self._timeout,
                    follow_redirects=False,
                    headers={"Accept": "application/json"},
                )
            except httpx.TimeoutException:
                raise _ProbeError(_ProbeFailure(url, "unreachable", "Timeout")) from None
            except httpx.HTTPError as e:
                raise _ProbeError(
                    _ProbeFailure(url, "unreachable", f"network error: {e}")
                ) from None

            location = resp.headers.get("location")
            if not resp.is_redirect or not location:
                return resp
            current = urljoin(current, location)
            log.debug("manifest_probe_redirect", url=url, location=current)

        raise _ProbeError(_ProbeFailure(url, "http_status", "Too many redirects"))
