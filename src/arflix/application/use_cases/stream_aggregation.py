"""Stream aggregation use case.

enabled addons -> identifier bundle -> per-addon candidate fetch
-> classify -> select best -> StreamsResponse.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol

import structlog

from arflix.domain.entities.addons import AddonEndpoint, AddonFetchResult
from arflix.domain.entities.streams import (
    ContentKind,
    ExternalIdentifierBundle,
    NormalizedStream,
    StreamsRequest,
    StreamsResponse,
    TaggedRawStream,
)
from arflix.domain.exceptions import UnresolvableIdentifierError
from arflix.domain.ports.addon_repository import AddonRepositoryPort

log = structlog.get_logger(__name__)

MESSAGE_NO_ADDONS = "No enabled add-ons"
MESSAGE_UNRESOLVED = "Could not resolve content IDs."
MESSAGE_NO_STREAMS = (
    "No streams found. Your add-on may not have this content, or it may "
    "require additional configuration (e.g., Real-Debrid API key)."
)
MESSAGE_UNREACHABLE = "Could not reach your add-ons. Check your connection and try again."


class _IdentifierResolver(Protocol):
    async def resolve(
        self, native_id: str, content_kind: ContentKind
    ) -> ExternalIdentifierBundle: ...


class _StreamFetcher(Protocol):
    async def fetch_all(
        self,
        addons: Sequence[AddonEndpoint],
        content_kind: ContentKind,
        bundle: ExternalIdentifierBundle,
        season: int | None = None,
        episode: int | None = None,
    ) -> list[AddonFetchResult]: ...


class _StreamSelector(Protocol):
    def select_best(
        self, items: Sequence[NormalizedStream]
    ) -> NormalizedStream | None: ...


Classifier = Callable[[Sequence[TaggedRawStream]], list[NormalizedStream]]


def _all_tried_failed(results: Sequence[AddonFetchResult]) -> bool:
    tried = [r for r in results if r.status != "skipped"]
    return bool(tried) and all(r.status == "failed" for r in tried)


class StreamAggregationUseCase:
    """Builds the StreamsResponse for one catalog item.

    Expected empty states come back as a response with ``message`` set;
    only unexpected faults propagate.
    """

    def __init__(
        self,
        *,
        addons: AddonRepositoryPort,
        resolver: _IdentifierResolver,
        fetcher: _StreamFetcher,
        classify: Classifier,
        selector: _StreamSelector,
    ) -> None:
        self._addons = addons
        self._resolver = resolver
        self._fetcher = fetcher
        self._classify = classify
        self._selector = selector

    async def execute(self, request: StreamsRequest) -> StreamsResponse:
        addons = await self._addons.list_enabled()
        if not addons:
            log.info("streams_no_enabled_addons", native_id=request.native_id)
            return StreamsResponse(message=MESSAGE_NO_ADDONS)

        try:
            bundle = await self._resolver.resolve(
                request.native_id, request.content_kind
            )
        except UnresolvableIdentifierError:
            return StreamsResponse(message=MESSAGE_UNRESOLVED)

        results = await self._fetcher.fetch_all(
            addons,
            request.content_kind,
            bundle,
            season=request.season,
            episode=request.episode,
        )
        raws = [raw for result in results for raw in result.streams]
        items = self._classify(raws)

        log.info(
            "streams_aggregated",
            native_id=request.native_id,
            content_kind=request.content_kind,
            addons=len(addons),
            outcomes={r.addon_name: r.status for r in results},
            raw=len(raws),
            items=len(items),
        )

        if not items:
            if _all_tried_failed(results):
                return StreamsResponse(message=MESSAGE_UNREACHABLE)
            return StreamsResponse(message=MESSAGE_NO_STREAMS)

        return StreamsResponse(items=items, best=self._selector.select_best(items))
