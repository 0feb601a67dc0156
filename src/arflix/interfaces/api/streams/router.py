"""Stream aggregation endpoint."""

from __future__ import annotations

from typing import cast

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from arflix.domain.entities.streams import CONTENT_KINDS, ContentKind, StreamsRequest
from arflix.interfaces.api.streams.presenter import present_streams_response
from arflix.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/streams", tags=["streams"])

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "*",
}


@router.get("/{content_kind}/{native_id}")
async def get_streams(
    request: Request,
    content_kind: str,
    native_id: str,
    season: int | None = Query(default=None, ge=0),
    episode: int | None = Query(default=None, ge=0),
) -> JSONResponse:
    """All playable streams for one movie or episode, plus the best pick."""
    if content_kind not in CONTENT_KINDS:
        return JSONResponse(
            status_code=400,
            content={
                "error": f"Unknown content kind: {content_kind}",
                "items": [],
                "best": None,
            },
            headers=_CORS_HEADERS,
        )

    state = cast(AppState, request.app.state)
    streams_request = StreamsRequest(
        native_id=native_id,
        content_kind=cast(ContentKind, content_kind),
        season=season,
        episode=episode,
    )
    log.info(
        "streams_request",
        native_id=native_id,
        content_kind=content_kind,
        season=season,
        episode=episode,
    )

    try:
        response = await state.streams_uc.execute(streams_request)
    except Exception:
        log.error("streams_request_failed", native_id=native_id, exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "items": [], "best": None},
            headers=_CORS_HEADERS,
        )

    return JSONResponse(
        content=present_streams_response(response), headers=_CORS_HEADERS
    )
