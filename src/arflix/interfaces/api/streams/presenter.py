"""JSON shape of StreamsResponse (camelCase, unset fields omitted)."""

from __future__ import annotations

from typing import Any

from arflix.domain.entities.streams import (
    CaptionTrack,
    NormalizedStream,
    StreamsResponse,
)


def _present_caption(track: CaptionTrack) -> dict[str, str]:
    out = {"lang": track.lang, "url": track.url}
    if track.mime:
        out["mime"] = track.mime
    return out


def present_stream(stream: NormalizedStream) -> dict[str, Any]:
    data: dict[str, Any] = {
        "url": stream.url,
        "kind": stream.transport_kind,
        "quality": stream.resolution_tier,
        "codec": stream.codec,
        "hdr": stream.hdr_tier,
        "host": stream.host_label,
        "label": stream.display_label,
        "sourceName": stream.source_addon_name,
        "captions": [_present_caption(c) for c in stream.caption_tracks],
        "infoHash": stream.info_hash,
        "fileIdx": stream.file_idx,
        "fileSize": stream.file_size,
        "audioCodec": stream.audio_codec,
        "seeds": stream.seeds,
    }
    return {k: v for k, v in data.items() if v is not None}


def present_streams_response(response: StreamsResponse) -> dict[str, Any]:
    """``best`` is rendered from the same object that sits in ``items``."""
    body: dict[str, Any] = {
        "items": [present_stream(s) for s in response.items],
        "best": present_stream(response.best) if response.best is not None else None,
    }
    if response.message is not None:
        body["message"] = response.message
    return body
