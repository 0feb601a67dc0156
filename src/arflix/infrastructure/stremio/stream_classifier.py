"""Classify untrusted addon stream descriptors into NormalizedStreams.

Pure transformation logic. No I/O, no framework dependencies. Every
detection runs on the addon's original text; the relay rewrite is
applied last and only touches ``NormalizedStream.url``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, urlparse

import structlog

from arflix.domain.entities.streams import (
    CaptionTrack,
    HdrTier,
    NormalizedStream,
    TaggedRawStream,
    TransportKind,
    VideoCodec,
)

log = structlog.get_logger(__name__)

_CODEC_RE = re.compile(r"\b(HEVC|H\.?265|AVC|H\.?264|VP9|AV1)\b", re.IGNORECASE)
_CODEC_MAP: dict[str, VideoCodec] = {
    "HEVC": "h265",
    "H265": "h265",
    "AVC": "h264",
    "H264": "h264",
    "VP9": "vp9",
    "AV1": "av1",
}
_FILE_SIZE_RE = re.compile(r"(\d+(?:\.\d+)?)\s?(GB|MB|TB)", re.IGNORECASE)
_SEEDS_RE = re.compile(r"👤\s*(\d+)")

# (marker, tier), first match wins.
_RESOLUTION_MARKERS: tuple[tuple[str, int], ...] = (
    ("2160", 2160),
    ("4k", 2160),
    ("1440", 1440),
    ("1080", 1080),
    ("720", 720),
    ("480", 480),
    ("360", 360),
)

_DEBRID_HOSTS: tuple[tuple[str, str], ...] = (
    ("alldebrid", "AllDebrid"),
    ("premiumize", "Premiumize"),
    ("torbox", "TorBox"),
    ("easynews", "Easynews"),
    ("real-debrid", "Real-Debrid"),
)

_AUDIO_MARKERS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("atmos",), "Atmos"),
    (("truehd",), "TrueHD"),
    (("dts-hd", "dts hd"), "DTS-HD"),
    (("dts",), "DTS"),
    (("eac3", "e-ac3", "dd+", "ddp"), "EAC3"),
    (("ac3", "dd ", "dolby digital"), "AC3"),
    (("aac",), "AAC"),
    (("opus",), "Opus"),
    (("flac",), "FLAC"),
)

_HDR_LABELS: dict[HdrTier, str] = {"dolby_vision": "DV", "hdr10": "HDR10"}

PLAYBACK_MARKER = "/playback/"


@dataclass(frozen=True)
class RelayPolicy:
    """Which stream URLs are routed through the video relay.

    An empty ``base_url`` disables rewriting entirely.
    """

    base_url: str = ""
    host_markers: tuple[str, ...] = ("real-debrid.com", "torrentio.strem.fun/resolve/")

    def needs_relay(self, url: str) -> bool:
        if not self.base_url:
            return False
        lower = url.lower()
        return (
            ".mkv" in lower
            or PLAYBACK_MARKER in lower
            or any(marker.lower() in lower for marker in self.host_markers)
        )

    def rewrite(self, url: str) -> str:
        if not self.needs_relay(url):
            return url
        return f"{self.base_url}?url={quote(url, safe='')}"


# ------------------------------------------------------------------
# Single-attribute detectors
# ------------------------------------------------------------------


def is_usable(payload: Any) -> bool:
    """False for error-flagged descriptors and ones without a URL."""
    if not isinstance(payload, Mapping):
        return False
    url = payload.get("url")
    if not isinstance(url, str) or not url.strip():
        return False
    stream_data = payload.get("streamData")
    if isinstance(stream_data, Mapping) and stream_data.get("type") == "error":
        return False
    return True


def detect_transport(url: str) -> TransportKind:
    """Container extensions are checked before manifest markers."""
    lower = url.lower()
    if any(ext in lower for ext in (".mp4", ".mkv", ".avi", ".webm")):
        return "mp4"
    if "m3u8" in lower:
        return "hls"
    if ".mpd" in lower or "dash" in lower:
        return "dash"
    if PLAYBACK_MARKER in lower:
        return "hls"
    return "unknown"


def parse_resolution(text: str, url: str) -> int | None:
    haystack = f"{text} {url}".lower()
    for marker, tier in _RESOLUTION_MARKERS:
        if marker in haystack:
            return tier
    return None


def parse_codec(text: str) -> VideoCodec | None:
    m = _CODEC_RE.search(text)
    if not m:
        return None
    return _CODEC_MAP.get(m.group(0).upper().replace(".", ""))


def parse_hdr(text: str) -> HdrTier:
    lower = text.lower()
    if "dolby" in lower and "vision" in lower:
        return "dolby_vision"
    if "hdr" in lower:
        return "hdr10"
    return "none"


def extract_host(url: str) -> str:
    """Debrid services get their display name; other hosts stay raw."""
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return "Unknown"
    if not hostname:
        return "Unknown"
    hostname = hostname.removeprefix("www.")
    for needle, display in _DEBRID_HOSTS:
        if needle in hostname:
            return display
    return hostname


def parse_file_size(text: str) -> str | None:
    m = _FILE_SIZE_RE.search(text)
    if not m:
        return None
    return f"{m.group(1)} {m.group(2).upper()}"


def parse_audio_codec(text: str) -> str | None:
    lower = text.lower()
    for needles, label in _AUDIO_MARKERS:
        if any(n in lower for n in needles):
            return label
    return None


def parse_seeds(text: str) -> int | None:
    m = _SEEDS_RE.search(text)
    return int(m.group(1)) if m else None


def parse_captions(subtitles: Any) -> tuple[CaptionTrack, ...]:
    if not isinstance(subtitles, Sequence) or isinstance(subtitles, str):
        return ()
    tracks: list[CaptionTrack] = []
    for sub in subtitles:
        if not isinstance(sub, Mapping):
            continue
        url = sub.get("url")
        if not isinstance(url, str) or not url:
            continue
        lang = sub.get("lang")
        tracks.append(
            CaptionTrack(
                lang=lang if isinstance(lang, str) and lang else "unknown",
                url=url,
                mime="text/vtt" if url.lower().endswith(".vtt") else None,
            )
        )
    return tuple(tracks)


def build_label(
    resolution: int | None,
    codec: VideoCodec | None,
    hdr: HdrTier,
    host: str,
    fallback: str,
) -> str:
    """``"1080p H265 HDR10 (host)"``; ``fallback`` when nothing was detected."""
    parts: list[str] = []
    if resolution:
        parts.append(f"{resolution}p")
    if codec:
        parts.append(codec.upper())
    if hdr in _HDR_LABELS:
        parts.append(_HDR_LABELS[hdr])
    if host and host != "Unknown":
        parts.append(f"({host})")
    return " ".join(parts) or fallback or "Stream"


# ------------------------------------------------------------------
# Descriptor -> NormalizedStream
# ------------------------------------------------------------------


def _text_field(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    return value if isinstance(value, str) else ""


def classify_stream(
    raw: TaggedRawStream, relay: RelayPolicy | None = None
) -> NormalizedStream | None:
    """Classify one descriptor. Returns None for unusable descriptors."""
    payload = raw.payload
    if not is_usable(payload):
        log.debug(
            "stream_discarded",
            addon=raw.addon_name,
            reason=_discard_reason(payload),
        )
        return None

    url: str = payload["url"].strip()
    name = _text_field(payload, "name")
    title = _text_field(payload, "title")
    description = _text_field(payload, "description")
    # Quality tags: name, else title. Extras scan every text field.
    headline = name or title
    text = " ".join(t for t in (name, title, description) if t)

    resolution = parse_resolution(headline, url)
    codec = parse_codec(headline)
    hdr = parse_hdr(headline)
    host = extract_host(url)

    info_hash = payload.get("infoHash")
    file_idx = payload.get("fileIdx")

    return NormalizedStream(
        url=(relay or RelayPolicy()).rewrite(url),
        original_url=url,
        transport_kind=detect_transport(url),
        resolution_tier=resolution,
        codec=codec,
        hdr_tier=hdr,
        host_label=host,
        display_label=build_label(resolution, codec, hdr, host, name or title),
        source_addon_name=raw.addon_name,
        caption_tracks=parse_captions(payload.get("subtitles")),
        info_hash=info_hash if isinstance(info_hash, str) and info_hash else None,
        file_idx=(
            file_idx
            if isinstance(file_idx, int) and not isinstance(file_idx, bool)
            else None
        ),
        file_size=parse_file_size(text),
        audio_codec=parse_audio_codec(text),
        seeds=parse_seeds(text),
    )


def _discard_reason(payload: Any) -> str:
    if isinstance(payload, Mapping):
        stream_data = payload.get("streamData")
        if isinstance(stream_data, Mapping) and stream_data.get("type") == "error":
            return "error_flagged"
    return "missing_url"


def classify_streams(
    raws: Sequence[TaggedRawStream], relay: RelayPolicy | None = None
) -> list[NormalizedStream]:
    """Classify in input order, dropping unusable descriptors."""
    out: list[NormalizedStream] = []
    for raw in raws:
        stream = classify_stream(raw, relay)
        if stream is not None:
            out.append(stream)
    return out
