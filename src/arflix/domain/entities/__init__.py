from .addons import DEFAULT_ID_PREFIXES, AddonEndpoint, AddonFetchResult, FetchStatus
from .streams import (
    CONTENT_KINDS,
    CaptionTrack,
    ContentKind,
    ExternalIdentifierBundle,
    HdrTier,
    NormalizedStream,
    StreamsRequest,
    StreamsResponse,
    TaggedRawStream,
    TransportKind,
    VideoCodec,
)

__all__ = [
    "CONTENT_KINDS",
    "DEFAULT_ID_PREFIXES",
    "AddonEndpoint",
    "AddonFetchResult",
    "CaptionTrack",
    "ContentKind",
    "ExternalIdentifierBundle",
    "FetchStatus",
    "HdrTier",
    "NormalizedStream",
    "StreamsRequest",
    "StreamsResponse",
    "TaggedRawStream",
    "TransportKind",
    "VideoCodec",
]
