"""Tweet Media - find and download the media attached to Twitter/X posts."""

from .errors import (
    ExtractionError,
    InvalidReference,
    AcquisitionFailed,
    NoMediaFound,
    FetchError,
    CandidateFailure,
)
from .extractor import MediaExtractor, MediaDescriptor, MediaKind, ExtractionResult, extract_media
from .parser import PostReference, extract_post_id, parse_reference

__version__ = "0.1.0"

__all__ = [
    "ExtractionError",
    "InvalidReference",
    "AcquisitionFailed",
    "NoMediaFound",
    "FetchError",
    "CandidateFailure",
    "MediaExtractor",
    "MediaDescriptor",
    "MediaKind",
    "ExtractionResult",
    "extract_media",
    "PostReference",
    "extract_post_id",
    "parse_reference",
]
