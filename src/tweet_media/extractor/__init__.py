"""Media extraction module - find media descriptors for a post."""

from .base import MediaKind, MediaDescriptor, ExtractionResult
from .schema import VideoVariant, VideoInfo, MediaEntity, parse_entities
from .variants import select_best_variant, upgrade_photo_url
from .templates import expand_template, guess_candidate_urls
from .search import search_structured, search_patterns, classify_url
from .pipeline import MediaExtractor


async def extract_media(url: str, **kwargs) -> ExtractionResult:
    """
    Convenience function to extract media for a post URL.

    Args:
        url: Post URL
        **kwargs: Additional arguments passed to MediaExtractor

    Returns:
        ExtractionResult with the post's media
    """
    extractor = MediaExtractor(**kwargs)
    return await extractor.extract(url)


__all__ = [
    "MediaKind",
    "MediaDescriptor",
    "ExtractionResult",
    "VideoVariant",
    "VideoInfo",
    "MediaEntity",
    "parse_entities",
    "select_best_variant",
    "upgrade_photo_url",
    "expand_template",
    "guess_candidate_urls",
    "search_structured",
    "search_patterns",
    "classify_url",
    "MediaExtractor",
    "extract_media",
]
