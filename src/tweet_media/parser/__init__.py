"""Parser module for turning post URLs into references."""

from .post_reference import (
    PostReference,
    normalize_url,
    extract_post_id,
    parse_reference,
)

__all__ = [
    "PostReference",
    "normalize_url",
    "extract_post_id",
    "parse_reference",
]
