"""Variant selection and photo resolution upgrades."""

import re
from typing import Iterable, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from .schema import VideoVariant


MP4_CONTENT_TYPE = "video/mp4"

IMAGE_HOSTS = ("pbs.twimg.com",)

# Legacy size suffix, e.g. /media/ABC.jpg:large
_SIZE_SUFFIX = re.compile(r':(?:thumb|small|medium|large|orig)$')


def select_best_variant(variants: Iterable[VideoVariant]) -> Optional[VideoVariant]:
    """
    Pick the mp4 variant with the highest bitrate.

    Ties keep the first variant seen. Returns None when no mp4 variant
    exists (e.g. an HLS-only entity).
    """
    best = None
    for variant in variants:
        if variant.content_type != MP4_CONTENT_TYPE:
            continue
        if best is None or (variant.bitrate or 0) > (best.bitrate or 0):
            best = variant
    return best


def upgrade_photo_url(url: str) -> str:
    """Rewrite a CDN image URL to its original-resolution form."""
    parts = urlsplit(url)
    if parts.netloc.lower() not in IMAGE_HOSTS:
        return url

    path = _SIZE_SUFFIX.sub('', parts.path)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != "name"]
    query.append(("name", "orig"))
    return urlunsplit((parts.scheme or "https", parts.netloc, path, urlencode(query), ""))
