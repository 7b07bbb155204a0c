"""Media search over raw HTML or JSON content."""

import html
import json
import logging
import re
from typing import Any, Iterator, Optional
from urllib.parse import unquote, urljoin, urlsplit

from bs4 import BeautifulSoup

from .base import MediaDescriptor, MediaKind
from .schema import MediaEntity, parse_entities
from .variants import IMAGE_HOSTS, select_best_variant, upgrade_photo_url


logger = logging.getLogger(__name__)


# Keys whose value is a list of media entities
MEDIA_CONTAINER_KEYS = ("extended_entities", "mediaDetails")

# Subtrees that describe a different post
SKIPPED_KEYS = frozenset({
    "quoted_status",
    "quoted_status_result",
    "quoted_tweet",
})

VIDEO_ENTITY_KINDS = {
    "video": MediaKind.VIDEO,
    "animated_gif": MediaKind.GIF,
}

VIDEO_HOSTS = ("video.twimg.com",)
IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "webp", "gif")
VIDEO_EXTENSIONS = ("mp4", "mov")

DENYLIST = ("profile", "avatar", "icon", "_video_thumb")

URL_PATTERN = re.compile(r'https?://[^\s"\'<>\\)\]]+', re.IGNORECASE)
FORMAT_PARAM = re.compile(r'[?&]format=(\w+)', re.IGNORECASE)
RENDITION_PATTERN = re.compile(r'/(?:ext_tw_video|amplify_video)/(\d+)/.*?/(\d+)x(\d+)/')


def search_structured(text: str) -> list[MediaDescriptor]:
    """Find media entries in JSON content or JSON embedded in HTML."""
    found = []
    for entities in _find_entity_lists(text):
        for entity in entities:
            descriptor = descriptor_from_entity(entity)
            if descriptor is not None:
                found.append(descriptor)
    return found


def descriptor_from_entity(entity: MediaEntity) -> Optional[MediaDescriptor]:
    """Turn one media entity into a descriptor, or None if it has nothing usable."""
    if entity.type == "photo":
        if not entity.image_url:
            return None
        return MediaDescriptor(url=upgrade_photo_url(entity.image_url), kind=MediaKind.PHOTO)

    kind = VIDEO_ENTITY_KINDS.get(entity.type)
    if kind is None or entity.video_info is None:
        return None

    best = select_best_variant(entity.video_info.variants)
    if best is None:
        # HLS-only entities contribute nothing
        logger.debug("No mp4 variant for %s entity, skipping", entity.type)
        return None
    return MediaDescriptor(url=best.url, kind=kind, bitrate=best.bitrate)


def _find_entity_lists(text: str) -> Iterator[list[MediaEntity]]:
    try:
        document = json.loads(text)
    except ValueError:
        document = None

    if document is not None:
        yield from _walk(document)
        return

    documents = _embedded_documents(text)
    if not documents and "&quot;" in text:
        documents = _embedded_documents(html.unescape(text))
    for document in documents:
        yield from _walk(document)


def _embedded_documents(text: str) -> list[Any]:
    """
    Decode JSON embedded in text that mentions a media container key.

    Whole objects are decoded first so their walk still sees the keys of
    enclosing posts. A key outside every decodable object falls back to
    decoding just its own value.
    """
    decoder = json.JSONDecoder()
    documents = []
    spans = []

    start = text.find('{')
    while start != -1:
        try:
            value, end = decoder.raw_decode(text, start)
        except ValueError:
            start = text.find('{', start + 1)
            continue
        if any(f'"{key}"' in text[start:end] for key in MEDIA_CONTAINER_KEYS):
            documents.append(value)
            spans.append((start, end))
        start = text.find('{', end)

    for key in MEDIA_CONTAINER_KEYS:
        for match in re.finditer(rf'"{key}"\s*:\s*', text):
            if any(s <= match.start() < e for s, e in spans):
                continue
            try:
                value, _ = decoder.raw_decode(text, match.end())
            except ValueError:
                continue
            documents.append({key: value})
    return documents


def _walk(node: Any) -> Iterator[list[MediaEntity]]:
    if isinstance(node, list):
        for item in node:
            yield from _walk(item)
        return
    if not isinstance(node, dict):
        return

    extended = node.get("extended_entities")
    if isinstance(extended, dict) and "media" in extended:
        yield parse_entities(extended["media"])
    if "mediaDetails" in node:
        yield parse_entities(node["mediaDetails"])

    for key, value in node.items():
        if key in SKIPPED_KEYS or key in MEDIA_CONTAINER_KEYS:
            continue
        if isinstance(value, (dict, list)):
            yield from _walk(value)


def search_patterns(text: str, base_url: Optional[str] = None) -> list[MediaDescriptor]:
    """
    Scan raw text for CDN media URLs.

    Absolute URLs must sit on a known image or video host. When base_url
    is given, src attributes of img/video/source tags are also resolved
    against it and accepted by extension alone, since mirror sites proxy
    media through their own host.
    """
    plain = html.unescape(text.replace('\\/', '/'))

    found = []
    for match in URL_PATTERN.finditer(plain):
        url = match.group(0)
        kind = classify_url(url, require_known_host=True)
        if kind is not None:
            found.append(_descriptor(url, kind))

    if base_url:
        for url in _html_sources(text, base_url):
            kind = classify_url(url, require_known_host=False)
            if kind is not None:
                found.append(_descriptor(url, kind))

    return _collapse_renditions(found)


def classify_url(url: str, require_known_host: bool = True) -> Optional[MediaKind]:
    """Return the media kind a URL points at, or None if it is not media."""
    lowered = url.lower()
    if any(word in lowered for word in DENYLIST):
        return None

    parts = urlsplit(url)
    host = parts.netloc.lower()
    path = unquote(parts.path).split('?', 1)[0].lower()
    extension = path.rsplit('.', 1)[-1] if '.' in path.rsplit('/', 1)[-1] else ''
    if not extension:
        format_match = FORMAT_PARAM.search(url)
        extension = format_match.group(1).lower() if format_match else ''

    if extension in VIDEO_EXTENSIONS and (not require_known_host or host in VIDEO_HOSTS):
        return MediaKind.GIF if "/tweet_video/" in path else MediaKind.VIDEO
    if extension in IMAGE_EXTENSIONS and (not require_known_host or host in IMAGE_HOSTS):
        return MediaKind.PHOTO
    return None


def _descriptor(url: str, kind: MediaKind) -> MediaDescriptor:
    if kind == MediaKind.PHOTO:
        url = upgrade_photo_url(url)
    return MediaDescriptor(url=url, kind=kind)


def _html_sources(text: str, base_url: str) -> list[str]:
    soup = BeautifulSoup(text, 'html.parser')
    urls = []
    for tag in soup.find_all(['img', 'video', 'source']):
        src = tag.get('src')
        if src:
            urls.append(urljoin(base_url, src))
    return urls


def _collapse_renditions(found: list[MediaDescriptor]) -> list[MediaDescriptor]:
    """Keep only the largest resolution among renditions of one video."""
    best_area: dict[str, int] = {}
    for descriptor in found:
        match = RENDITION_PATTERN.search(descriptor.url)
        if match:
            area = int(match.group(2)) * int(match.group(3))
            best_area[match.group(1)] = max(area, best_area.get(match.group(1), 0))

    kept = []
    for descriptor in found:
        match = RENDITION_PATTERN.search(descriptor.url)
        if match and int(match.group(2)) * int(match.group(3)) < best_area[match.group(1)]:
            continue
        kept.append(descriptor)
    return kept
