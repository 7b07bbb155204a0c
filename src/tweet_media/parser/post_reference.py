"""Post URL parsing: normalization and numeric ID extraction."""

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

from ..errors import InvalidReference


POST_ID_PATTERN = re.compile(r'status(?:es)?/(\d+)', re.IGNORECASE)

# Hosts that serve the same post under a different name
HOST_ALIASES = {
    "x.com": "twitter.com",
    "www.x.com": "twitter.com",
    "mobile.x.com": "twitter.com",
    "www.twitter.com": "twitter.com",
    "mobile.twitter.com": "twitter.com",
}


@dataclass(frozen=True)
class PostReference:
    """A post identified by its numeric ID."""

    post_id: str
    url: str


def normalize_url(url: str) -> str:
    """
    Normalize a pasted or shared post URL.

    Adds a scheme when missing, folds x.com and mobile hosts into
    twitter.com and drops the query string and fragment.
    """
    url = url.strip()
    if not url:
        return url
    if "://" not in url:
        url = "https://" + url

    parts = urlsplit(url)
    host = parts.netloc.lower()
    host = HOST_ALIASES.get(host, host)
    return urlunsplit(("https", host, parts.path, "", ""))


def extract_post_id(url: str) -> Optional[str]:
    """Return the first numeric ID after status/ or statuses/, or None."""
    match = POST_ID_PATTERN.search(url or "")
    return match.group(1) if match else None


def parse_reference(url: str) -> PostReference:
    """
    Parse a post URL into a PostReference.

    Raises:
        InvalidReference: if the URL carries no post ID
    """
    normalized = normalize_url(url)
    post_id = extract_post_id(normalized) or extract_post_id(url)
    if post_id is None:
        raise InvalidReference(url)
    return PostReference(post_id=post_id, url=normalized)
