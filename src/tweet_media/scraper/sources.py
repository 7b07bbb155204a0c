"""Content sources tried, in order, to acquire a post's media data."""

import json
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from ..errors import AcquisitionFailed, CandidateFailure, FetchError


logger = logging.getLogger(__name__)


# Public bearer token of the twitter.com web client
WEB_BEARER_TOKEN = (
    "AAAAAAAAAAAAAAAAAAAAANRILgAAAAAAnNwIzUejRCOuH5E6I8xnZz4puTs"
    "%3D1Zv7ttfk8LF81IUq16cHjhLTvJu4FA33AGWWjCpTnA"
)

BROWSER_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def syndication_token(post_id: str) -> str:
    """Token expected by the embed endpoint: (id / 1e15 * pi) in base 36, without zeros or point."""
    value = int(post_id) / 1e15 * math.pi
    integer = int(value)
    fraction = value - integer

    digits = ""
    while integer:
        integer, rem = divmod(integer, 36)
        digits = _BASE36[rem] + digits

    decimals = ""
    for _ in range(11):
        if not fraction:
            break
        fraction *= 36
        digit = int(fraction)
        decimals += _BASE36[digit]
        fraction -= digit

    return (digits + decimals).replace("0", "")


class ContentSource(ABC):
    """A place the raw content of a post can be fetched from."""

    name: str = "unknown"
    min_length: int = 50
    base_url: Optional[str] = None  # resolves relative media links in the body

    @abstractmethod
    async def fetch(self, post_id: str, fetcher) -> str:
        """
        Fetch raw content for a post.

        Raises:
            FetchError: if the source cannot be reached
        """
        pass


class UrlSource(ContentSource):
    """Fetches one templated URL with fixed headers."""

    def __init__(
        self,
        name: str,
        url_template: str,
        headers: Optional[dict] = None,
        base_url: Optional[str] = None,
        min_length: int = 50,
        timeout: Optional[float] = None,
    ):
        self.name = name
        self.url_template = url_template
        self.headers = headers or {}
        self.base_url = base_url
        self.min_length = min_length
        self.timeout = timeout

    def url_for(self, post_id: str) -> str:
        token = syndication_token(post_id) if "{token}" in self.url_template else ""
        return self.url_template.format(post_id=post_id, token=token)

    async def fetch(self, post_id: str, fetcher) -> str:
        return await fetcher.fetch(self.url_for(post_id), headers=self.headers, timeout=self.timeout)


class GuestApiSource(ContentSource):
    """Reads the status API with a freshly activated guest token."""

    name = "guest_api"

    ACTIVATE_URL = "https://api.twitter.com/1.1/guest/activate.json"
    STATUS_URL = "https://api.twitter.com/1.1/statuses/show.json?id={post_id}&tweet_mode=extended"

    def __init__(
        self,
        bearer_token: str = WEB_BEARER_TOKEN,
        min_length: int = 50,
        timeout: Optional[float] = None,
    ):
        self.bearer_token = bearer_token
        self.min_length = min_length
        self.timeout = timeout

    async def fetch(self, post_id: str, fetcher) -> str:
        headers = {"Authorization": f"Bearer {self.bearer_token}"}
        activation = await fetcher.fetch(
            self.ACTIVATE_URL, headers=headers, timeout=self.timeout, method="POST"
        )
        try:
            guest_token = json.loads(activation)["guest_token"]
        except (ValueError, KeyError, TypeError):
            raise FetchError(self.ACTIVATE_URL, FetchError.NETWORK, message="no guest token in response")

        headers["x-guest-token"] = str(guest_token)
        return await fetcher.fetch(
            self.STATUS_URL.format(post_id=post_id), headers=headers, timeout=self.timeout
        )


def default_sources(
    names: Optional[list[str]] = None,
    min_length: int = 50,
    user_agent: Optional[str] = None,
    timeout: Optional[float] = None,
) -> list[ContentSource]:
    """
    Build the default candidate sources.

    Args:
        names: Source names in priority order (default: all, built-in order)
        min_length: Shortest body accepted as a real response
        user_agent: User-agent sent to HTML mirrors
        timeout: Per-request timeout in seconds

    Returns:
        Sources in the requested order
    """
    browser_headers = {
        "User-Agent": user_agent or BROWSER_USER_AGENT,
        "Referer": "https://twitter.com/",
    }
    available = {
        "syndication": UrlSource(
            "syndication",
            "https://cdn.syndication.twimg.com/tweet-result?id={post_id}&lang=en&token={token}",
            headers={"Referer": "https://platform.twitter.com/"},
            min_length=min_length,
            timeout=timeout,
        ),
        "guest_api": GuestApiSource(min_length=min_length, timeout=timeout),
        "vxtwitter": UrlSource(
            "vxtwitter",
            "https://api.vxtwitter.com/i/status/{post_id}",
            min_length=min_length,
            timeout=timeout,
        ),
        "nitter": UrlSource(
            "nitter",
            "https://nitter.net/i/status/{post_id}",
            headers=browser_headers,
            base_url="https://nitter.net",
            min_length=min_length,
            timeout=timeout,
        ),
    }

    if names is None:
        return list(available.values())

    unknown = [n for n in names if n not in available]
    if unknown:
        raise ValueError(f"Unknown content sources: {', '.join(unknown)}")
    return [available[n] for n in names]


@dataclass
class AcquiredContent:
    """Body returned by the first source that answered adequately."""

    source: ContentSource
    body: str
    failures: list[CandidateFailure] = field(default_factory=list)  # earlier candidates


async def acquire(post_id: str, fetcher, sources: list[ContentSource]) -> AcquiredContent:
    """
    Try sources in order and return the first adequate body.

    Raises:
        AcquisitionFailed: if every source failed
    """
    failures = []

    for source in sources:
        try:
            body = await source.fetch(post_id, fetcher)
        except FetchError as e:
            failure = CandidateFailure(
                source=source.name,
                kind=e.kind,
                detail=e.message or "",
                status=e.status,
            )
            logger.info("Source %s failed: %s", source.name, failure)
            failures.append(failure)
            continue

        if len(body.strip()) < source.min_length:
            failure = CandidateFailure(
                source=source.name,
                kind="too_short",
                detail=f"{len(body.strip())} chars",
            )
            logger.info("Source %s failed: %s", source.name, failure)
            failures.append(failure)
            continue

        logger.debug("Using content from %s (%d chars)", source.name, len(body))
        return AcquiredContent(source=source, body=body, failures=failures)

    raise AcquisitionFailed(failures)
