"""Failure types raised by the extraction pipeline."""

from dataclasses import dataclass
from typing import Optional


class ExtractionError(Exception):
    """Base class for every terminal extraction failure."""


class InvalidReference(ExtractionError):
    """The input does not contain a numeric post ID."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"No post ID found in {url!r}")


class FetchError(Exception):
    """Raised by a fetcher when a single request fails."""

    NETWORK = "network"
    HTTP_STATUS = "http_status"
    TIMEOUT = "timeout"

    def __init__(
        self,
        url: str,
        kind: str,
        status: Optional[int] = None,
        message: Optional[str] = None,
    ):
        self.url = url
        self.kind = kind
        self.status = status
        self.message = message
        detail = f"HTTP {status}" if status is not None else (message or kind)
        super().__init__(f"{kind} error for {url}: {detail}")


@dataclass(frozen=True)
class CandidateFailure:
    """Why one content source was rejected."""

    source: str
    kind: str  # network, http_status, timeout, too_short
    detail: str = ""
    status: Optional[int] = None

    def __str__(self) -> str:
        if self.status is not None:
            return f"{self.source}: HTTP {self.status}"
        if self.detail:
            return f"{self.source}: {self.kind} ({self.detail})"
        return f"{self.source}: {self.kind}"


class AcquisitionFailed(ExtractionError):
    """Every candidate content source failed."""

    def __init__(self, failures: list[CandidateFailure]):
        self.failures = list(failures)
        summary = "; ".join(str(f) for f in self.failures) or "no sources configured"
        super().__init__(f"Could not reach any source ({summary})")


class NoMediaFound(ExtractionError):
    """Content was acquired but held no media entries."""

    def __init__(self, post_id: Optional[str], source: Optional[str] = None):
        self.post_id = post_id
        self.source = source
        where = f" from {source}" if source else ""
        super().__init__(f"No media found for post {post_id}{where}")
