"""Extraction pipeline: post URL in, media descriptors out."""

import asyncio
import logging
from typing import Optional

from ..errors import AcquisitionFailed, CandidateFailure, NoMediaFound
from ..parser import parse_reference
from ..scraper import HttpFetcher, acquire, default_sources
from .base import ExtractionResult, MediaDescriptor
from .search import classify_url, search_patterns, search_structured
from .templates import guess_candidate_urls


logger = logging.getLogger(__name__)


class MediaExtractor:
    """Finds the downloadable media of a post.

    Holds only configuration; every call builds its own result, so one
    instance can serve several extractions.
    """

    def __init__(
        self,
        fetcher=None,
        sources=None,
        probe=None,
        deadline: Optional[float] = None,
        guess_when_empty: bool = False,
    ):
        """
        Args:
            fetcher: Object with an async fetch(url, headers, timeout, method)
            sources: Content sources in priority order
            probe: Optional LivenessProbe used to drop dead URLs
            deadline: Overall limit for one extraction, in seconds
            guess_when_empty: Probe guessed CDN URLs when nothing is found
        """
        self.fetcher = fetcher or HttpFetcher()
        self.sources = list(sources) if sources is not None else default_sources()
        self.probe = probe
        self.deadline = deadline
        self.guess_when_empty = guess_when_empty

    def extract_from_content(
        self,
        text: str,
        post_id: Optional[str] = None,
        base_url: Optional[str] = None,
        source: Optional[str] = None,
    ) -> ExtractionResult:
        """
        Search already-fetched HTML or JSON for media.

        Raises:
            NoMediaFound: if neither structured nor pattern search finds anything
        """
        result = ExtractionResult(post_id=post_id, source=source)
        result.extend(search_structured(text))
        if result.is_empty():
            result.extend(search_patterns(text, base_url=base_url))

        if result.is_empty():
            raise NoMediaFound(post_id, source)
        return result

    async def extract(self, url: str) -> ExtractionResult:
        """
        Extract media for a post URL.

        With a deadline, running out of time while acquiring content is
        an acquisition failure and while guessing it is NoMediaFound. When
        it runs out during the liveness check the unchecked result is returned.

        Raises:
            InvalidReference: if the URL has no post ID
            AcquisitionFailed: if no source could be reached
            NoMediaFound: if the source held no media
        """
        started = asyncio.get_running_loop().time()
        reference = parse_reference(url)
        logger.info("Extracting media for post %s", reference.post_id)

        try:
            content = await self._within(
                acquire(reference.post_id, self.fetcher, self.sources), started
            )
        except asyncio.TimeoutError:
            raise AcquisitionFailed([
                CandidateFailure(
                    source="deadline",
                    kind="timeout",
                    detail=f"no source answered within {self.deadline}s",
                )
            ]) from None

        source = content.source.name
        try:
            result = self.extract_from_content(
                content.body,
                post_id=reference.post_id,
                base_url=content.source.base_url,
                source=source,
            )
        except NoMediaFound:
            if not (self.guess_when_empty and self.probe):
                raise
            try:
                result = await self._within(self._guess(reference.post_id, source), started)
            except asyncio.TimeoutError:
                raise NoMediaFound(reference.post_id, source) from None

        result.source_failures = list(content.failures)
        return await self.check_liveness(result, started)

    async def check_liveness(
        self,
        result: ExtractionResult,
        started: Optional[float] = None,
    ) -> ExtractionResult:
        """Drop dead URLs from result when a probe is configured."""
        if self.probe is None:
            return result
        try:
            return await self._within(self.probe.filter(result), started)
        except asyncio.TimeoutError:
            logger.warning("Deadline reached during liveness check, returning unchecked result")
            return result

    async def _within(self, awaitable, started: Optional[float]):
        """Await with whatever is left of the deadline."""
        if self.deadline is None or started is None:
            return await awaitable
        remaining = self.deadline - (asyncio.get_running_loop().time() - started)
        return await asyncio.wait_for(awaitable, timeout=max(remaining, 0))

    async def _guess(self, post_id: str, source: str) -> ExtractionResult:
        result = ExtractionResult(post_id=post_id, source=source)
        for url in await self.probe.live_urls(guess_candidate_urls(post_id)):
            kind = classify_url(url)
            if kind is not None:
                result.add(MediaDescriptor(url=url, kind=kind))

        if result.is_empty():
            raise NoMediaFound(post_id, source)
        return result
