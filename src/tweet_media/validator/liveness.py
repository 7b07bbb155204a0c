"""Liveness probe for candidate media URLs."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import aiohttp

from ..extractor.base import ExtractionResult
from ..scraper.fetcher import DEFAULT_USER_AGENT


logger = logging.getLogger(__name__)


@dataclass
class ProbeResult:
    """Outcome of probing one URL."""

    url: str
    live: bool
    http_status: Optional[int] = None
    error_message: Optional[str] = None
    probed_at: datetime = field(default_factory=datetime.now)


class LivenessProbe:
    """Checks that media URLs answer a HEAD request with 2xx."""

    def __init__(
        self,
        timeout: float = 5,
        user_agent: Optional[str] = None,
    ):
        self.timeout = timeout
        self.user_agent = user_agent or DEFAULT_USER_AGENT

    async def probe(self, url: str) -> ProbeResult:
        """
        Probe a single URL.

        Args:
            url: The URL to check

        Returns:
            ProbeResult; live is False on any error or non-2xx status
        """
        headers = {
            "User-Agent": self.user_agent,
            "Referer": "https://twitter.com/",
        }
        timeout = aiohttp.ClientTimeout(total=self.timeout)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.head(url, headers=headers, allow_redirects=True) as response:
                    return ProbeResult(
                        url=url,
                        live=200 <= response.status < 300,
                        http_status=response.status,
                    )
        except asyncio.TimeoutError:
            return ProbeResult(url=url, live=False, error_message=f"Timeout after {self.timeout}s")
        except aiohttp.ClientError as e:
            return ProbeResult(url=url, live=False, error_message=str(e))

    async def is_live(self, url: str) -> bool:
        return (await self.probe(url)).live

    async def filter(self, result: ExtractionResult) -> ExtractionResult:
        """
        Return a copy of result without descriptors whose URL is not live.

        URLs are probed one after another, in result order.
        """
        filtered = ExtractionResult(
            post_id=result.post_id,
            source=result.source,
            dropped=list(result.dropped),
            source_failures=list(result.source_failures),
        )
        for descriptor in result:
            if await self.is_live(descriptor.url):
                filtered.add(descriptor)
            else:
                logger.info("Dropping unreachable %s: %s", descriptor.kind.value, descriptor.url)
                filtered.dropped.append(descriptor)
        return filtered

    async def live_urls(self, urls) -> list[str]:
        """Probe urls in order and return the live ones."""
        return [url for url in urls if await self.is_live(url)]
