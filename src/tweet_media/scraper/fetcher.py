"""HTTP fetcher used to acquire post content."""

import asyncio
from typing import Optional

import aiohttp

from ..errors import FetchError


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class HttpFetcher:
    """Fetches a URL and returns the body as text.

    Each call opens its own session, so concurrent extractions share
    nothing.
    """

    def __init__(self, timeout: float = 10, user_agent: Optional[str] = None):
        self.timeout = timeout
        self.user_agent = user_agent or DEFAULT_USER_AGENT

    async def fetch(
        self,
        url: str,
        headers: Optional[dict] = None,
        timeout: Optional[float] = None,
        method: str = "GET",
    ) -> str:
        """
        Fetch a URL.

        Args:
            url: URL to request
            headers: Extra request headers (override the defaults)
            timeout: Per-request timeout in seconds
            method: HTTP method

        Returns:
            Response body as text

        Raises:
            FetchError: on network errors, timeouts or non-2xx responses
        """
        request_headers = {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/json,application/xhtml+xml,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        }
        request_headers.update(headers or {})

        client_timeout = aiohttp.ClientTimeout(total=timeout or self.timeout)

        try:
            async with aiohttp.ClientSession(timeout=client_timeout) as session:
                async with session.request(
                    method, url, headers=request_headers, allow_redirects=True
                ) as response:
                    if not 200 <= response.status < 300:
                        raise FetchError(url, FetchError.HTTP_STATUS, status=response.status)
                    return await response.text(errors="replace")

        except asyncio.TimeoutError:
            raise FetchError(
                url,
                FetchError.TIMEOUT,
                message=f"Timeout after {timeout or self.timeout}s",
            )
        except aiohttp.ClientError as e:
            raise FetchError(url, FetchError.NETWORK, message=str(e)) from e
