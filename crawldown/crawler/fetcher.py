"""
Page fetcher for retrieving HTML documents.

Uses aiohttp for asynchronous requests and honors robots.txt by default.
"""

import asyncio
from dataclasses import dataclass
from typing import Dict, Optional

import aiohttp
from aiohttp import ClientTimeout, ClientError

from ..utils.constants import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from ..utils.log import get_logger
from ..utils.paths import get_domain
from ..utils.robots import RobotsHandler


HTML_CONTENT_TYPES = ('text/html', 'application/xhtml+xml')


class FetchError(Exception):
    """Raised when a page cannot be retrieved as HTML."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{reason} ({url})")
        self.url = url
        self.reason = reason


@dataclass(frozen=True)
class FetchResponse:
    """A successfully fetched HTML document."""

    # Final URL after redirects
    url: str
    status: int
    html: str


class PageFetcher:
    """
    Fetches HTML pages asynchronously.

    A single session is shared by all requests of a crawl run.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        respect_robots: bool = True
    ):
        """
        Initialize the page fetcher.

        Args:
            timeout: Request timeout in seconds
            user_agent: User agent string for requests
            respect_robots: Whether to honor robots.txt
        """
        self.timeout = ClientTimeout(total=timeout)
        self.user_agent = user_agent
        self.respect_robots = respect_robots
        self.logger = get_logger("fetcher")

        self._session: Optional[aiohttp.ClientSession] = None

        # Host -> robots.txt rules, with a lock per host so each file loads once
        self._robots: Dict[str, RobotsHandler] = {}
        self._robots_locks: Dict[str, asyncio.Lock] = {}

    async def start(self) -> None:
        """Open the HTTP session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent}
            )

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "PageFetcher":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def fetch(self, url: str) -> FetchResponse:
        """
        Fetch a single HTML page.

        Args:
            url: URL to fetch

        Returns:
            FetchResponse with the final URL and the HTML body

        Raises:
            FetchError: On robots.txt denial, transport failure, timeout,
                non-2xx status or non-HTML content
        """
        if self._session is None:
            await self.start()

        if self.respect_robots and not await self._is_allowed(url):
            raise FetchError(url, "disallowed by robots.txt")

        try:
            async with self._session.get(url, allow_redirects=True) as response:
                if not 200 <= response.status < 300:
                    raise FetchError(url, f"HTTP {response.status}")

                content_type = response.headers.get('Content-Type', '').lower()
                if not content_type.startswith(HTML_CONTENT_TYPES):
                    raise FetchError(url, f"non-HTML content: {content_type or 'unknown'}")

                html = await response.text(errors='replace')
                self.logger.debug(f"Fetched: {url} (HTTP {response.status})")

                return FetchResponse(
                    url=str(response.url),
                    status=response.status,
                    html=html
                )

        except ClientError as e:
            raise FetchError(url, f"client error: {e}") from e
        except asyncio.TimeoutError as e:
            raise FetchError(url, "request timed out") from e

    async def _is_allowed(self, url: str) -> bool:
        """Check robots.txt rules for the URL's host, loading them on first use."""
        host = get_domain(url)
        lock = self._robots_locks.setdefault(host, asyncio.Lock())

        async with lock:
            handler = self._robots.get(host)
            if handler is None:
                handler = RobotsHandler(url, self.user_agent)
                await handler.load(self._session)
                self._robots[host] = handler
                if not handler.loaded:
                    self.logger.debug(f"No robots.txt rules for {host}, all URLs allowed")

        return handler.is_allowed(url)
