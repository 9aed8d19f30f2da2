"""
Main website crawler module.

Drives the depth-bounded, domain-scoped traversal of a site with a bounded
number of concurrent fetches, and hands every completed page to a callback.
"""

import asyncio
import random
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Set
from urllib.parse import urljoin, urldefrag

from .extractor import ContentExtractor
from .fetcher import PageFetcher, FetchError
from .links import LinkAction, classify_link, is_excluded
from .registry import PageCounter
from ..utils.constants import (
    DEFAULT_CRAWL_DELAY,
    DEFAULT_MAX_DEPTH,
    DEFAULT_PARALLELISM,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
)
from ..utils.log import get_logger
from ..utils.paths import get_domain, normalize_url, parse_url, registry_key


@dataclass(frozen=True)
class CrawlTarget:
    """A URL scheduled for fetching."""

    url: str
    depth: int


@dataclass(frozen=True)
class Page:
    """A fetched page ready for conversion."""

    # Normalized response URL
    url: str
    title: str
    # Inner HTML of the main content area
    content: str


@dataclass
class CrawlOptions:
    """Crawler configuration."""

    max_depth: int = DEFAULT_MAX_DEPTH
    allowed_domains: List[str] = field(default_factory=list)
    user_agent: str = DEFAULT_USER_AGENT
    ignore_robots_txt: bool = False
    follow_external_links: bool = False
    # Fetch only the start URL, without following links
    single_page: bool = False
    request_timeout: float = DEFAULT_TIMEOUT
    request_delay: float = DEFAULT_CRAWL_DELAY
    # URL prefixes that are never crawled
    excluded_paths: List[str] = field(default_factory=list)
    parallelism: int = DEFAULT_PARALLELISM

    def validate(self) -> None:
        """
        Check option values.

        Raises:
            ValueError: If an option is out of range
        """
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.request_timeout <= 0:
            raise ValueError(f"request_timeout must be > 0, got {self.request_timeout}")
        if self.request_delay < 0:
            raise ValueError(f"request_delay must be >= 0, got {self.request_delay}")
        if self.parallelism < 1:
            raise ValueError(f"parallelism must be >= 1, got {self.parallelism}")


class CrawlState(Enum):
    """
    Lifecycle of a crawl run.

    DRAINING is the teardown step: it starts once the frontier is empty and
    no fetch is in flight, and lasts while the workers are cancelled and the
    fetcher is closed.
    """

    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"
    DONE = "done"


@dataclass
class CrawlResult:
    """Results of the crawling operation."""

    pages_crawled: int = 0
    errors: List[Dict] = field(default_factory=list)
    duration_seconds: float = 0.0


PageCallback = Callable[[Page], None]


class RequestThrottle:
    """
    Spaces out requests to the same host.

    Each dispatch waits for the configured delay plus a random jitter of up
    to half the delay after the previous dispatch to that host.
    """

    def __init__(self, delay: float, jitter: Optional[float] = None):
        self.delay = delay
        self.jitter = delay / 2 if jitter is None else jitter
        self._last_dispatch: Dict[str, float] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    async def wait(self, url: str) -> None:
        """Sleep until a request to the URL's host may be sent."""
        if self.delay <= 0:
            return

        host = get_domain(url)
        lock = self._locks.setdefault(host, asyncio.Lock())

        async with lock:
            last = self._last_dispatch.get(host)
            if last is not None:
                pause = self.delay + random.uniform(0, self.jitter)
                remaining = last + pause - time.monotonic()
                if remaining > 0:
                    await asyncio.sleep(remaining)
            self._last_dispatch[host] = time.monotonic()


class SiteCrawler:
    """
    Crawls a website breadth-first with bounded concurrency.

    Every unique page is passed to the callback registered with on_page()
    as soon as it has been fetched and extracted.
    """

    def __init__(
        self,
        url: str,
        options: Optional[CrawlOptions] = None,
        fetcher: Optional[PageFetcher] = None,
        extractor: Optional[ContentExtractor] = None,
        counter: Optional[PageCounter] = None
    ):
        """
        Initialize the website crawler.

        Args:
            url: Starting URL to crawl
            options: Crawler configuration
            fetcher: Page fetcher; built from the options if omitted
            extractor: Content extractor
            counter: Shared count of completed pages

        Raises:
            ValueError: If the URL or an option is invalid
        """
        self.options = options or CrawlOptions()
        self.options.validate()

        parsed = parse_url(url) if url else None
        if parsed is None or not parsed.scheme or not parsed.netloc:
            raise ValueError(f"Invalid URL: {url!r}")

        self.start_url = url
        self.domain = get_domain(url)

        self.logger = get_logger("crawler")

        self.fetcher = fetcher or PageFetcher(
            timeout=self.options.request_timeout,
            user_agent=self.options.user_agent,
            respect_robots=not self.options.ignore_robots_txt
        )
        self.extractor = extractor or ContentExtractor()
        self.counter = counter or PageCounter()
        self.throttle = RequestThrottle(self.options.request_delay)

        # Hosts links may lead to; empty means any host
        self.allowed_domains: Set[str] = {
            domain.lower() for domain in self.options.allowed_domains
        }
        if not self.allowed_domains and not self.options.follow_external_links:
            self.allowed_domains = {self.domain}

        self.state = CrawlState.IDLE
        self._page_callback: Optional[PageCallback] = None

        # Registry keys already queued, and pages already delivered
        self._scheduled: Set[str] = set()
        self._completed: Set[str] = set()
        self._errors: List[Dict] = []

    def on_page(self, callback: PageCallback) -> None:
        """
        Set the callback invoked for each crawled page.

        The callback runs on the fetching task, so it must not block for long.
        """
        self._page_callback = callback

    async def start(self) -> CrawlResult:
        """
        Run the crawl to completion.

        Returns:
            CrawlResult with statistics and errors

        Raises:
            RuntimeError: If the crawler has already been started
        """
        if self.state is not CrawlState.IDLE:
            raise RuntimeError(f"Crawler cannot start from state {self.state.value}")

        start_time = time.time()
        self.state = CrawlState.RUNNING
        self.logger.info(
            f"Starting crawl of {self.start_url} "
            f"(max depth {self.options.max_depth}, {self.options.parallelism} parallel)"
        )

        await self.fetcher.start()
        try:
            await self._crawl_pages()
        finally:
            await self.fetcher.close()
            self.state = CrawlState.DONE

        result = CrawlResult(
            pages_crawled=len(self._completed),
            errors=list(self._errors),
            duration_seconds=time.time() - start_time
        )

        self.logger.info(
            f"Crawled {result.pages_crawled} pages with "
            f"{len(result.errors)} errors in {result.duration_seconds:.1f}s"
        )

        return result

    async def _crawl_pages(self) -> None:
        """Process the frontier with a fixed pool of worker tasks."""
        frontier: asyncio.Queue = asyncio.Queue()
        self._schedule(CrawlTarget(self.start_url, 0), frontier)

        workers = [
            asyncio.create_task(self._worker(frontier))
            for _ in range(self.options.parallelism)
        ]

        try:
            # Frontier exhausted and no fetch in flight
            await frontier.join()
            self.state = CrawlState.DRAINING
        finally:
            for worker in workers:
                worker.cancel()
            await asyncio.gather(*workers, return_exceptions=True)

    async def _worker(self, frontier: asyncio.Queue) -> None:
        """Fetch targets from the frontier until cancelled."""
        while True:
            target = await frontier.get()
            try:
                await self._crawl_page(target, frontier)
            except Exception as e:
                self.logger.exception(f"Unexpected error crawling {target.url}")
                self._record_error(target.url, str(e), 'crawl_error')
            finally:
                frontier.task_done()

    async def _crawl_page(self, target: CrawlTarget, frontier: asyncio.Queue) -> None:
        """
        Crawl a single page.

        Args:
            target: URL and depth to crawl
            frontier: Queue receiving newly discovered targets
        """
        await self.throttle.wait(target.url)

        self.logger.debug(f"Visiting: {target.url} (depth {target.depth})")

        try:
            response = await self.fetcher.fetch(target.url)
        except FetchError as e:
            self.logger.warning(f"Error crawling {target.url}: {e.reason}")
            self._record_error(target.url, e.reason, 'fetch_error')
            return

        final_url = response.url
        if final_url != target.url and not self._is_allowed_domain(final_url):
            self.logger.info(f"Skipping external redirect: {target.url} -> {final_url}")
            return

        extracted = self.extractor.extract(response.html, final_url)

        page = Page(
            url=normalize_url(final_url),
            title=extracted.title,
            content=extracted.content
        )

        key = registry_key(page.url)
        if key in self._completed:
            self.logger.debug(f"Skipping duplicate page: {final_url}")
            return
        self._completed.add(key)
        self._scheduled.add(key)

        count = self.counter.increment()
        self.logger.info(f"[{count}] Crawled: {page.url}")

        if self._page_callback is not None:
            self._page_callback(page)

        if self.options.single_page:
            return

        for href in extracted.links:
            self._discover(href, final_url, target.depth, frontier)

    def _discover(
        self,
        href: str,
        page_url: str,
        depth: int,
        frontier: asyncio.Queue
    ) -> None:
        """Queue a discovered link if it passes every crawl rule."""
        if classify_link(href) is LinkAction.SKIP:
            return

        url, _ = urldefrag(urljoin(page_url, href.strip()))

        parsed = parse_url(url)
        if parsed is None or parsed.scheme not in ('http', 'https'):
            return

        if is_excluded(url, self.options.excluded_paths):
            self.logger.debug(f"Skipping excluded path: {url}")
            return

        if not self._is_allowed_domain(url):
            return

        if depth + 1 > self.options.max_depth:
            return

        self._schedule(CrawlTarget(url, depth + 1), frontier)

    def _schedule(self, target: CrawlTarget, frontier: asyncio.Queue) -> None:
        """Add a target to the frontier unless its page is already queued."""
        key = registry_key(target.url)
        if key in self._scheduled:
            return
        self._scheduled.add(key)
        frontier.put_nowait(target)

    def _is_allowed_domain(self, url: str) -> bool:
        """Check if a URL's host may be crawled."""
        if not self.allowed_domains:
            return True
        parsed = parse_url(url)
        if parsed is None:
            return False
        return (
            parsed.netloc.lower() in self.allowed_domains
            or (parsed.hostname or '') in self.allowed_domains
        )

    def _record_error(self, url: str, error: str, error_type: str) -> None:
        self._errors.append({
            'url': url,
            'error': error,
            'type': error_type
        })
