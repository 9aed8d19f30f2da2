"""Shared fixtures for the crawldown test suite.

Two ways of serving a site are provided:

- ``StubFetcher`` answers from an in-memory ``{url: html}`` map and records
  every requested URL, for orchestration tests that need exact control.
- ``site_server`` runs a real aiohttp ``TestServer`` on localhost, for tests
  that exercise ``PageFetcher`` and robots.txt handling end to end.
"""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from crawldown.crawler.fetcher import FetchError, FetchResponse


# ---------------------------------------------------------------------------
# Stub fetcher
# ---------------------------------------------------------------------------

class StubFetcher:
    """In-memory stand-in for ``PageFetcher``."""

    def __init__(
        self,
        pages: Dict[str, str],
        redirects: Optional[Dict[str, str]] = None,
        latency: float = 0.0,
    ) -> None:
        self.pages = pages
        self.redirects = redirects or {}
        self.latency = latency
        self.requested: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.started = False
        self.closed = False

    async def start(self) -> None:
        self.started = True

    async def close(self) -> None:
        self.closed = True

    async def fetch(self, url: str) -> FetchResponse:
        self.requested.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.latency)
            final_url = self.redirects.get(url, url)
            if final_url not in self.pages:
                raise FetchError(url, "HTTP 404")
            return FetchResponse(url=final_url, status=200, html=self.pages[final_url])
        finally:
            self.in_flight -= 1


def html_page(title: str, body: str) -> str:
    return f"<html><head><title>{title}</title></head><body>{body}</body></html>"


# ---------------------------------------------------------------------------
# Local HTTP site
# ---------------------------------------------------------------------------

_ROBOTS_TXT = """\
User-agent: *
Disallow: /private
"""


def _html(body: str, title: str) -> web.Response:
    return web.Response(text=html_page(title, body), content_type="text/html")


async def _index(request: web.Request) -> web.Response:
    return _html(
        '<nav><a href="/about">About</a> <a href="/contact">Contact</a></nav>'
        '<main><h1>Welcome</h1><p>Home page.</p>'
        '<a href="/about#team">Our team</a> <a href="/private/secret">Secret</a></main>',
        "Home",
    )


async def _about(request: web.Request) -> web.Response:
    return _html('<main><h2 id="team">Team</h2><p>About us. <a href="/">Home</a></p></main>', "About")


async def _contact(request: web.Request) -> web.Response:
    return _html('<article><p>Write to <a href="mailto:hi@example.com">us</a>.</p></article>', "Contact")


async def _secret(request: web.Request) -> web.Response:
    return _html("<main><p>Hidden</p></main>", "Secret")


async def _data(request: web.Request) -> web.Response:
    return web.json_response({"ok": True})


async def _redirect(request: web.Request) -> web.Response:
    raise web.HTTPFound("/about")


async def _robots(request: web.Request) -> web.Response:
    return web.Response(text=_ROBOTS_TXT, content_type="text/plain")


@pytest.fixture
async def site_server():
    """A small website served on localhost."""
    app = web.Application()
    app.router.add_get("/", _index)
    app.router.add_get("/about", _about)
    app.router.add_get("/contact", _contact)
    app.router.add_get("/private/secret", _secret)
    app.router.add_get("/data.json", _data)
    app.router.add_get("/redirect", _redirect)
    app.router.add_get("/robots.txt", _robots)

    server = TestServer(app)
    await server.start_server()
    yield server
    await server.close()
