"""Tests for the page fetcher against a local HTTP server."""

from __future__ import annotations

import logging

import pytest

from crawldown.crawler.fetcher import FetchError, PageFetcher


class TestFetch:
    async def test_fetch_html_page(self, site_server) -> None:
        async with PageFetcher() as fetcher:
            response = await fetcher.fetch(str(site_server.make_url("/")))

        assert response.status == 200
        assert "<title>Home</title>" in response.html
        assert response.url == str(site_server.make_url("/"))

    async def test_fetch_starts_session_on_demand(self, site_server) -> None:
        fetcher = PageFetcher()
        try:
            response = await fetcher.fetch(str(site_server.make_url("/about")))
        finally:
            await fetcher.close()

        assert "About us." in response.html

    async def test_redirect_reports_final_url(self, site_server) -> None:
        async with PageFetcher() as fetcher:
            response = await fetcher.fetch(str(site_server.make_url("/redirect")))

        assert response.url == str(site_server.make_url("/about"))

    async def test_not_found(self, site_server) -> None:
        async with PageFetcher() as fetcher:
            with pytest.raises(FetchError) as excinfo:
                await fetcher.fetch(str(site_server.make_url("/missing")))

        assert excinfo.value.reason == "HTTP 404"
        assert excinfo.value.url.endswith("/missing")

    async def test_non_html_rejected(self, site_server) -> None:
        async with PageFetcher() as fetcher:
            with pytest.raises(FetchError) as excinfo:
                await fetcher.fetch(str(site_server.make_url("/data.json")))

        assert excinfo.value.reason.startswith("non-HTML content: application/json")

    async def test_robots_disallow(self, site_server) -> None:
        async with PageFetcher() as fetcher:
            with pytest.raises(FetchError) as excinfo:
                await fetcher.fetch(str(site_server.make_url("/private/secret")))

        assert excinfo.value.reason == "disallowed by robots.txt"

    async def test_robots_can_be_ignored(self, site_server) -> None:
        async with PageFetcher(respect_robots=False) as fetcher:
            response = await fetcher.fetch(str(site_server.make_url("/private/secret")))

        assert "Hidden" in response.html

    async def test_connection_refused(self) -> None:
        async with PageFetcher(timeout=5) as fetcher:
            with pytest.raises(FetchError) as excinfo:
                await fetcher.fetch("http://127.0.0.1:1/")

        assert excinfo.value.reason.startswith("client error")

    async def test_unreachable_robots_allows_everything(self, caplog) -> None:
        caplog.set_level(logging.DEBUG, logger="crawldown")
        async with PageFetcher(timeout=5) as fetcher:
            with pytest.raises(FetchError):
                await fetcher.fetch("http://127.0.0.1:1/page")

        assert "No robots.txt rules for 127.0.0.1:1, all URLs allowed" in caplog.text

    async def test_loaded_robots_not_reported_missing(self, site_server, caplog) -> None:
        caplog.set_level(logging.DEBUG, logger="crawldown")
        async with PageFetcher() as fetcher:
            await fetcher.fetch(str(site_server.make_url("/about")))

        assert "No robots.txt rules" not in caplog.text

    async def test_close_is_idempotent(self) -> None:
        fetcher = PageFetcher()
        await fetcher.start()
        await fetcher.close()
        await fetcher.close()
