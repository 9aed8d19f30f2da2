"""Tests for the command line interface."""

from __future__ import annotations

import os

import pytest

from crawldown.main import build_options, main, parse_arguments, validate_url


class TestParseArguments:
    def test_defaults(self) -> None:
        args = parse_arguments(["-o", "out"])

        assert args.url is None
        assert args.single is None
        assert args.output == "out"
        assert args.depth == 2
        assert args.exclude == []
        assert args.timeout == 60
        assert args.delay == 1.0
        assert args.concurrency == 2
        assert args.user_agent == "CrawlDown/1.0"
        assert args.no_robots is False
        assert args.follow_external is False

    def test_exclude_is_repeatable(self) -> None:
        args = parse_arguments([
            "-u", "https://example.com", "-o", "out",
            "-e", "https://example.com/blog",
            "--exclude", "https://example.com/tags",
        ])
        assert args.exclude == ["https://example.com/blog", "https://example.com/tags"]

    def test_output_required(self) -> None:
        with pytest.raises(SystemExit):
            parse_arguments(["-u", "https://example.com"])


class TestValidateUrl:
    @pytest.mark.parametrize(
        "url, expected",
        [
            ("example.com", "https://example.com"),
            ("  http://example.com/docs  ", "http://example.com/docs"),
            ("https://example.com", "https://example.com"),
        ],
    )
    def test_valid(self, url: str, expected: str) -> None:
        assert validate_url(url) == expected

    def test_invalid(self) -> None:
        with pytest.raises(ValueError):
            validate_url("https://")


class TestBuildOptions:
    def test_maps_arguments(self) -> None:
        args = parse_arguments([
            "-s", "https://example.com/about", "-o", "out",
            "-d", "3", "-t", "10", "--delay", "0.5", "-c", "4",
            "--no-robots", "--follow-external", "-e", "https://example.com/x",
        ])
        options = build_options(args)

        assert options.single_page is True
        assert options.max_depth == 3
        assert options.request_timeout == 10
        assert options.request_delay == 0.5
        assert options.parallelism == 4
        assert options.ignore_robots_txt is True
        assert options.follow_external_links is True
        assert options.excluded_paths == ["https://example.com/x"]

    def test_crawl_mode_by_default(self) -> None:
        options = build_options(parse_arguments(["-u", "https://example.com", "-o", "out"]))
        assert options.single_page is False


class TestMain:
    async def test_missing_url_fails(self, tmp_path) -> None:
        assert await main(["-o", str(tmp_path / "out")]) == 1
        assert not (tmp_path / "out").exists()

    async def test_invalid_option_fails(self, tmp_path) -> None:
        assert await main(["-u", "https://example.com", "-o", str(tmp_path), "-d", "-1", "-q"]) == 1
        assert os.listdir(tmp_path) == []

    async def test_single_page_run(self, site_server, tmp_path) -> None:
        out = tmp_path / "out"
        code = await main([
            "--single", str(site_server.make_url("/about")),
            "-o", str(out), "--delay", "0", "-q",
        ])

        assert code == 0
        assert os.listdir(out) == ["about.md"]
        assert (out / "about.md").read_text(encoding="utf-8").startswith("# About\n")
