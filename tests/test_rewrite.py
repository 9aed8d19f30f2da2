"""Tests for rewriting Markdown links to local files."""

from __future__ import annotations

import pytest

from crawldown.crawler.rewrite import LinkLocalizer, localize_links

INDEX = {
    "https://example.com": "index.md",
    "https://example.com/about": "about.md",
    "https://example.com/page?a=1&b=2": "page-a-1-b-2.md",
    "https://example.com/docs": "docs.md",
}

SOURCE = "https://example.com/docs/guide"


@pytest.fixture
def localizer() -> LinkLocalizer:
    return LinkLocalizer(INDEX)


class TestLocalize:
    @pytest.mark.parametrize(
        "markdown, expected",
        [
            ("[About](/about)", "[About](about.md)"),
            ("[About](https://example.com/about)", "[About](about.md)"),
            ("[About](../about)", "[About](about.md)"),
            ("[About](/about/)", "[About](about.md)"),
            ("[Home](/)", "[Home](index.md)"),
            ("[Team](/about#team)", "[Team](about.md#team)"),
            ("[Page](/page?a=1&b=2)", "[Page](page-a-1-b-2.md)"),
            ("[Page](/page?b=2&a=1)", "[Page](page-a-1-b-2.md)"),
            ("[Docs](/docs?tab=2)", "[Docs](docs.md)"),
        ],
    )
    def test_rewrites(self, localizer: LinkLocalizer, markdown: str, expected: str) -> None:
        assert localizer.localize(markdown, SOURCE) == expected

    @pytest.mark.parametrize(
        "markdown",
        [
            "[Out](https://other.com/about)",
            "[Mail](mailto:hi@example.com)",
            "[Top](#top)",
            "[Run](javascript:void(0))",
            "[Missing](/not-crawled)",
            "![Logo](/about)",
        ],
    )
    def test_left_unchanged(self, localizer: LinkLocalizer, markdown: str) -> None:
        assert localizer.localize(markdown, SOURCE) == markdown

    def test_title_preserved(self, localizer: LinkLocalizer) -> None:
        result = localizer.localize('[About](/about "About us")', SOURCE)
        assert result == '[About](about.md "About us")'

    def test_surrounding_text_untouched(self, localizer: LinkLocalizer) -> None:
        markdown = "# Guide\n\nSee [About](/about) and [Out](https://other.com/).\n"
        result = localizer.localize(markdown, SOURCE)
        assert result == "# Guide\n\nSee [About](about.md) and [Out](https://other.com/).\n"

    def test_empty_index_changes_nothing(self) -> None:
        markdown = "[About](/about)"
        assert LinkLocalizer({}).localize(markdown, SOURCE) == markdown


class TestLookupKeys:
    def test_without_query(self) -> None:
        assert LinkLocalizer.lookup_keys("https://example.com/docs/") == ["https://example.com/docs"]

    def test_with_query_best_match_first(self) -> None:
        assert LinkLocalizer.lookup_keys("https://example.com/p?b=2&a=1") == [
            "https://example.com/p?b=2&a=1",
            "https://example.com/p?a=1&b=2",
            "https://example.com/p",
        ]

    def test_duplicates_removed(self) -> None:
        assert LinkLocalizer.lookup_keys("https://example.com/p?a=1") == [
            "https://example.com/p?a=1",
            "https://example.com/p",
        ]

    def test_unparsable(self) -> None:
        assert LinkLocalizer.lookup_keys("http://[::1") == []


def test_localize_links_wrapper() -> None:
    assert localize_links("[About](/about)", SOURCE, INDEX) == "[About](about.md)"
