"""
Content extractor for parsing fetched HTML pages.

Uses BeautifulSoup to pull the title, the main content area and the anchor
links out of a page.
"""

from dataclasses import dataclass, field
from typing import List, Sequence

from bs4 import BeautifulSoup, FeatureNotFound

from ..utils.constants import MAIN_CONTENT_SELECTORS
from ..utils.log import get_logger


@dataclass
class ExtractedPage:
    """Container for the parts of a page the crawler uses."""

    title: str = ""

    # Inner HTML of the main content area
    content: str = ""

    # Raw href values of every anchor, in document order
    links: List[str] = field(default_factory=list)


class ContentExtractor:
    """
    Extracts the main content and links from HTML pages.

    The main content is the first non-empty match of a fixed list of
    structural selectors, falling back to the whole body.
    """

    def __init__(self, selectors: Sequence[str] = MAIN_CONTENT_SELECTORS):
        """
        Initialize the content extractor.

        Args:
            selectors: CSS selectors tried in order for the main content
        """
        self.selectors = tuple(selectors)
        self.logger = get_logger("extractor")

    def extract(self, html: str, page_url: str) -> ExtractedPage:
        """
        Extract title, main content and links from HTML content.

        Args:
            html: HTML content to parse
            page_url: URL of the page (used for logging)

        Returns:
            ExtractedPage with the found parts
        """
        try:
            soup = BeautifulSoup(html, 'lxml')
        except FeatureNotFound:
            soup = BeautifulSoup(html, 'html.parser')

        page = ExtractedPage(
            title=self._extract_title(soup),
            content=self._extract_main_content(soup),
            links=self._extract_links(soup),
        )

        self.logger.debug(
            f"Extracted from {page_url}: "
            f"{len(page.content)} chars of content, {len(page.links)} links"
        )

        return page

    @staticmethod
    def _extract_title(soup: BeautifulSoup) -> str:
        """Extract the document title."""
        if soup.title is None:
            return ""
        return soup.title.get_text(strip=True)

    def _extract_main_content(self, soup: BeautifulSoup) -> str:
        """Return the inner HTML of the first non-empty content area."""
        for selector in self.selectors:
            element = soup.select_one(selector)
            if element is None:
                continue
            html = element.decode_contents()
            if html.strip():
                return html
        return ""

    @staticmethod
    def _extract_links(soup: BeautifulSoup) -> List[str]:
        """Extract anchor hrefs from the page."""
        links = []
        for anchor in soup.find_all('a', href=True):
            href = anchor.get('href', '').strip()
            if href:
                links.append(href)
        return links
