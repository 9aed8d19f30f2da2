"""
Crawler module for exporting websites as Markdown.

Contains components for crawling, fetching, extracting, registering and
rewriting pages.
"""

from .crawler import SiteCrawler, CrawlOptions, CrawlResult, CrawlState, CrawlTarget, Page
from .extractor import ContentExtractor, ExtractedPage
from .fetcher import PageFetcher, FetchResponse, FetchError
from .links import LinkAction, classify_link, is_excluded
from .pipeline import CrawlPipeline, PipelineResult
from .registry import PageRegistry, PageRecord, PageCounter, RegisterResult, RegistryFrozenError
from .rewrite import LinkLocalizer, localize_links

__all__ = [
    "SiteCrawler",
    "CrawlOptions",
    "CrawlResult",
    "CrawlState",
    "CrawlTarget",
    "Page",
    "ContentExtractor",
    "ExtractedPage",
    "PageFetcher",
    "FetchResponse",
    "FetchError",
    "LinkAction",
    "classify_link",
    "is_excluded",
    "CrawlPipeline",
    "PipelineResult",
    "PageRegistry",
    "PageRecord",
    "PageCounter",
    "RegisterResult",
    "RegistryFrozenError",
    "LinkLocalizer",
    "localize_links",
]
