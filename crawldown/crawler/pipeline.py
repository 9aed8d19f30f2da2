"""
Crawl-to-Markdown pipeline.

Runs the crawl, converts every page as it arrives, then rewrites links
against the complete page set and writes the documents.
"""

import os
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .crawler import SiteCrawler, CrawlOptions, Page
from .fetcher import PageFetcher
from .registry import PageRegistry, PageRecord, PageCounter, RegisterResult, RegistrySnapshot
from .rewrite import LinkLocalizer
from ..converter import MarkdownConverter, ConversionError, build_header
from ..utils.log import get_logger, print_info, print_success
from ..utils.paths import ensure_dir, generate_filename, registry_key, write_text_atomic


@dataclass
class PipelineResult:
    """Results of a full crawl and export run."""

    pages_crawled: int = 0
    documents_written: int = 0
    files: List[str] = field(default_factory=list)
    errors: List[Dict] = field(default_factory=list)
    duration_seconds: float = 0.0


class CrawlPipeline:
    """
    Crawls a site and exports it as linked Markdown files.

    Link rewriting only starts once the crawl has fully finished, so every
    document sees the same, complete URL to filename index.
    """

    def __init__(
        self,
        url: str,
        output_dir: str,
        options: Optional[CrawlOptions] = None,
        fetcher: Optional[PageFetcher] = None,
        converter: Optional[MarkdownConverter] = None
    ):
        """
        Initialize the pipeline.

        Args:
            url: Starting URL (or the single page URL in single-page mode)
            output_dir: Directory receiving the Markdown files
            options: Crawler configuration
            fetcher: Page fetcher; built from the options if omitted
            converter: HTML to Markdown converter

        Raises:
            ValueError: If the URL, output directory or an option is invalid
        """
        if not output_dir:
            raise ValueError("Output directory is required")

        self.output_dir = os.path.abspath(output_dir)
        self.options = options or CrawlOptions()
        self.converter = converter or MarkdownConverter()
        self.registry = PageRegistry()
        self.counter = PageCounter()
        self.logger = get_logger("pipeline")

        self.crawler = SiteCrawler(
            url,
            options=self.options,
            fetcher=fetcher,
            counter=self.counter
        )
        self.crawler.on_page(self._process_page)

        self._errors: List[Dict] = []

    async def run(self) -> PipelineResult:
        """
        Crawl, convert, rewrite and write the site.

        Returns:
            PipelineResult with statistics and errors

        Raises:
            OSError: If the output directory cannot be created
        """
        start_time = time.time()

        ensure_dir(self.output_dir)

        crawl_result = await self.crawler.start()
        snapshot = self.registry.freeze()

        print_info(
            f"Crawled {crawl_result.pages_crawled} pages. "
            f"Converting links and saving {len(snapshot)} files..."
        )

        files = self._write_documents(snapshot)

        result = PipelineResult(
            pages_crawled=crawl_result.pages_crawled,
            documents_written=len(files),
            files=files,
            errors=crawl_result.errors + self._errors,
            duration_seconds=time.time() - start_time
        )

        print_success(f"Successfully processed {result.documents_written} pages")
        return result

    def _process_page(self, page: Page) -> None:
        """Convert a crawled page and register it."""
        try:
            markdown = self.converter.convert(page.content)
        except ConversionError as e:
            self.logger.warning(f"Error converting {page.url}: {e}")
            self._record_error(page.url, str(e), 'conversion_error')
            return

        key = registry_key(page.url)
        record = PageRecord(
            normalized_url=key,
            original_url=page.url,
            filename=generate_filename(page.url),
            markdown=build_header(page.title, page.url) + markdown,
            title=page.title
        )

        if self.registry.register(key, record) is RegisterResult.ALREADY_PRESENT:
            self.logger.debug(f"Page already registered: {key}")

    def _write_documents(self, snapshot: RegistrySnapshot) -> List[str]:
        """
        Rewrite links in every document and save it.

        Args:
            snapshot: Frozen registry

        Returns:
            Paths of the written files
        """
        localizer = LinkLocalizer(snapshot.url_to_filename)
        self._warn_filename_collisions(snapshot)

        files = []
        total = len(snapshot)

        for index, key in enumerate(sorted(snapshot.records), start=1):
            record = snapshot.records[key]
            self.logger.info(f"[{index}/{total}] Processing: {record.original_url}")

            markdown = localizer.localize(record.markdown, record.original_url)
            output_path = os.path.join(self.output_dir, record.filename)

            try:
                write_text_atomic(output_path, markdown)
            except OSError as e:
                self.logger.error(f"Error saving {output_path}: {e}")
                self._record_error(record.original_url, str(e), 'save_error')
                continue

            self.logger.debug(f"Saved: {output_path}")
            if output_path not in files:
                files.append(output_path)

        return files

    def _warn_filename_collisions(self, snapshot: RegistrySnapshot) -> None:
        """Log pages that will overwrite each other on disk."""
        by_filename = defaultdict(list)
        for key, filename in snapshot.url_to_filename.items():
            by_filename[filename].append(key)

        for filename, urls in by_filename.items():
            if len(urls) > 1:
                self.logger.warning(
                    f"{len(urls)} pages share the filename {filename}: "
                    f"{', '.join(sorted(urls))}"
                )

    def _record_error(self, url: str, error: str, error_type: str) -> None:
        self._errors.append({
            'url': url,
            'error': error,
            'type': error_type
        })
