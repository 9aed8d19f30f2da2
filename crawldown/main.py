#!/usr/bin/env python3
"""
crawldown - crawl a website and convert its pages to Markdown.

The crawler follows internal links up to a maximum depth, extracts the main
content of every page, converts it to Markdown and rewrites links between
crawled pages so the output can be browsed offline.

Usage:
    python -m crawldown.main --url https://example.com --output ./docs --depth 3

Features:
    - Crawls a site following internal links up to a configurable depth
    - Extracts the main content area of each page
    - Converts HTML to GitHub-flavored Markdown
    - Rewrites links between pages to local .md files
    - Respects robots.txt
    - Single-page mode and path exclusions
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional
from urllib.parse import urlparse

from crawldown import __version__
from crawldown.crawler import CrawlPipeline, CrawlOptions
from crawldown.utils.constants import (
    DEFAULT_CRAWL_DELAY,
    DEFAULT_MAX_DEPTH,
    DEFAULT_PARALLELISM,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
)
from crawldown.utils.log import (
    setup_logger,
    print_status,
    print_success,
    print_error,
    print_info
)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Args:
        argv: Argument list (defaults to sys.argv)

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog='crawldown',
        description='A web crawler that downloads and converts website content to Markdown format',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s --url https://example.com --output ./docs
    %(prog)s --url https://example.com -o ./docs --depth 3 --exclude https://example.com/blog
    %(prog)s --single https://example.com/about -o ./docs
        """
    )

    parser.add_argument(
        '--url', '-u',
        type=str,
        help='The starting URL to crawl (not needed with --single)'
    )

    parser.add_argument(
        '--single', '-s',
        type=str,
        help='Download a single page URL instead of crawling (overrides --url)'
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        required=True,
        help='The directory where markdown files will be saved'
    )

    parser.add_argument(
        '--depth', '-d',
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f'Maximum crawl depth (default: {DEFAULT_MAX_DEPTH})'
    )

    parser.add_argument(
        '--exclude', '-e',
        action='append',
        default=[],
        metavar='PREFIX',
        help='URL path prefix to exclude from crawling (repeatable)'
    )

    parser.add_argument(
        '--timeout', '-t',
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f'Request timeout in seconds (default: {DEFAULT_TIMEOUT})'
    )

    parser.add_argument(
        '--delay',
        type=float,
        default=DEFAULT_CRAWL_DELAY,
        help=f'Delay between requests in seconds (default: {DEFAULT_CRAWL_DELAY:g})'
    )

    parser.add_argument(
        '--concurrency', '-c',
        type=int,
        default=DEFAULT_PARALLELISM,
        help=f'Maximum parallel requests (default: {DEFAULT_PARALLELISM})'
    )

    parser.add_argument(
        '--user-agent',
        type=str,
        default=DEFAULT_USER_AGENT,
        help=f'User agent for requests (default: {DEFAULT_USER_AGENT})'
    )

    parser.add_argument(
        '--no-robots',
        action='store_true',
        help='Ignore robots.txt rules'
    )

    parser.add_argument(
        '--follow-external',
        action='store_true',
        help='Follow links to other domains'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Suppress output except errors'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    return parser.parse_args(argv)


def validate_url(url: str) -> str:
    """
    Validate the input URL, adding a scheme if missing.

    Args:
        url: URL string to validate

    Returns:
        URL string with a scheme

    Raises:
        ValueError: If URL is invalid
    """
    url = url.strip()

    if not url.startswith(('http://', 'https://')):
        url = 'https://' + url

    parsed = urlparse(url)

    if not parsed.netloc:
        raise ValueError(f"Invalid URL: {url}")

    return url


def build_options(args: argparse.Namespace) -> CrawlOptions:
    """
    Build crawler options from parsed arguments.

    Args:
        args: Parsed arguments namespace

    Returns:
        CrawlOptions instance
    """
    return CrawlOptions(
        max_depth=args.depth,
        user_agent=args.user_agent,
        ignore_robots_txt=args.no_robots,
        follow_external_links=args.follow_external,
        single_page=bool(args.single),
        request_timeout=args.timeout,
        request_delay=args.delay,
        excluded_paths=list(args.exclude),
        parallelism=args.concurrency
    )


def print_configuration(url: str, args: argparse.Namespace) -> None:
    """Print the run configuration."""
    if args.single:
        print_info(f"Single-page mode: fetching {url} only")
    else:
        print_info(f"Starting crawl of: {url}")
    print_info(f"Output directory: {os.path.abspath(args.output)}")
    print_info(f"Max depth: {args.depth}")
    print_info(f"Request timeout: {args.timeout:g}s, delay: {args.delay:g}s")
    if args.exclude:
        print_info(f"Excluded paths: {', '.join(args.exclude)}")


async def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for crawldown.

    Args:
        argv: Argument list (defaults to sys.argv)

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_arguments(argv)

    log_level = logging.DEBUG if args.verbose else (logging.WARNING if args.quiet else logging.INFO)
    setup_logger(level=log_level)

    if not args.single and not args.url:
        print_error("Either --url or --single is required")
        return 1

    try:
        url = validate_url(args.single or args.url)
        options = build_options(args)

        if not args.quiet:
            print_configuration(url, args)

        pipeline = CrawlPipeline(url, args.output, options=options)
        result = await pipeline.run()

        if not args.quiet:
            print_status(
                f"Pages crawled: {result.pages_crawled}, "
                f"documents written: {result.documents_written}, "
                f"errors: {len(result.errors)}, "
                f"duration: {result.duration_seconds:.1f}s",
                "bold"
            )

        print_success(f"Markdown saved to: {os.path.abspath(args.output)}")
        return 0

    except KeyboardInterrupt:
        print_error("Crawl interrupted by user")
        return 1
    except ValueError as e:
        print_error(f"Invalid input: {e}")
        return 1
    except OSError as e:
        print_error(f"Filesystem error: {e}")
        return 1


def run() -> None:
    """Entry point wrapper for running as module."""
    sys.exit(asyncio.run(main()))


if __name__ == '__main__':
    run()
