"""
Utility modules for crawldown.

Contains logging, URL and path handling, robots.txt parsing utilities, and
constants.
"""

from .log import setup_logger, get_logger
from .paths import normalize_url, registry_key, generate_filename, sanitize_filename, ensure_dir
from .robots import RobotsHandler
from .constants import (
    DEFAULT_USER_AGENT,
    DEFAULT_TIMEOUT,
    DEFAULT_CRAWL_DELAY,
    DEFAULT_MAX_DEPTH,
    DEFAULT_PARALLELISM,
)

__all__ = [
    "setup_logger",
    "get_logger",
    "normalize_url",
    "registry_key",
    "generate_filename",
    "sanitize_filename",
    "ensure_dir",
    "RobotsHandler",
    "DEFAULT_USER_AGENT",
    "DEFAULT_TIMEOUT",
    "DEFAULT_CRAWL_DELAY",
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_PARALLELISM",
]
