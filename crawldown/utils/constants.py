"""
Shared constants for crawldown.

Contains common configuration values used across multiple modules.
"""

# Default user agent string for all HTTP requests
DEFAULT_USER_AGENT = "CrawlDown/1.0"

# Default request timeout in seconds
DEFAULT_TIMEOUT = 60

# Default delay between requests to the same host in seconds
DEFAULT_CRAWL_DELAY = 1.0

# Maximum crawl depth by default (the start page is depth 0)
DEFAULT_MAX_DEPTH = 2

# Default number of pages fetched in parallel
DEFAULT_PARALLELISM = 2

# URL schemes that never point at a crawlable document
NON_DOCUMENT_SCHEMES = (
    'javascript:',
    'mailto:',
    'tel:',
    'sms:',
    'fax:',
    'data:',
    'file:',
)

# Selectors tried in order when looking for the main content of a page
MAIN_CONTENT_SELECTORS = (
    'main',
    'article',
    "[role='main']",
    '.content',
    '#content',
    '.main-content',
    '#main-content',
    'body',
)
