"""
Link filtering for the crawler.

Decides whether a discovered href points at a crawlable page and whether a
URL falls under a user-supplied exclusion prefix.
"""

from enum import Enum
from typing import Iterable

from ..utils.constants import NON_DOCUMENT_SCHEMES
from ..utils.paths import parse_url


# Characters that phone numbers are usually written with
PHONE_CHARS = set('+()-')


class LinkAction(Enum):
    """What the crawler should do with a discovered link."""

    FOLLOW = "follow"
    SKIP = "skip"


def looks_like_email(value: str) -> bool:
    """
    Check if a string looks like a bare email address.

    Args:
        value: String to check

    Returns:
        True for strings like ``user@example.com``
    """
    parts = value.split('@')
    if len(parts) != 2:
        return False
    local, domain = parts
    return bool(local) and bool(domain) and '.' in domain


def looks_like_phone(value: str) -> bool:
    """
    Check if a string looks like a bare phone number.

    Args:
        value: String to check

    Returns:
        True for 7 to 15 digits written with at least one of ``+ ( ) -``
    """
    digits = sum(1 for ch in value if '0' <= ch <= '9')
    return 7 <= digits <= 15 and any(ch in PHONE_CHARS for ch in value)


def classify_link(href: str) -> LinkAction:
    """
    Classify an anchor href.

    Contact details are often linked without a ``mailto:`` or ``tel:``
    prefix; they would otherwise be resolved as relative page paths.

    Args:
        href: Raw href attribute value

    Returns:
        LinkAction.FOLLOW if the link may point at a page, else LinkAction.SKIP
    """
    href = href.strip()

    if not href or href.startswith('#'):
        return LinkAction.SKIP

    if href.lower().startswith(NON_DOCUMENT_SCHEMES):
        return LinkAction.SKIP

    if looks_like_email(href) or looks_like_phone(href):
        return LinkAction.SKIP

    return LinkAction.FOLLOW


def is_excluded(url: str, prefixes: Iterable[str]) -> bool:
    """
    Check a URL against exclusion prefixes.

    A prefix matches the raw URL or the URL without its query string.

    Args:
        url: Absolute URL
        prefixes: Literal URL prefixes

    Returns:
        True if the URL must not be crawled
    """
    prefixes = [prefix for prefix in prefixes if prefix]
    if not prefixes:
        return False

    parsed = parse_url(url)
    if parsed is None:
        return False

    full_path = f"{parsed.scheme}://{parsed.netloc}{parsed.path}"

    return any(
        full_path.startswith(prefix) or url.startswith(prefix)
        for prefix in prefixes
    )
