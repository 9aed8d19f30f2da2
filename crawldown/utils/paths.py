"""
Path and URL utilities for crawldown.

Provides URL normalization, local filename generation, and output file
management.
"""

import os
import re
import tempfile
from typing import Optional
from urllib.parse import urlsplit, urlunsplit, parse_qsl, urlencode, unquote, SplitResult


# Valid URL scheme per RFC 3986
SCHEME_PATTERN = re.compile(r'^[A-Za-z][A-Za-z0-9+.\-]*$')

# Characters that cannot appear in a generated filename
INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*=&]')

DASH_RUN = re.compile(r'-+')

# Mode of newly created documents before the umask is applied
FILE_MODE = 0o666


def parse_url(url: str) -> Optional[SplitResult]:
    """
    Parse a URL, rejecting inputs with a malformed scheme.

    ``urlsplit`` accepts almost anything, so a leading segment such as
    ``://host`` is checked explicitly.

    Args:
        url: URL string to parse

    Returns:
        SplitResult, or None if the URL cannot be parsed
    """
    try:
        parsed = urlsplit(url)
    except ValueError:
        return None

    head = re.split(r'[/?#]', url, maxsplit=1)[0]
    if ':' in head and not SCHEME_PATTERN.match(head.split(':', 1)[0]):
        return None

    return parsed


def normalize_url(url: str) -> str:
    """
    Normalize a URL by sorting its query parameters by key.

    Duplicate keys keep their relative order. Scheme, host, path and
    fragment are left untouched. Unparsable input is returned as-is.

    Args:
        url: URL to normalize

    Returns:
        Normalized URL string
    """
    parsed = parse_url(url)
    if parsed is None or not parsed.query:
        return url

    params = parse_qsl(parsed.query, keep_blank_values=True)
    params.sort(key=lambda pair: pair[0])

    return urlunsplit(parsed._replace(query=urlencode(params)))


def strip_trailing_slash(url: str) -> str:
    """Remove a single trailing slash from a URL."""
    return url[:-1] if url.endswith('/') else url


def registry_key(url: str) -> str:
    """
    Get the identity key of a page URL.

    Two URLs that differ only in query order or in a trailing slash share
    the same key.
    """
    return strip_trailing_slash(normalize_url(url))


def get_domain(url: str) -> str:
    """
    Extract the domain (host and port) from a URL.

    Args:
        url: URL to extract domain from

    Returns:
        Domain string (e.g., 'example.com')
    """
    parsed = parse_url(url)
    if parsed is None:
        return ""
    return parsed.netloc.lower()


def sanitize_filename(filename: str) -> str:
    """
    Replace characters that are unsafe in filenames with dashes.

    Args:
        filename: Raw filename

    Returns:
        Sanitized filename, or ``"page"`` if nothing usable remains
    """
    filename = INVALID_FILENAME_CHARS.sub('-', filename)
    filename = DASH_RUN.sub('-', filename)
    filename = filename.strip('-')
    return filename or "page"


def generate_filename(url: str) -> str:
    """
    Derive a local Markdown filename from a page URL.

    The result depends only on the URL string, so a page and every link to
    it resolve to the same name. Distinct URLs may map to the same name.

    Args:
        url: Page URL

    Returns:
        Filename ending in ``.md``
    """
    parsed = parse_url(url)
    if parsed is None:
        return "index.md"

    path = unquote(parsed.path)
    query = parsed.query

    if path in ('', '/'):
        if query:
            filename = "index-" + sanitize_filename(query)
            if not filename.endswith('.md'):
                filename += '.md'
            return filename
        return "index.md"

    if path.startswith('/'):
        path = path[1:]
    path = strip_trailing_slash(path)

    # Flatten subdirectories
    filename = path.replace('/', '-')

    if query:
        filename = f"{filename}-{query}"

    filename = sanitize_filename(filename)

    if not filename.endswith('.md'):
        filename = os.path.splitext(filename)[0] + '.md'

    return filename


def ensure_dir(path: str) -> None:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists
    """
    os.makedirs(path, exist_ok=True)


def _current_umask() -> int:
    # The umask can only be read by setting it
    mask = os.umask(0)
    os.umask(mask)
    return mask


def write_text_atomic(path: str, content: str) -> None:
    """
    Write a text file so that it is either fully written or not at all.

    The content goes to a temporary file in the target directory which is
    then renamed over the destination. The file gets the usual permissions
    of a new file (0666 minus the umask), not the private mode of mkstemp.

    Args:
        path: Destination file path
        content: Text to write

    Raises:
        OSError: If the file cannot be written
    """
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.', suffix='.tmp')
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            f.write(content)
        os.chmod(tmp_path, FILE_MODE & ~_current_umask())
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise
