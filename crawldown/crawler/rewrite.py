"""
Link rewriter for converting page URLs to local Markdown files.

Rewrites inline Markdown links that point at crawled pages so the output
works offline.
"""

import re
from typing import List, Mapping, Optional
from urllib.parse import urljoin, urlunsplit

from ..utils.log import get_logger
from ..utils.paths import normalize_url, parse_url, strip_trailing_slash


class LinkLocalizer:
    """
    Rewrites links in Markdown documents to local filenames.

    Works on a frozen URL to filename index, after every page is known.
    """

    # [text](target) or [text](target "title"), but not ![alt](src)
    LINK_PATTERN = re.compile(r'(?<!!)\[([^\]]+)\]\((\S+?)(\s+"[^"]*")?\)')

    # Targets that never refer to a crawled page
    SKIPPED_PREFIXES = ('#', 'mailto:', 'javascript:')

    def __init__(self, url_to_filename: Mapping[str, str]):
        """
        Initialize the link localizer.

        Args:
            url_to_filename: Registry key to local filename mapping
        """
        self.url_to_filename = url_to_filename
        self.logger = get_logger("rewriter")

    def localize(self, markdown: str, source_url: str) -> str:
        """
        Rewrite all links to crawled pages in a document.

        Args:
            markdown: Markdown content
            source_url: URL the document was fetched from

        Returns:
            Markdown with local link targets
        """
        rewritten = 0

        def replace_link(match):
            nonlocal rewritten
            text, target, title = match.group(1), match.group(2), match.group(3) or ''

            local = self._resolve(target, source_url)
            if local is None:
                return match.group(0)

            rewritten += 1
            return f"[{text}]({local}{title})"

        result = self.LINK_PATTERN.sub(replace_link, markdown)

        self.logger.debug(f"Rewrote {rewritten} links in {source_url}")
        return result

    def _resolve(self, target: str, source_url: str) -> Optional[str]:
        """
        Find the local filename for a link target.

        Returns:
            Local target (with fragment) or None if the page was not crawled
        """
        if target.startswith(self.SKIPPED_PREFIXES):
            return None

        absolute = urljoin(source_url, target)
        parsed = parse_url(absolute)
        if parsed is None or not parsed.netloc:
            return None

        for key in self.lookup_keys(absolute):
            filename = self.url_to_filename.get(key)
            if filename is not None:
                if parsed.fragment:
                    return f"{filename}#{parsed.fragment}"
                return filename

        return None

    @staticmethod
    def lookup_keys(url: str) -> List[str]:
        """
        Get the index keys a URL may be registered under, best match first.

        The index is keyed by normalized URLs, while links may carry query
        parameters in any order or none at all.

        Args:
            url: Absolute URL

        Returns:
            Candidate keys without duplicates
        """
        parsed = parse_url(url)
        if parsed is None:
            return []

        base = strip_trailing_slash(
            urlunsplit((parsed.scheme, parsed.netloc, parsed.path, '', ''))
        )

        keys = []
        if parsed.query:
            keys.append(f"{base}?{parsed.query}")
            keys.append(strip_trailing_slash(normalize_url(
                urlunsplit((parsed.scheme, parsed.netloc, parsed.path, parsed.query, ''))
            )))
        keys.append(base)

        return list(dict.fromkeys(keys))


def localize_links(
    markdown: str,
    source_url: str,
    url_to_filename: Mapping[str, str]
) -> str:
    """
    Rewrite links in a Markdown document to local filenames.

    Args:
        markdown: Markdown content
        source_url: URL the document was fetched from
        url_to_filename: Registry key to local filename mapping

    Returns:
        Markdown with local link targets
    """
    return LinkLocalizer(url_to_filename).localize(markdown, source_url)
