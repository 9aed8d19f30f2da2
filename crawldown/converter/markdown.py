"""
HTML to Markdown conversion.

Wraps markdownify with GitHub-flavored output settings and a small amount of
post-processing.
"""

import re

import markdownify


EXCESS_NEWLINES = re.compile(r'\n{3,}')


class ConversionError(Exception):
    """Raised when HTML cannot be converted to Markdown."""


class _GithubFlavoredConverter(markdownify.MarkdownConverter):
    """markdownify converter that renders checkboxes as task-list markers."""

    def convert_input(self, el, text, *args, **kwargs):
        if (el.get('type') or '').lower() != 'checkbox':
            return text
        return '[x] ' if el.has_attr('checked') else '[ ] '


class MarkdownConverter:
    """
    Converts HTML fragments to Markdown.

    Produces ATX headings, dash bullets, fenced code blocks, tables,
    ``~~strikethrough~~`` and task-list items. Links are always written
    inline so that they can be rewritten afterwards.
    """

    def __init__(
        self,
        bullet_list_marker: str = '-',
        em_delimiter: str = '*',
        **options
    ):
        """
        Initialize the converter.

        Args:
            bullet_list_marker: Marker used for unordered list items
            em_delimiter: ``*`` or ``_``; strong emphasis doubles it
            **options: Extra markdownify options
        """
        self.options = {
            'heading_style': markdownify.ATX,
            'bullets': bullet_list_marker,
            'strong_em_symbol': markdownify.UNDERSCORE if em_delimiter == '_' else markdownify.ASTERISK,
            'autolinks': False,
        }
        self.options.update(options)
        self._converter = _GithubFlavoredConverter(**self.options)

    def convert(self, html: str) -> str:
        """
        Convert HTML content to Markdown.

        Args:
            html: HTML fragment

        Returns:
            Cleaned Markdown text

        Raises:
            ConversionError: If the input is empty
        """
        if not html:
            raise ConversionError("empty HTML content")

        markdown = self._converter.convert(html)

        return clean_markdown(markdown)


def clean_markdown(markdown: str) -> str:
    """
    Collapse runs of blank lines and trim surrounding whitespace.

    Args:
        markdown: Raw Markdown

    Returns:
        Cleaned Markdown
    """
    markdown = EXCESS_NEWLINES.sub('\n\n', markdown)
    return markdown.strip()


def build_header(title: str, url: str) -> str:
    """
    Build the header placed at the top of every document.

    Args:
        title: Page title
        url: Page URL

    Returns:
        Markdown header ending with a horizontal rule
    """
    return f"# {title}\n\nURL: {url}\n\n---\n\n"
