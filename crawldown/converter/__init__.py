"""
Converter module for turning HTML pages into Markdown documents.
"""

from .markdown import MarkdownConverter, ConversionError, clean_markdown, build_header

__all__ = [
    "MarkdownConverter",
    "ConversionError",
    "clean_markdown",
    "build_header",
]
