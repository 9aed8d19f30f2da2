"""
crawldown - crawl a website and save its pages as linked Markdown files.

This package provides functionality to crawl websites, extract the main
content of each page, convert it to Markdown and rewrite links between pages
so the result can be browsed offline.
"""

__version__ = "1.0.0"
__author__ = "crawldown contributors"
