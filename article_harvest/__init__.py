"""
Article Harvest - feed reader and main-content extractor.

This package reads RSS 1.0, RSS 2.0 and Atom feeds from a table of sites,
normalizes every entry into an Article record, then fetches each article
page and extracts its main content as cleaned HTML and Markdown.

Main entry point is the CLI via `article-harvest run` command.

Example:
    $ article-harvest run -o output/
    $ article-harvest extract https://example.com/post
"""

__all__ = [
    "__version__",
    "Article",
    "FeedDialect",
    "SiteConfig",
    "clean_html",
    "extract_article",
    "extract_main_content",
    "normalize_feed",
]
__version__ = "0.1.0"

from .cleaner import clean_html
from .extractor import extract_main_content
from .parser import normalize_feed
from .pipeline import extract_article
from .types import Article, FeedDialect, SiteConfig
