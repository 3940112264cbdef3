"""
HTML to Markdown conversion and whitespace normalization.
"""

from __future__ import annotations

import re

import html2text


_WHITESPACE_RUN_RE = re.compile(r"\s\s+")


def html_to_markdown(html: str) -> str:
    """Convert an HTML fragment to Markdown.

    Links, images and tables are kept; lines are not re-wrapped.

    Args:
        html: HTML fragment or document

    Returns:
        Markdown text
    """
    if not html:
        return ""
    handler = html2text.HTML2Text()
    handler.ignore_links = False
    handler.ignore_images = False
    handler.ignore_tables = False
    handler.body_width = 0
    return handler.handle(html)


def trim_text(text: str) -> str:
    """Collapse every run of two or more whitespace characters to one newline."""
    return _WHITESPACE_RUN_RE.sub("\n", text)
