"""
Article extraction pipeline.

Chains the extraction stages for one article page:
1. Select the main-content fragment (site selectors, then heuristic)
2. Remove boilerplate with the base and site-specific exclusions
3. Convert the cleaned HTML to Markdown
4. Collapse whitespace runs in both representations
"""

from __future__ import annotations

import logging
from typing import Sequence

from .cleaner import clean_html
from .errors import ExtractionError
from .extractor import MIN_CANDIDATE_TEXT, MIN_SELECTOR_TEXT, select_content
from .text import html_to_markdown, trim_text
from .types import ExtractionResult


logger = logging.getLogger(__name__)


def extract_article(
    raw_html: str,
    primary_selectors: str | Sequence[str] = (),
    exclusion_extras: Sequence[str] = (),
    *,
    min_selector_text: int = MIN_SELECTOR_TEXT,
    min_candidate_text: int = MIN_CANDIDATE_TEXT,
) -> ExtractionResult:
    """Extract clean HTML and Markdown text from an article page.

    Args:
        raw_html: The full article page
        primary_selectors: Selector or ordered selectors for the article body
        exclusion_extras: Site-specific selectors to strip from the body
        min_selector_text: Visible-text floor for selector matches
        min_candidate_text: Visible-text floor for heuristic candidates

    Returns:
        ExtractionResult with whitespace-normalized html and text

    Raises:
        ExtractionError: If no content element is found, or if the chosen
            element has no text left after cleaning. The second case is a
            failure rather than an empty result, so an article never gets
            empty content.
        SelectorError: If a selector is not valid CSS
    """
    selectors = (primary_selectors,) if isinstance(primary_selectors, str) else tuple(primary_selectors)
    fragment, method = select_content(
        raw_html,
        selectors,
        min_selector_text=min_selector_text,
        min_candidate_text=min_candidate_text,
    )
    if fragment is None:
        raise ExtractionError("No content element found", selectors)
    logger.debug("Content selected by %s", method)

    cleaned = clean_html(fragment, exclusion_extras)
    text = html_to_markdown(cleaned)
    if not text.strip():
        raise ExtractionError(f"Content selected by {method} is empty after cleaning", selectors)

    return ExtractionResult(html=trim_text(cleaned), text=trim_text(text))
