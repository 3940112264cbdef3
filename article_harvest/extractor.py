"""
Main-content extraction with selector probing and a scoring fallback.

Extraction runs in two phases:
1. Selector phase: each caller-supplied selector is tried in order and the
   first match with enough visible text is returned as-is.
2. Heuristic phase: every div/section/article/main element is scored on
   text density, link density, paragraph count, text length and
   class/id hints, and the best positive score wins.
"""

from __future__ import annotations

import logging
from typing import Sequence

from bs4 import BeautifulSoup, CData, NavigableString, Tag

from .cleaner import compile_selector
from .types import ContentCandidate


logger = logging.getLogger(__name__)

MIN_SELECTOR_TEXT = 200
MIN_CANDIDATE_TEXT = 100
MAX_SCORED_PARAGRAPHS = 10

HEURISTIC = "heuristic"

# Built-in probe for pages whose markup uses conventional content containers
CONTENT_SELECTORS: tuple[str, ...] = (
    "article",
    "main",
    "[role='main']",
    ".article",
    ".content",
    ".post",
    ".entry",
    ".post-content",
    ".article-content",
    ".entry-content",
    "#content",
    "#main",
    "#article",
)

NON_CONTENT_SELECTORS: tuple[str, ...] = (
    "nav",
    "header",
    "footer",
    "aside",
    ".sidebar",
    ".menu",
    ".navigation",
    ".comment",
    ".comments",
    ".footer",
    ".header",
)

CANDIDATE_TAGS = ["div", "section", "article", "main"]

_POSITIVE_CLASS_HINTS = ("article", "content", "post")
_NEGATIVE_CLASS_HINTS = ("sidebar", "comment", "nav")
_POSITIVE_ID_HINTS = ("article", "content", "main")


def visible_text(element: Tag) -> str:
    """Return the text a reader would see.

    Only plain and CDATA strings count; the exact-type match in get_text
    leaves out comments and the Script/Stylesheet strings html.parser
    creates for <script> and <style>.
    """
    return element.get_text(types=(NavigableString, CData))


def text_density(html_length: int, text_length: int) -> float:
    """Ratio of visible text length to serialized HTML length."""
    if html_length == 0:
        return 0.0
    return text_length / html_length


def link_density(element: Tag, text_length: int | None = None) -> float:
    """Ratio of anchor text to all visible text (0 when there is no text)."""
    if text_length is None:
        text_length = len(visible_text(element))
    if text_length == 0:
        return 0.0
    link_length = sum(len(anchor.get_text()) for anchor in element.find_all("a"))
    return link_length / text_length


def content_score(
    density: float,
    links: float,
    paragraph_count: int,
    text_length: int,
    class_attr: str = "",
    id_attr: str = "",
) -> float:
    """Score how much an element looks like an article body.

    Args:
        density: Text density of the element
        links: Link density of the element
        paragraph_count: Number of <p> descendants
        text_length: Visible text length
        class_attr: The element's class attribute
        id_attr: The element's id attribute

    Returns:
        The content score; higher is more article-like
    """
    score = density * 100.0
    score -= links * 50.0
    score += min(paragraph_count, MAX_SCORED_PARAGRAPHS) * 5.0

    if text_length > 500:
        score += 20.0
    if text_length > 1000:
        score += 10.0

    class_lower = class_attr.lower()
    if any(hint in class_lower for hint in _POSITIVE_CLASS_HINTS):
        score += 25.0
    if any(hint in class_lower for hint in _NEGATIVE_CLASS_HINTS):
        score -= 25.0
    id_lower = id_attr.lower()
    if any(hint in id_lower for hint in _POSITIVE_ID_HINTS):
        score += 25.0
    return score


def measure_candidate(element: Tag) -> ContentCandidate:
    """Build a scored candidate record for an element."""
    html = str(element)
    text_length = len(visible_text(element))
    candidate = ContentCandidate(
        element=element,
        text_length=text_length,
        html_length=len(html),
        link_density=link_density(element, text_length),
        paragraph_count=len(element.find_all("p")),
    )
    candidate.score = content_score(
        text_density(candidate.html_length, text_length),
        candidate.link_density,
        candidate.paragraph_count,
        text_length,
        class_attr=_attr_text(element, "class"),
        id_attr=_attr_text(element, "id"),
    )
    return candidate


def calculate_content_score(element: Tag) -> float:
    return measure_candidate(element).score


def score_candidates(soup: BeautifulSoup, min_text: int = MIN_CANDIDATE_TEXT) -> list[ContentCandidate]:
    """Score every eligible candidate element in document order."""
    non_content = _non_content_fragments(soup)
    candidates: list[ContentCandidate] = []
    for element in soup.find_all(CANDIDATE_TAGS):
        if len(visible_text(element)) < min_text:
            continue
        # Equality of serialized HTML, not node identity
        if str(element) in non_content:
            continue
        candidates.append(measure_candidate(element))
    return candidates


def find_best_candidate(soup: BeautifulSoup, min_text: int = MIN_CANDIDATE_TEXT) -> ContentCandidate | None:
    """Return the candidate with the strictly highest positive score.

    Ties keep the first candidate in document order.
    """
    best: ContentCandidate | None = None
    best_score = 0.0
    for candidate in score_candidates(soup, min_text):
        if candidate.score > best_score:
            best_score = candidate.score
            best = candidate
    return best


def select_by_selectors(
    soup: BeautifulSoup,
    selectors: Sequence[str],
    min_text: int = MIN_SELECTOR_TEXT,
) -> tuple[str | None, str | None]:
    """Try selectors in order; return (fragment, selector) for the first usable match.

    Only the first match of each selector is considered.

    Raises:
        SelectorError: If a selector is not valid CSS
    """
    for selector in selectors:
        element = compile_selector(selector).select_one(soup)
        if element is None:
            continue
        if len(visible_text(element)) > min_text:
            return str(element), selector
        logger.debug("Selector %s matched but text is below %d chars", selector, min_text)
    return None, None


def select_content(
    html: str,
    selectors: str | Sequence[str] | None = None,
    *,
    min_selector_text: int = MIN_SELECTOR_TEXT,
    min_candidate_text: int = MIN_CANDIDATE_TEXT,
) -> tuple[str | None, str | None]:
    """Find the main-content fragment and report which phase produced it.

    Args:
        html: Full HTML document
        selectors: A selector or ordered list of selectors to try first
        min_selector_text: Visible-text floor for selector matches
        min_candidate_text: Visible-text floor for heuristic candidates

    Returns:
        (fragment, method) where method is the winning selector or
        "heuristic"; (None, None) when nothing was found
    """
    soup = BeautifulSoup(html, "html.parser")
    fragment, selector = select_by_selectors(soup, _as_list(selectors), min_selector_text)
    if fragment is not None:
        return fragment, selector
    return _extract_main_content(soup, min_selector_text, min_candidate_text)


def extract_main_content(
    html: str,
    *,
    min_selector_text: int = MIN_SELECTOR_TEXT,
    min_candidate_text: int = MIN_CANDIDATE_TEXT,
) -> str | None:
    """Extract the main content of a document without site selectors."""
    soup = BeautifulSoup(html, "html.parser")
    fragment, _ = _extract_main_content(soup, min_selector_text, min_candidate_text)
    return fragment


def extract_with_fallback(
    html: str,
    selectors: str | Sequence[str] | None,
    *,
    min_selector_text: int = MIN_SELECTOR_TEXT,
    min_candidate_text: int = MIN_CANDIDATE_TEXT,
) -> str | None:
    """Try the primary selector(s) first, then fall back to the heuristic."""
    fragment, _ = select_content(
        html,
        selectors,
        min_selector_text=min_selector_text,
        min_candidate_text=min_candidate_text,
    )
    return fragment


def _extract_main_content(
    soup: BeautifulSoup,
    min_selector_text: int,
    min_candidate_text: int,
) -> tuple[str | None, str | None]:
    fragment, selector = select_by_selectors(soup, CONTENT_SELECTORS, min_selector_text)
    if fragment is not None:
        return fragment, selector
    best = find_best_candidate(soup, min_candidate_text)
    if best is None:
        return None, None
    return str(best.element), HEURISTIC


def _non_content_fragments(soup: BeautifulSoup) -> set[str]:
    fragments: set[str] = set()
    for selector in NON_CONTENT_SELECTORS:
        for element in compile_selector(selector).select(soup):
            fragments.add(str(element))
    return fragments


def _attr_text(element: Tag, name: str) -> str:
    value = element.get(name)
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


def _as_list(selectors: str | Sequence[str] | None) -> list[str]:
    if not selectors:
        return []
    if isinstance(selectors, str):
        return [selectors]
    return [selector for selector in selectors if selector]
