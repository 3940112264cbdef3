"""
Boilerplate removal for article HTML.

The cleaner removes a fixed taxonomy of non-content elements (navigation,
ads, social widgets, comments, related-article blocks, scripts, forms and
hidden nodes) plus any site-specific selectors supplied by the caller.

Removal works on serialized fragments: every matching element is
serialized, the fragments are deduplicated and sorted longest first, and
each fragment is erased textually from the document string. Two distinct
elements that serialize identically are therefore both removed when
either one matches a rule.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Iterable, Sequence

from bs4 import BeautifulSoup
import soupsieve

from .errors import SelectorError


BASE_EXCLUSIONS: tuple[str, ...] = (
    # Navigation, header and footer
    "nav",
    "header",
    "footer",
    # Sidebars and landmark roles
    "aside",
    "[role='navigation']",
    "[role='complementary']",
    "[role='banner']",
    "[role='contentinfo']",
    # Advertising
    ".ad",
    ".ads",
    ".advertisement",
    ".advert",
    "[class*='ad-']",
    "[class*='ads-']",
    "[id*='ad-']",
    "[id*='ads-']",
    # Social and share widgets
    ".social",
    ".social-share",
    ".share-buttons",
    ".sharing",
    # Comments
    ".comments",
    "#comments",
    ".comment-section",
    # Related and recommended articles
    ".related",
    ".related-posts",
    ".recommended",
    ".suggestions",
    # Scripts and embeds
    "script",
    "style",
    "noscript",
    "iframe",
    # Subscription forms and the like
    "form",
    # Hidden elements
    "[hidden]",
    "[aria-hidden='true']",
    ".hidden",
    ".visually-hidden",
)

_BLANK_LINES_RE = re.compile(r"\n\s*\n\s*\n")


@dataclass(frozen=True)
class ExclusionRuleSet:
    """Ordered, deduplicated set of exclusion selectors."""

    selectors: tuple[str, ...] = BASE_EXCLUSIONS

    def with_extras(self, extras: Iterable[str]) -> ExclusionRuleSet:
        """Return a new rule set with site-specific selectors appended."""
        merged = list(self.selectors)
        for selector in extras:
            if selector and selector not in merged:
                merged.append(selector)
        return ExclusionRuleSet(tuple(merged))

    def compiled(self) -> list[soupsieve.SoupSieve]:
        return [compile_selector(selector) for selector in self.selectors]


BASE_RULES = ExclusionRuleSet()


def compile_selector(selector: str) -> soupsieve.SoupSieve:
    """Compile a CSS selector, raising SelectorError on bad syntax."""
    try:
        return soupsieve.compile(selector)
    except (soupsieve.SelectorSyntaxError, TypeError, ValueError) as exc:
        raise SelectorError(selector, str(exc)) from exc


def validate_selectors(selectors: Iterable[str]) -> None:
    """Compile every selector so configuration errors surface at startup."""
    for selector in selectors:
        compile_selector(selector)


def clean_html(html: str, extra_exclusions: Sequence[str] = ()) -> str:
    """Remove boilerplate elements from an HTML fragment or document.

    The removal pass is repeated until the output no longer changes, so
    the result is a fixed point: cleaning it again returns it unchanged.

    Args:
        html: Raw HTML
        extra_exclusions: Site-specific selectors applied on top of the base set

    Returns:
        The cleaned HTML string

    Raises:
        SelectorError: If an extra selector is not valid CSS
    """
    rules = BASE_RULES.with_extras(extra_exclusions).compiled()
    current = html
    while True:
        cleaned = _clean_once(current, rules)
        if cleaned == current:
            return current
        # After the first re-serialization every changing pass shortens the string
        current = cleaned


def collect_fragments(soup: BeautifulSoup, rules: Sequence[soupsieve.SoupSieve]) -> list[str]:
    """Serialize every element matched by any rule, longest fragment first."""
    fragments: list[str] = []
    seen: set[str] = set()
    for rule in rules:
        for element in rule.select(soup):
            fragment = str(element)
            if fragment not in seen:
                seen.add(fragment)
                fragments.append(fragment)
    # Outer elements go first so nested duplicates are erased with them
    fragments.sort(key=len, reverse=True)
    return fragments


def _clean_once(html: str, rules: Sequence[soupsieve.SoupSieve]) -> str:
    soup = BeautifulSoup(html, "html.parser")
    # Work on the parser's own serialization so fragments match byte for byte
    cleaned = str(soup)
    for fragment in collect_fragments(soup, rules):
        cleaned = cleaned.replace(fragment, "")
    return _BLANK_LINES_RE.sub("\n\n", cleaned)
