"""Tests for boilerplate removal."""

from __future__ import annotations

import pytest

from article_harvest.cleaner import BASE_RULES, ExclusionRuleSet, clean_html, validate_selectors
from article_harvest.errors import SelectorError


def test_clean_html_removes_base_exclusions():
    html = (
        "<div><p>Keep me</p>"
        "<script>track()</script>"
        "<nav><a href='/'>Home</a></nav>"
        "<aside>Popular posts</aside>"
        "<div class=\"ad\">Buy now</div>"
        "<div class=\"share-buttons\">Share</div>"
        "<form><input name=\"email\"/></form>"
        "<p hidden>Secret</p>"
        "</div>"
    )

    cleaned = clean_html(html)

    assert "Keep me" in cleaned
    assert "track()" not in cleaned
    assert "Home" not in cleaned
    assert "Popular posts" not in cleaned
    assert "Buy now" not in cleaned
    assert "Share" not in cleaned
    assert "email" not in cleaned
    assert "Secret" not in cleaned


def test_clean_html_applies_extra_exclusions():
    html = "<div><p>Body text</p><div class=\"promo\">Subscribe today</div></div>"

    assert "Subscribe today" in clean_html(html)
    assert "Subscribe today" not in clean_html(html, [".promo"])


def test_clean_html_removes_identical_fragments_elsewhere():
    # Only the first <p>Dup</p> matches ".box > p", but the copy under .body
    # serializes identically and goes with it.
    html = (
        "<div class=\"box\"><p>Dup</p></div>"
        "<div class=\"body\"><p>Dup</p><p>Keep</p></div>"
    )

    cleaned = clean_html(html, [".box > p"])

    assert "Dup" not in cleaned
    assert "<p>Keep</p>" in cleaned


def test_clean_html_is_idempotent():
    html = (
        "<article><header>Site title</header>"
        "<p>First paragraph.</p>\n\n\n\n"
        "<aside><p>Related</p></aside>"
        "<p>Second paragraph.</p>"
        "<div class=\"comments\"><p>Nice post</p></div>"
        "</article>"
    )

    once = clean_html(html, [".promo"])

    assert clean_html(once, [".promo"]) == once
    assert "First paragraph." in once
    assert "Second paragraph." in once
    assert "Related" not in once
    assert "Nice post" not in once


def test_clean_html_collapses_blank_line_runs():
    html = "<div><p>a</p>\n\n\n\n<p>b</p>\n  \n\n<p>c</p></div>"

    cleaned = clean_html(html)

    assert "\n\n\n" not in cleaned
    assert "<p>a</p>" in cleaned
    assert "<p>c</p>" in cleaned


def test_clean_html_rejects_invalid_extra_selector():
    with pytest.raises(SelectorError) as excinfo:
        clean_html("<p>x</p>", ["div[["])

    assert excinfo.value.selector == "div[["


def test_rule_set_appends_extras_without_duplicates():
    rules = BASE_RULES.with_extras([".promo", "nav", ".promo"])

    assert rules.selectors[: len(BASE_RULES.selectors)] == BASE_RULES.selectors
    assert rules.selectors.count(".promo") == 1
    assert rules.selectors.count("nav") == 1
    assert BASE_RULES.selectors == ExclusionRuleSet().selectors


def test_validate_selectors_accepts_site_table_syntax():
    validate_selectors(["#cmsBody div.inner", "main section div._body_5d9ad_19", "[role='main']"])


def test_clean_html_reaches_fixed_point_with_cascading_extra():
    # Each pass promotes the next paragraph to :first-child
    html = "<div>" + "".join(f"<p>para {i}</p>" for i in range(12)) + "</div>"

    once = clean_html(html, ["div > p:first-child"])

    assert once == "<div></div>"
    assert clean_html(once, ["div > p:first-child"]) == once
