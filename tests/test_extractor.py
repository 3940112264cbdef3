"""Tests for main-content selection and scoring."""

from __future__ import annotations

from bs4 import BeautifulSoup
import pytest

from article_harvest import extractor
from article_harvest.errors import SelectorError
from article_harvest.extractor import (
    HEURISTIC,
    content_score,
    extract_main_content,
    extract_with_fallback,
    find_best_candidate,
    link_density,
    score_candidates,
    select_content,
    text_density,
    visible_text,
)


PARAGRAPH = (
    "The quick brown fox jumps over the lazy dog while the committee reviews "
    "the quarterly numbers in detail. "
)


def _paragraphs(count: int) -> str:
    return "".join(f"<p>{PARAGRAPH}</p>" for _ in range(count))


def test_selector_match_is_returned_without_heuristic(monkeypatch):
    html = (
        "<html><body>"
        "<div class=\"promo\"><p>Short promo text.</p></div>"
        f"<div id=\"custom-content\">{_paragraphs(3)}</div>"
        "</body></html>"
    )

    def fail(*args, **kwargs):
        raise AssertionError("heuristic should not run")

    monkeypatch.setattr(extractor, "find_best_candidate", fail)

    fragment, method = select_content(html, ["#missing", "#custom-content"])

    assert method == "#custom-content"
    assert fragment.startswith('<div id="custom-content">')
    assert "Short promo text." not in fragment


def test_selector_below_text_floor_falls_through():
    html = (
        "<html><body>"
        "<div id=\"teaser\"><p>Too short to count.</p></div>"
        f"<article>{_paragraphs(4)}</article>"
        "</body></html>"
    )

    fragment, method = select_content(html, "#teaser")

    assert method == "article"
    assert fragment.startswith("<article>")


def test_extract_main_content_prefers_article_over_chrome():
    html = (
        "<html><body>"
        "<header><h1>Example News</h1></header>"
        "<nav><a href=\"/\">Home</a> <a href=\"/tech\">Tech</a></nav>"
        f"<main><article><h2>Headline</h2>{_paragraphs(5)}</article></main>"
        "<aside>Trending now</aside>"
        "<footer>Copyright Example</footer>"
        "</body></html>"
    )

    fragment = extract_main_content(html)

    assert fragment is not None
    assert fragment.startswith("<article>")
    assert "Headline" in fragment
    assert "Example News" not in fragment
    assert "Copyright" not in fragment
    assert "Trending now" not in fragment


def test_heuristic_picks_densest_block():
    links = "".join(f'<a href="/n{i}">Link {i}</a>' for i in range(5))
    html = (
        "<html><body><div id=\"wrapper\">"
        f"<div class=\"links\">{links}</div>"
        f"<div class=\"story\">{_paragraphs(3)}</div>"
        "</div></body></html>"
    )

    fragment, method = select_content(html)

    assert method == HEURISTIC
    assert fragment.startswith('<div class="story">')


def test_heuristic_skips_non_content_blocks():
    html = f"<html><body><div class=\"menu\">{_paragraphs(3)}</div></body></html>"

    assert extract_main_content(html) is None


def test_heuristic_requires_minimum_text():
    html = "<html><body><div><p>Only a little text here.</p></div></body></html>"

    assert extract_main_content(html) is None
    assert extract_with_fallback(html, ["div"]) is None


def test_find_best_candidate_returns_none_when_no_candidates():
    soup = BeautifulSoup("<html><body><p>plain</p></body></html>", "html.parser")

    assert find_best_candidate(soup) is None


def test_invalid_selector_raises():
    with pytest.raises(SelectorError):
        select_content(f"<div>{_paragraphs(3)}</div>", ["div[["])


def test_content_score_rewards_paragraphs_up_to_cap():
    base = dict(density=0.5, links=0.1, text_length=400)

    assert content_score(paragraph_count=4, **base) > content_score(paragraph_count=3, **base)
    assert content_score(paragraph_count=15, **base) == content_score(paragraph_count=10, **base)


def test_content_score_penalizes_link_density():
    assert content_score(0.5, 0.5, 3, 400) < content_score(0.5, 0.0, 3, 400)


def test_content_score_length_bonuses():
    short = content_score(0.5, 0.0, 3, 400)

    assert content_score(0.5, 0.0, 3, 600) == short + 20
    assert content_score(0.5, 0.0, 3, 1200) == short + 30


def test_content_score_class_and_id_hints():
    base = content_score(0.5, 0.0, 3, 400)

    assert content_score(0.5, 0.0, 3, 400, class_attr="Article-Body") == base + 25
    assert content_score(0.5, 0.0, 3, 400, class_attr="sidebar") == base - 25
    assert content_score(0.5, 0.0, 3, 400, id_attr="main") == base + 25


def test_densities_handle_empty_input():
    soup = BeautifulSoup("<div></div>", "html.parser")

    assert text_density(0, 0) == 0.0
    assert link_density(soup.div) == 0.0


def test_link_density_counts_anchor_text():
    soup = BeautifulSoup('<div>abcd<a href="/x">efgh</a></div>', "html.parser")

    assert link_density(soup.div) == pytest.approx(0.5)


def test_heuristic_tie_keeps_first_in_document_order():
    first = "alpha " * 30
    second = "omega " * 30
    html = f"<html><body><section><p>{first}</p></section><section><p>{second}</p></section></body></html>"
    soup = BeautifulSoup(html, "html.parser")

    scores = [candidate.score for candidate in score_candidates(soup)]
    best = find_best_candidate(soup)

    assert len(scores) == 2
    assert scores[0] == scores[1]
    assert visible_text(best.element).startswith("alpha")


def test_heuristic_returns_none_without_positive_score():
    links = "".join(f'<a href="/topic/{i}">Read the related story {i:02d}</a>' for i in range(5))
    html = f'<html><body><div class="comment-box">{links}</div></body></html>'
    soup = BeautifulSoup(html, "html.parser")

    candidates = score_candidates(soup)

    assert len(candidates) == 1
    assert candidates[0].score <= 0
    assert find_best_candidate(soup) is None
    assert extract_main_content(html) is None


def test_visible_text_skips_script_style_and_comments():
    soup = BeautifulSoup(
        "<div><p>Shown</p><script>var hidden = 1;</script>"
        "<style>p { color: red; }</style><!-- note --></div>",
        "html.parser",
    )

    assert visible_text(soup.div) == "Shown"
