import json
from datetime import datetime, timezone
from pathlib import Path

from article_harvest.renderer import render_jsonl, render_markdown
from article_harvest.types import Article, ExtractionResult


def _sample_article(*, title: str, site: str = "Example Site", hour: int = 10) -> Article:
    return Article(
        site_name=site,
        site_url="https://example.com/feed",
        title=title,
        article_url=f"https://example.com/{title.lower()}",
        description=f"About {title}",
        published_at=datetime(2024, 1, 15, hour, tzinfo=timezone.utc),
    )


def test_render_jsonl_writes_one_object_per_line(tmp_path: Path) -> None:
    output_path = tmp_path / "articles.jsonl"
    first = _sample_article(title="A1")
    first.set_content(ExtractionResult(html="<p>本文</p>", text="本文"))
    second = _sample_article(title="A2")

    count = render_jsonl([first, second], output_path)
    lines = output_path.read_text(encoding="utf-8").splitlines()

    assert count == 2
    assert len(lines) == 2
    record = json.loads(lines[0])
    assert record["title"] == "A1"
    assert record["content"]["text"] == "本文"
    assert record["published_at"] == "2024-01-15T10:00:00+00:00"
    assert json.loads(lines[1])["content"] == {"html": "", "text": ""}


def test_render_markdown_outputs_grouped_sections(tmp_path: Path) -> None:
    output_path = tmp_path / "articles.md"
    with_body = _sample_article(title="T2", site="Tech", hour=12)
    with_body.set_content(ExtractionResult(html="<p>Body</p>", text="Body text"))
    articles = [
        _sample_article(title="T1", site="Tech", hour=9),
        with_body,
        _sample_article(title="N1", site="News"),
    ]

    total = render_markdown(articles, output_path, title="Daily Harvest")
    text = output_path.read_text(encoding="utf-8")

    assert total == 3
    assert "# Daily Harvest" in text
    assert text.index("## Tech") < text.index("## News")
    # Newest first within a site
    assert text.index("### T2") < text.index("### T1")
    assert "Body text" in text
    assert "- Summary: About N1" in text
