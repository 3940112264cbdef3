from __future__ import annotations

from collections import defaultdict
import json
from pathlib import Path
from typing import Iterable

from .types import Article


def render_jsonl(articles: Iterable[Article], output_path: Path) -> int:
    """Write one JSON object per article; returns the number written."""
    count = 0
    with open(output_path, "w", encoding="utf-8") as f:
        for article in articles:
            f.write(json.dumps(article.to_dict(), ensure_ascii=False))
            f.write("\n")
            count += 1
    return count


def render_markdown(articles: Iterable[Article], output_path: Path, title: str) -> int:
    grouped: dict[str, list[Article]] = defaultdict(list)
    for article in articles:
        grouped[article.site_name].append(article)

    total = sum(len(items) for items in grouped.values())
    lines = [f"# {title}", "", f"Total: {total}", ""]
    for site, items in sorted(grouped.items(), key=lambda item: (-len(item[1]), item[0].lower())):
        lines.append(f"## {site}")
        lines.append("")
        for art in sorted(items, key=lambda a: a.published_at, reverse=True):
            lines.append(f"### {art.title}")
            lines.append(f"- Published: {art.published_at.isoformat()}")
            lines.append(f"- Link: {art.article_url}")
            if art.description:
                lines.append(f"- Summary: {art.description}")
            if art.content.text:
                lines.append("")
                lines.append(art.content.text.strip())
            lines.append("")

    output_path.write_text("\n".join(lines), encoding="utf-8")
    return total
