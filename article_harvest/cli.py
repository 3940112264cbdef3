"""
Command-line interface for Article Harvest.

Uses Typer to provide a CLI with options for the main configuration
settings. Supports loading .env files so per-site cookies can be kept
out of the config file.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv
import typer
from rich.console import Console
from rich.table import Table

from .config import load_config, load_sites_file
from .errors import HarvestError
from .logging_utils import setup_logging
from .renderer import render_jsonl, render_markdown
from .runner import FetchStats, extract_url, harvest, render_run_summary
from .sites import find_site, load_sites

app = typer.Typer(add_completion=False)
console = Console()


@app.command()
def run(
    output: Path = typer.Option(Path("out"), "--output", "-o"),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    sites_file: Path | None = typer.Option(
        None, "--sites-file", exists=True, readable=True, help="YAML site table."
    ),
    site: list[str] | None = typer.Option(
        None, "--site", "-s", help="Only process the named site (repeatable)."
    ),
    extract: bool | None = typer.Option(
        None, "--extract/--no-extract", help="Fetch and extract article pages."
    ),
    date_policy: str | None = typer.Option(
        None, "--date-policy", help="Bad publish dates: skip or fail."
    ),
    concurrency: int | None = typer.Option(
        None, "--concurrency", help="Maximum requests in flight."
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_file: bool | None = typer.Option(
        None, "--log-file/--no-log-file", help="Enable or disable file logging."
    ),
    output_format: str | None = typer.Option(
        None, "--format", help="Output format: jsonl or markdown."
    ),
):
    """Fetch every configured feed and extract article content.

    Args:
        output: Directory for output files
        config: Optional path to YAML config file
        sites_file: Optional YAML site table replacing the built-in one
        site: Site names to process; all enabled sites when omitted
        extract: Enable/disable article page extraction
        date_policy: Policy for entries with a missing or invalid date
        concurrency: Maximum fetch-and-extract tasks in flight
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Enable/disable file logging
        output_format: Output format (jsonl, markdown)
    """
    load_dotenv()

    cfg = load_config(str(config) if config else None)

    if extract is not None:
        cfg.extract.enabled = extract
    if date_policy:
        cfg.feed.date_policy = date_policy
    if concurrency is not None:
        cfg.fetch.concurrency = concurrency
    if log_level:
        cfg.logging.level = log_level
    if log_file is not None:
        cfg.logging.file = log_file
    if output_format:
        cfg.output.format = output_format

    raw_sites = load_sites_file(str(sites_file)) if sites_file else cfg.sites
    try:
        sites = load_sites(raw_sites, names=site)
    except (ValueError, HarvestError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2)

    output.mkdir(parents=True, exist_ok=True)
    setup_logging(cfg.logging, output)

    stats = FetchStats()
    report = harvest(sites, cfg, stats=stats)
    render_run_summary(report, console)

    articles = report.articles
    if cfg.extract.enabled and not cfg.output.include_failed:
        articles = [article for article in articles if article.has_content]

    if cfg.output.format == "markdown":
        output_path = output / f"{cfg.output.filename}.md"
        title = f"Article Harvest {datetime.now().strftime('%Y-%m-%d')}"
        render_markdown(articles, output_path, title)
    else:
        output_path = output / f"{cfg.output.filename}.jsonl"
        render_jsonl(articles, output_path)
    console.print(f"Output written: {output_path}")

    if report.sites and all(site_report.feed_error for site_report in report.sites):
        raise typer.Exit(code=1)


@app.command("extract")
def extract_command(
    url: str = typer.Argument(..., help="Article page URL."),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    site: str | None = typer.Option(
        None, "--site", "-s", help="Use this site's selectors (name or URL match)."
    ),
    selector: list[str] | None = typer.Option(
        None, "--selector", help="Content selector to try first (repeatable)."
    ),
    exclude: list[str] | None = typer.Option(
        None, "--exclude", help="Extra exclusion selector (repeatable)."
    ),
    html: bool = typer.Option(False, "--html", help="Print cleaned HTML instead of Markdown."),
):
    """Extract the main content of a single article page."""
    load_dotenv()

    cfg = load_config(str(config) if config else None)
    cfg.logging.file = False
    setup_logging(cfg.logging, None)

    sites = load_sites(cfg.sites, include_disabled=True)
    matched = find_site(sites, site or url)
    if site and matched is None:
        console.print(f"[red]Unknown site: {site}[/red]")
        raise typer.Exit(code=2)

    try:
        result = extract_url(url, cfg, matched, selector or (), exclude or ())
    except HarvestError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    if html:
        print(result.html)
    else:
        print(result.text)


@app.command("sites")
def sites_command(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    sites_file: Path | None = typer.Option(None, "--sites-file", exists=True, readable=True),
):
    """List the configured sites."""
    cfg = load_config(str(config) if config else None)
    raw_sites = load_sites_file(str(sites_file)) if sites_file else cfg.sites

    table = Table(title="Sites")
    table.add_column("Name")
    table.add_column("Dialect")
    table.add_column("Feed")
    table.add_column("Selectors")
    table.add_column("Enabled")
    for entry in load_sites(raw_sites, include_disabled=True):
        table.add_row(
            entry.name,
            entry.dialect.value,
            entry.feed_url,
            "\n".join(entry.primary_selectors) or "(heuristic)",
            "yes" if entry.enabled else "no",
        )
    console.print(table)


if __name__ == "__main__":
    app()
