"""
Fetch orchestration for feeds and article pages.

This module is the only place that performs network I/O. For each site
it fetches and normalizes the feed, then fetches and extracts every
article page. Sites run concurrently, and articles within a site run
concurrently; a shared semaphore bounds the number of tasks in flight.

Failures are isolated: a bad feed fails only its site, a bad article
fails only that article. Every failure is logged with the site name, URL
and selectors attempted, and recorded in the returned report.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
from typing import Sequence

from rich.console import Console

from .config import AppConfig
from .errors import ExtractionError, ParseError, SelectorError, categorize_error
from .fetcher import Fetcher, build_client, make_fetcher
from .logging_utils import log_event
from .parser import build_articles
from .pipeline import extract_article
from .types import Article, DatePolicy, ExtractionResult, Failure, RunReport, SiteConfig, SiteReport


logger = logging.getLogger(__name__)


@dataclass
class FetchStats:
    """Counters collected while a run is in progress.

    Attributes:
        sites: Sites attempted
        feeds_failed: Sites whose feed could not be fetched or parsed
        articles: Articles normalized from feeds
        extracted: Articles whose content was extracted
        fetch_failed: Article pages that could not be fetched
        extract_failed: Article pages with no extractable content
    """
    sites: int = 0
    feeds_failed: int = 0
    articles: int = 0
    extracted: int = 0
    fetch_failed: int = 0
    extract_failed: int = 0


def harvest(
    sites: Sequence[SiteConfig],
    cfg: AppConfig,
    fetch: Fetcher | None = None,
    stats: FetchStats | None = None,
) -> RunReport:
    """Run one harvest cycle over all sites (blocking wrapper)."""
    return asyncio.run(harvest_async(sites, cfg, fetch=fetch, stats=stats))


async def harvest_async(
    sites: Sequence[SiteConfig],
    cfg: AppConfig,
    fetch: Fetcher | None = None,
    stats: FetchStats | None = None,
) -> RunReport:
    """Fetch, normalize and extract every site concurrently.

    Args:
        sites: Sites to process
        cfg: Application configuration
        fetch: Transport callable; None builds a shared httpx client
        stats: Optional counters updated in place

    Returns:
        RunReport with one SiteReport per site, in input order
    """
    DatePolicy.parse(cfg.feed.date_policy)
    stats = stats if stats is not None else FetchStats()
    if fetch is None:
        async with build_client(cfg.fetch) as client:
            return await _harvest_sites(sites, cfg, make_fetcher(client, cfg.fetch.retries), stats)
    return await _harvest_sites(sites, cfg, fetch, stats)


async def _harvest_sites(
    sites: Sequence[SiteConfig],
    cfg: AppConfig,
    fetch: Fetcher,
    stats: FetchStats,
) -> RunReport:
    semaphore = asyncio.Semaphore(max(1, cfg.fetch.concurrency))
    tasks = [asyncio.create_task(harvest_site(site, fetch, cfg, semaphore, stats)) for site in sites]
    results = await asyncio.gather(*tasks, return_exceptions=True)

    reports: list[SiteReport] = []
    for site, result in zip(sites, results):
        if isinstance(result, BaseException):
            # Cancellation or an unexpected bug in one site stays with that site
            logger.error("Site %s aborted: %r", site.name, result)
            reports.append(
                SiteReport(
                    site=site.name,
                    feed_error=repr(result),
                    failures=[Failure(site.name, site.feed_url, "aborted", repr(result))],
                )
            )
            continue
        reports.append(result)

    log_event(
        logger,
        f"Run complete: {stats.articles} articles, {stats.extracted} extracted, "
        f"{len([r for r in reports if r.feed_error])} feed failures",
        event="run_complete",
        sites=stats.sites,
        articles=stats.articles,
        extracted=stats.extracted,
        fetch_failed=stats.fetch_failed,
        extract_failed=stats.extract_failed,
    )
    return RunReport(sites=reports)


async def harvest_site(
    site: SiteConfig,
    fetch: Fetcher,
    cfg: AppConfig,
    semaphore: asyncio.Semaphore,
    stats: FetchStats | None = None,
) -> SiteReport:
    """Fetch and normalize one site's feed, then extract its articles.

    Feed-level failures are recorded on the report, never raised.
    """
    stats = stats if stats is not None else FetchStats()
    stats.sites += 1
    report = SiteReport(site=site.name)
    cookie = site.login()

    async with semaphore:
        result = await fetch(site.feed_url, cookie)

    if not result.ok:
        category = categorize_error(result.error, result.status_code)
        _fail_feed(report, stats, site, "transport", result.error or "Empty response")
        log_event(
            logger,
            f"Feed fetch failed for {site.name}: {result.error}",
            level=logging.WARNING,
            event="feed_failed",
            site=site.name,
            url=site.feed_url,
            status_code=result.status_code,
            error_category=category,
        )
        return report

    try:
        articles = build_articles(site, result.text or "", DatePolicy.parse(cfg.feed.date_policy))
    except ParseError as exc:
        _fail_feed(report, stats, site, "parse", str(exc))
        log_event(
            logger,
            f"Feed parse failed for {site.name}: {exc}",
            level=logging.WARNING,
            event="feed_failed",
            site=site.name,
            url=site.feed_url,
            dialect=site.dialect.value,
        )
        return report

    limit = cfg.feed.max_articles_per_site
    if limit is not None:
        articles = articles[:limit]
    report.articles = articles
    stats.articles += len(articles)
    log_event(
        logger,
        f"{site.name}: {len(articles)} articles from feed",
        event="feed_fetched",
        site=site.name,
        url=site.feed_url,
        count=len(articles),
    )

    if cfg.extract.enabled and articles:
        tasks = [
            asyncio.create_task(_extract_single(site, article, fetch, cfg, semaphore, cookie, stats))
            for article in articles
        ]
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)
        for article, outcome in zip(articles, outcomes):
            if isinstance(outcome, BaseException):
                logger.error("Article task for %s aborted: %r", article.article_url, outcome)
                report.failures.append(
                    Failure(site.name, article.article_url, "aborted", repr(outcome))
                )
            elif outcome is not None:
                report.failures.append(outcome)

    log_event(
        logger,
        f"{site.name}: extracted {report.extracted_count}/{len(articles)}",
        event="site_complete",
        site=site.name,
        articles=len(articles),
        extracted=report.extracted_count,
        failures=len(report.failures),
    )
    return report


async def _extract_single(
    site: SiteConfig,
    article: Article,
    fetch: Fetcher,
    cfg: AppConfig,
    semaphore: asyncio.Semaphore,
    cookie: str,
    stats: FetchStats,
) -> Failure | None:
    url = article.article_url
    async with semaphore:
        result = await fetch(url, cookie)
        if not result.ok:
            stats.fetch_failed += 1
            log_event(
                logger,
                f"Fetch failed for {url}: {result.error}",
                level=logging.WARNING,
                event="fetch_failed",
                site=site.name,
                url=url,
                status_code=result.status_code,
                error_category=categorize_error(result.error, result.status_code),
            )
            return Failure(site.name, url, "transport", result.error or "Empty response")

        try:
            # Parsing and scoring are CPU-bound; keep them off the event loop
            extracted = await asyncio.to_thread(
                extract_article,
                result.text or "",
                site.primary_selectors,
                site.exclusion_extras,
                min_selector_text=cfg.extract.min_selector_text,
                min_candidate_text=cfg.extract.min_candidate_text,
            )
        except (ExtractionError, SelectorError) as exc:
            stats.extract_failed += 1
            kind = "selector" if isinstance(exc, SelectorError) else "extraction"
            log_event(
                logger,
                f"Extraction failed for {url} ({site.name}): {exc}",
                level=logging.WARNING,
                event="extract_failed",
                site=site.name,
                url=url,
                selectors=list(site.primary_selectors),
            )
            return Failure(site.name, url, kind, str(exc), site.primary_selectors)

    article.set_content(extracted)
    stats.extracted += 1
    return None


def _fail_feed(report: SiteReport, stats: FetchStats, site: SiteConfig, kind: str, message: str) -> None:
    stats.feeds_failed += 1
    report.feed_error = message
    report.failures.append(Failure(site.name, site.feed_url, kind, message))


async def extract_url_async(
    url: str,
    cfg: AppConfig,
    site: SiteConfig | None = None,
    selectors: Sequence[str] = (),
    exclusions: Sequence[str] = (),
    fetch: Fetcher | None = None,
) -> ExtractionResult:
    """Fetch one article page and extract its content.

    Site selectors and exclusions are combined with any given explicitly;
    explicit selectors are tried first.

    Raises:
        TransportError: If the page could not be fetched
        ExtractionError: If no content was found or it was empty after cleaning
    """
    all_selectors = tuple(selectors) + (site.primary_selectors if site else ())
    all_exclusions = tuple(exclusions) + (site.exclusion_extras if site else ())
    cookie = site.login() if site else ""

    if fetch is None:
        async with build_client(cfg.fetch) as client:
            result = await make_fetcher(client, cfg.fetch.retries)(url, cookie)
    else:
        result = await fetch(url, cookie)

    html = result.raise_for_error()
    return await asyncio.to_thread(
        extract_article,
        html,
        all_selectors,
        all_exclusions,
        min_selector_text=cfg.extract.min_selector_text,
        min_candidate_text=cfg.extract.min_candidate_text,
    )


def extract_url(
    url: str,
    cfg: AppConfig,
    site: SiteConfig | None = None,
    selectors: Sequence[str] = (),
    exclusions: Sequence[str] = (),
    fetch: Fetcher | None = None,
) -> ExtractionResult:
    """Blocking wrapper around extract_url_async."""
    return asyncio.run(extract_url_async(url, cfg, site, selectors, exclusions, fetch))


def render_run_summary(report: RunReport, console: Console) -> None:
    """Display per-site results and totals to the console."""
    for site_report in report.sites:
        if site_report.feed_error:
            console.print(f"[red]✗[/red] {site_report.site}: {site_report.feed_error}")
            continue
        console.print(
            f"[green]✓[/green] {site_report.site}: "
            f"{site_report.extracted_count}/{len(site_report.articles)} extracted"
        )
    console.print(
        "[bold]Run summary[/bold]: "
        f"sites={len(report.sites)}, articles={len(report.articles)}, "
        f"extracted={report.extracted_count}, failures={len(report.failures)}"
    )

