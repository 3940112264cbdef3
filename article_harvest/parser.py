"""
Feed normalization for RSS 1.0, RSS 2.0 and Atom payloads.

The caller declares the dialect of each feed; a payload of another family
is rejected rather than silently accepted. Every entry is reduced to a
FeedItem:
- title and description have CDATA wrappers removed
- description HTML is converted to Markdown
- the dialect's native date string is parsed into a local timestamp

Entries with a missing or unparsable date are handled by a single
DatePolicy: SKIP drops the entry (with a warning) and FAIL raises.
"""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
import io
import logging
import re

from dateutil.parser import isoparse
import feedparser

from .errors import ParseError
from .text import html_to_markdown
from .types import Article, DatePolicy, FeedDialect, FeedItem, SiteConfig


logger = logging.getLogger(__name__)

CDATA_RE = re.compile(r"<!\[CDATA\[(?P<text>.+?)\]\]>", re.DOTALL)

# feedparser version strings grouped by dialect family
_DIALECT_VERSIONS: dict[FeedDialect, frozenset[str]] = {
    FeedDialect.RSS1: frozenset({"rss090", "rss10"}),
    FeedDialect.RSS2: frozenset(
        {"rss091n", "rss091u", "rss092", "rss093", "rss094", "rss20", "rss"}
    ),
    FeedDialect.ATOM: frozenset({"atom01", "atom02", "atom03", "atom10", "atom"}),
}

# Entry keys holding the native publish date, in lookup order
_DATE_KEYS: dict[FeedDialect, tuple[str, ...]] = {
    FeedDialect.RSS1: ("updated", "published"),  # dc:date
    FeedDialect.RSS2: ("published",),  # pubDate
    FeedDialect.ATOM: ("published", "updated"),
}


def unwrap_cdata(value: str) -> str:
    """Return the inner text of a CDATA section, or the value unchanged."""
    match = CDATA_RE.search(value)
    if match:
        return match.group("text")
    return value


def parse_feed_date(dialect: FeedDialect, value: str | None) -> datetime:
    """Parse a feed date string in the dialect's native format.

    RSS 2.0 uses RFC 2822; Atom uses RFC 3339; RSS 1.0 uses the W3C-DTF
    profile of ISO 8601 carried in dc:date. Naive timestamps are read as UTC.

    Args:
        dialect: Feed dialect the date comes from
        value: Raw date string

    Returns:
        Timezone-aware datetime in local time

    Raises:
        ParseError: If the value is missing or does not match the format
    """
    if not value or not value.strip():
        raise ParseError("Missing publish date")
    raw = value.strip()
    try:
        if dialect is FeedDialect.RSS2:
            parsed = parsedate_to_datetime(raw)
        else:
            parsed = isoparse(raw)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ParseError(f"Invalid {dialect.value} date {raw!r}: {exc}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone()


def normalize_feed(
    dialect: FeedDialect,
    raw_body: str | bytes,
    policy: DatePolicy = DatePolicy.SKIP,
    source: str = "",
) -> list[FeedItem]:
    """Parse a feed payload into FeedItems.

    Args:
        dialect: Declared dialect of the payload
        raw_body: Feed XML as text or bytes
        policy: What to do with entries whose date is missing or invalid
        source: Site name used in log records

    Returns:
        FeedItems in feed order

    Raises:
        ParseError: If the payload is not a feed of the declared dialect, or
            an entry has a bad date under DatePolicy.FAIL
    """
    dialect = FeedDialect.parse(dialect)
    policy = DatePolicy.parse(policy)
    feed = _parse_payload(dialect, raw_body)

    items: list[FeedItem] = []
    for entry in feed.entries:
        link = _entry_link(entry)
        if not link:
            logger.warning("%s: dropping feed entry without a link (%s)", source or dialect.value, entry.get("title", ""))
            continue

        raw_date = _entry_date(dialect, entry)
        try:
            published_at = parse_feed_date(dialect, raw_date)
        except ParseError as exc:
            if policy is DatePolicy.FAIL:
                raise ParseError(f"{link}: {exc}") from exc
            logger.warning(
                "%s: skipping %s, %s",
                source or dialect.value,
                link,
                exc,
                extra={"event": "item_skipped", "site": source, "url": link, "raw_date": raw_date},
            )
            continue

        description = _entry_description(dialect, entry)
        items.append(
            FeedItem(
                title=unwrap_cdata(entry.get("title", "")).strip(),
                link=link,
                description=html_to_markdown(unwrap_cdata(description)).strip() if description else None,
                published_at=published_at,
                raw_date=raw_date,
            )
        )
    return items


def build_articles(
    site: SiteConfig,
    raw_body: str | bytes,
    policy: DatePolicy = DatePolicy.SKIP,
) -> list[Article]:
    """Normalize a site's feed payload into Article records."""
    items = normalize_feed(site.dialect, raw_body, policy, source=site.name)
    return [Article.from_feed_item(site, item) for item in items]


def _parse_payload(dialect: FeedDialect, raw_body: str | bytes) -> feedparser.FeedParserDict:
    data = raw_body.encode("utf-8") if isinstance(raw_body, str) else raw_body
    feed = feedparser.parse(io.BytesIO(data))
    version = feed.get("version", "")
    if not version:
        reason = feed.get("bozo_exception") or "unrecognized feed format"
        raise ParseError(f"Payload is not a valid {dialect.value} feed: {reason}")
    if version not in _DIALECT_VERSIONS[dialect]:
        raise ParseError(f"Expected a {dialect.value} feed but got {version}")
    if feed.get("bozo"):
        logger.debug("Feed parsed with recoverable errors: %s", feed.get("bozo_exception"))
    return feed


def _entry_link(entry: feedparser.FeedParserDict) -> str:
    link = entry.get("link")
    if link:
        return link.strip()
    for candidate in entry.get("links", []):
        href = candidate.get("href")
        if href:
            return href.strip()
    return ""


def _entry_date(dialect: FeedDialect, entry: feedparser.FeedParserDict) -> str | None:
    for key in _DATE_KEYS[dialect]:
        value = entry.get(key)
        if value:
            return value
    return None


def _entry_description(dialect: FeedDialect, entry: feedparser.FeedParserDict) -> str:
    description = entry.get("summary") or entry.get("description") or ""
    if not description and dialect is FeedDialect.ATOM:
        contents = entry.get("content") or []
        if contents:
            description = contents[0].get("value", "")
    return description
