"""
Core data types for the harvesting pipeline.

This module defines the records exchanged between stages:
- FeedDialect / DatePolicy: feed format tag and missing-date policy
- FeedItem: one normalized feed entry
- Article: canonical article record, content filled in after extraction
- ExtractionResult / ContentCandidate: extraction outputs and scoring state
- SiteConfig: declarative description of one source site
- Failure / SiteReport / RunReport: orchestration results
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from urllib.parse import urlparse
import os


class FeedDialect(str, Enum):
    """XML schema family of a feed payload."""

    RSS1 = "rss1"
    RSS2 = "rss2"
    ATOM = "atom"

    @classmethod
    def parse(cls, value: str | FeedDialect) -> FeedDialect:
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower().replace(".", "").replace("_", "")
        aliases = {
            "rss1": cls.RSS1,
            "rss10": cls.RSS1,
            "rdf": cls.RSS1,
            "rss2": cls.RSS2,
            "rss20": cls.RSS2,
            "rss": cls.RSS2,
            "atom": cls.ATOM,
        }
        if normalized not in aliases:
            raise ValueError(f"Unsupported feed dialect: {value!r}")
        return aliases[normalized]


class DatePolicy(str, Enum):
    """What to do with a feed item whose publish date is missing or invalid."""

    FAIL = "fail"
    SKIP = "skip"

    @classmethod
    def parse(cls, value: str | DatePolicy) -> DatePolicy:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unsupported date policy: {value!r}. Use 'skip' or 'fail'."
            ) from None


@dataclass(frozen=True)
class FeedItem:
    """A single feed entry after normalization.

    Attributes:
        title: Entry title with CDATA unwrapped
        link: URL of the article page
        description: Entry description converted to Markdown, if present
        published_at: Publish timestamp in local time
        raw_date: The date string exactly as it appeared in the feed
    """

    title: str
    link: str
    description: str | None = None
    published_at: datetime | None = None
    raw_date: str | None = None


@dataclass
class ArticleContent:
    """Extracted article body in both representations."""

    html: str = ""
    text: str = ""


@dataclass(frozen=True)
class ExtractionResult:
    """Cleaned main content of one article page."""

    html: str
    text: str


@dataclass(frozen=True)
class Article:
    """Canonical article record.

    Every field is fixed at construction except ``content``, which starts
    empty and is written exactly once by ``set_content``.

    Attributes:
        site_name: Display name of the source site
        site_url: Feed URL of the source site
        title: Article headline
        article_url: URL of the article page
        description: Feed description as Markdown
        published_at: Publish timestamp in local time
        content: Extracted body; empty until extraction succeeds
    """

    site_name: str
    site_url: str
    title: str
    article_url: str
    description: str
    published_at: datetime
    content: ArticleContent = field(default_factory=ArticleContent, compare=False)
    _content_set: bool = field(default=False, init=False, repr=False, compare=False)

    @classmethod
    def from_feed_item(cls, site: SiteConfig, item: FeedItem) -> Article:
        if item.published_at is None:
            raise ValueError(f"Feed item {item.link} has no publish date")
        return cls(
            site_name=site.name,
            site_url=site.feed_url,
            title=item.title,
            article_url=item.link,
            description=item.description or "",
            published_at=item.published_at,
        )

    @property
    def has_content(self) -> bool:
        return self._content_set

    def set_content(self, result: ExtractionResult) -> None:
        """Attach extracted content to the article.

        Raises:
            ValueError: If content was already set
        """
        if self._content_set:
            raise ValueError(f"Content already set for {self.article_url}")
        object.__setattr__(self, "content", ArticleContent(html=result.html, text=result.text))
        object.__setattr__(self, "_content_set", True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "site_name": self.site_name,
            "site_url": self.site_url,
            "title": self.title,
            "article_url": self.article_url,
            "description": self.description,
            "published_at": self.published_at.isoformat(),
            "content": {"html": self.content.html, "text": self.content.text},
        }


@dataclass
class ContentCandidate:
    """Scoring record for one element considered by the heuristic extractor."""

    element: Any
    text_length: int
    html_length: int
    link_density: float
    paragraph_count: int
    score: float = 0.0


@dataclass(frozen=True)
class SiteConfig:
    """Declarative description of a source site.

    Attributes:
        name: Stable display name
        feed_url: URL of the site's feed
        dialect: Feed dialect of the payload at feed_url
        primary_selectors: CSS selectors tried in order for the article body
        exclusion_extras: Site-specific selectors removed in addition to the base set
        domain_override: Canonical hostname when it differs from the feed host
        cookie: Opaque cookie header value sent with every request
        cookie_env: Environment variable that holds the cookie, if any
        enabled: Whether the site takes part in a run
    """

    name: str
    feed_url: str
    dialect: FeedDialect
    primary_selectors: tuple[str, ...] = ()
    exclusion_extras: tuple[str, ...] = ()
    domain_override: str | None = None
    cookie: str = ""
    cookie_env: str | None = None
    enabled: bool = True

    @property
    def domain(self) -> str:
        if self.domain_override:
            return self.domain_override
        return urlparse(self.feed_url).hostname or ""

    def login(self) -> str:
        """Return the cookie header value for this site ("" when none is needed)."""
        if self.cookie_env:
            value = os.getenv(self.cookie_env)
            if value:
                return value
        return self.cookie


@dataclass
class Failure:
    """A failure isolated to one site or one article.

    Attributes:
        site: Site name
        url: Feed or article URL that failed
        kind: "parse", "extraction", "transport", "selector" or "aborted"
        message: Human-readable error message
        selectors: Selectors attempted, for extraction failures
    """

    site: str
    url: str
    kind: str
    message: str
    selectors: tuple[str, ...] = ()


@dataclass
class SiteReport:
    """Outcome of one site's fetch-and-normalize (and extract) cycle."""

    site: str
    articles: list[Article] = field(default_factory=list)
    failures: list[Failure] = field(default_factory=list)
    feed_error: str | None = None

    @property
    def extracted_count(self) -> int:
        return sum(1 for article in self.articles if article.has_content)


@dataclass
class RunReport:
    """Aggregated outcome of a run across all sites."""

    sites: list[SiteReport] = field(default_factory=list)

    @property
    def articles(self) -> list[Article]:
        return [article for report in self.sites for article in report.articles]

    @property
    def failures(self) -> list[Failure]:
        return [failure for report in self.sites for failure in report.failures]

    @property
    def extracted_count(self) -> int:
        return sum(report.extracted_count for report in self.sites)
