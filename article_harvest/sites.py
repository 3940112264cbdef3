"""
Site table: which feeds to read and how to find each article body.

Sites are plain data. Each entry names the feed URL, its dialect, the
ordered selectors for the article body, and optional site-specific
exclusion selectors. Entries come from the built-in DEFAULT_SITES table
or from YAML with the same keys.

All selectors are compiled when the table is loaded, so a typo in a
selector fails at startup instead of on every fetch.
"""

from __future__ import annotations

from typing import Any, Iterable, Sequence
from urllib.parse import urlparse

from .cleaner import validate_selectors
from .types import FeedDialect, SiteConfig


_ITMEDIA_EXCLUSIONS = [
    ".premium-info",
    ".premium-banner",
    ".article-rating",
    ".feedback",
    ".newsletter",
    ".member-banner",
    ".read-more",
    ".colBoxPremium",
]

DEFAULT_SITES: list[dict[str, Any]] = [
    {
        "name": "AI IT Now",
        "feed_url": "https://ainow.ai/feed/",
        "dialect": "rss2",
        "selectors": ["body div.contents div.article_area div.entry-content"],
    },
    {
        "name": "AI News",
        "feed_url": "https://ai-news.dev/feeds/",
        "dialect": "atom",
        "selectors": [],
    },
    {
        "name": "AIZINE",
        "feed_url": "https://otafuku-lab.co/aizine/feed/",
        "dialect": "rss2",
        "selectors": ["#main article div.entry-content"],
    },
    {
        "name": "Cookpad Tech Blog",
        "feed_url": "https://techlife.cookpad.com/rss",
        "dialect": "atom",
        "selectors": ["#main article div.entry-content"],
    },
    {
        "name": "DeNA Engineering Blog",
        "feed_url": "https://engineering.dena.com/index.xml",
        "dialect": "rss2",
        "selectors": ["main article section.content-box"],
    },
    {
        "name": "Gigazine",
        "feed_url": "https://gigazine.net/news/rss_2.0/",
        "dialect": "rss2",
        "selectors": ["#article div.cntimage"],
        "exclusions": [".bnrbox", ".cntbnr", ".relatedarticle", ".amazonbox", ".rakutenbox"],
    },
    {
        "name": "GREE Tech Blog",
        "feed_url": "https://labs.gree.jp/blog/feed",
        "dialect": "rss2",
        "selectors": ["div.site-body article div.entry-body"],
        "domain": "labs.gree.jp",
    },
    {
        "name": "ITMedia @IT",
        "feed_url": "https://rss.itmedia.co.jp/rss/2.0/ait.xml",
        "dialect": "rss2",
        "selectors": ["#cmsBody div.inner"],
        "exclusions": _ITMEDIA_EXCLUSIONS,
        "domain": "atmarkit.itmedia.co.jp",
    },
    {
        "name": "ITMedia Executive",
        "feed_url": "https://rss.itmedia.co.jp/rss/2.0/executive.xml",
        "dialect": "rss2",
        "selectors": ["#cmsBody div.inner"],
        "exclusions": _ITMEDIA_EXCLUSIONS,
        "domain": "mag.executive.itmedia.co.jp",
    },
    {
        "name": "Mercari Engineering Blog",
        "feed_url": "https://engineering.mercari.com/blog/feed.xml",
        "dialect": "rss2",
        "selectors": [
            "div.page-content",
            "main div.page-content",
            "main section div._body_5d9ad_19",
        ],
    },
    {
        "name": "Nikkei XTech",
        "feed_url": "https://xtech.nikkei.com/rss/index.rdf",
        "dialect": "rss1",
        "selectors": [
            "div.article_body",
            "article.article div.articleBody",
            "article.p-article .p-article_body",
        ],
    },
    {
        "name": "Retrieva",
        "feed_url": "https://retrieva.jp/news/feed/",
        "dialect": "rss2",
        "selectors": ["#content article div.entry-content"],
    },
    {
        "name": "Rust Blog",
        "feed_url": "https://blog.rust-lang.org/feed",
        "dialect": "atom",
        "selectors": ["section div.post"],
    },
    {
        "name": "TechCrunch",
        "feed_url": "https://techcrunch.com/feed/",
        "dialect": "rss2",
        "selectors": ["main div.entry-content"],
    },
    {
        "name": "Tokyo University Engineering",
        "feed_url": "https://www.t.u-tokyo.ac.jp/press/rss.xml",
        "dialect": "rss2",
        "selectors": [
            "div.blog-body-1__content",
            "main div.ly_cont div.blog_title",
            "div.bl_wysiwyg",
        ],
    },
    {
        "name": "Trend Micro Security Advisories",
        "feed_url": "http://feeds.trendmicro.com/jp/SecurityAdvisories",
        "dialect": "rss2",
        "selectors": ["section.TEArticle div.articleContainer"],
    },
    {
        "name": "Zenn LLM",
        "feed_url": "https://zenn.dev/topics/llm/feed",
        "dialect": "rss2",
        "selectors": ["article section"],
        "exclusions": [".LikeButton", ".BookmarkButton", ".AuthorProfile", ".SupportButton"],
    },
]


def site_from_dict(raw: dict[str, Any]) -> SiteConfig:
    """Build a SiteConfig from a table entry.

    Accepted keys: name, feed_url (or url), dialect, selectors (string or
    list), exclusions, domain, cookie, cookie_env, enabled.

    Raises:
        ValueError: If a required key is missing or the dialect is unknown
        SelectorError: If any selector does not compile
    """
    name = raw.get("name")
    feed_url = raw.get("feed_url") or raw.get("url")
    if not name or not feed_url:
        raise ValueError(f"Site entry needs 'name' and 'feed_url': {raw!r}")
    if "dialect" not in raw:
        raise ValueError(f"Site {name!r} has no 'dialect'")

    selectors = _as_tuple(raw.get("selectors"))
    exclusions = _as_tuple(raw.get("exclusions"))
    validate_selectors(selectors)
    validate_selectors(exclusions)

    return SiteConfig(
        name=str(name),
        feed_url=str(feed_url),
        dialect=FeedDialect.parse(raw["dialect"]),
        primary_selectors=selectors,
        exclusion_extras=exclusions,
        domain_override=raw.get("domain"),
        cookie=str(raw.get("cookie") or ""),
        cookie_env=raw.get("cookie_env"),
        enabled=bool(raw.get("enabled", True)),
    )


def load_sites(
    raw_sites: Sequence[dict[str, Any]] | None = None,
    names: Iterable[str] | None = None,
    include_disabled: bool = False,
) -> list[SiteConfig]:
    """Load and validate the site table.

    Args:
        raw_sites: Site entries; None uses DEFAULT_SITES
        names: Optional site names to keep (case-insensitive)
        include_disabled: Whether to keep entries with enabled: false

    Returns:
        SiteConfigs in table order

    Raises:
        ValueError: If a requested name is unknown or two sites share a name
        SelectorError: If any selector does not compile
    """
    entries = DEFAULT_SITES if raw_sites is None else raw_sites
    sites = [site_from_dict(entry) for entry in entries]

    seen: set[str] = set()
    for site in sites:
        key = site.name.lower()
        if key in seen:
            raise ValueError(f"Duplicate site name: {site.name}")
        seen.add(key)

    if names:
        wanted = {name.lower() for name in names}
        unknown = wanted - seen
        if unknown:
            raise ValueError(f"Unknown site(s): {', '.join(sorted(unknown))}")
        # Explicitly requested sites run even when disabled
        return [site for site in sites if site.name.lower() in wanted]

    if include_disabled:
        return sites
    return [site for site in sites if site.enabled]


def find_site(sites: Sequence[SiteConfig], name_or_url: str) -> SiteConfig | None:
    """Find a site by name, or by the hostname of an article URL.

    A URL matches a site when its hostname is the site domain or a
    subdomain of it.
    """
    key = name_or_url.strip().lower()
    for site in sites:
        if site.name.lower() == key:
            return site
    try:
        host = urlparse(key).hostname
    except ValueError:
        return None
    if not host:
        return None
    for site in sites:
        domain = site.domain.lower()
        if domain and (host == domain or host.endswith("." + domain)):
            return site
    return None


def _as_tuple(value: Any) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(item) for item in value if item)
