"""
Run configuration: one dataclass per YAML section, defaults in code.

A config file only needs the keys it changes. Sections:
- fetch: client timeout, pool limits, retries and the concurrency bound
- feed: date policy and per-site article cap
- extract: whether to extract, and the visible-text floors
- logging: console and run-log settings
- output: writer format and file name
- sites: optional site table replacing the built-in one
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

import yaml


@dataclass
class FetchConfig:
    """Configuration for HTTP fetching.

    Attributes:
        timeout_seconds: Deadline for each request
        retries: Retry attempts after a failed request (0 disables retry)
        concurrency: Maximum number of fetch-and-extract tasks in flight
        trust_env: Honor HTTP(S)_PROXY and related environment variables
        user_agent: User-Agent header; empty uses "article-harvest/<version>"
        max_connections: Connection pool size of the shared client
        max_keepalive_connections: Idle connections kept in the pool
    """

    timeout_seconds: float = 60.0
    retries: int = 0
    concurrency: int = 8
    trust_env: bool = True
    user_agent: str = ""
    max_connections: int = 20
    max_keepalive_connections: int = 10


@dataclass
class FeedConfig:
    """Configuration for feed normalization.

    Attributes:
        date_policy: "skip" drops entries with a bad date, "fail" fails the feed
        max_articles_per_site: Optional cap on articles taken from each feed
    """

    date_policy: str = "skip"
    max_articles_per_site: int | None = None


@dataclass
class ExtractConfig:
    """Configuration for article content extraction.

    Attributes:
        enabled: Whether to fetch and extract article pages at all
        min_selector_text: Visible-text floor for selector matches
        min_candidate_text: Visible-text floor for heuristic candidates
    """

    enabled: bool = True
    min_selector_text: int = 200
    min_candidate_text: int = 100


@dataclass
class LoggingConfig:
    """Console and run-log settings.

    Attributes:
        level: Level name such as "INFO" or "DEBUG"
        console: Log to the terminal through Rich
        file: Write a run log into the output directory
        format: Run log format, "jsonl" or "plain"
        filename: Name of the log file inside the output directory
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "run.jsonl"


@dataclass
class OutputConfig:
    """Output writer settings.

    Attributes:
        format: "jsonl" or "markdown"
        filename: Output file name without extension
        include_failed: Whether articles without extracted content are written
    """

    format: str = "jsonl"
    filename: str = "articles"
    include_failed: bool = False


@dataclass
class AppConfig:
    """All configuration sections plus the optional raw site table."""

    fetch: FetchConfig = field(default_factory=FetchConfig)
    feed: FeedConfig = field(default_factory=FeedConfig)
    extract: ExtractConfig = field(default_factory=ExtractConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    sites: list[dict[str, Any]] | None = None


def load_config(path: str | None) -> AppConfig:
    """Read a YAML config file over the defaults; no path means all defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(AppConfig(), raw)


def load_sites_file(path: str) -> list[dict[str, Any]]:
    """Load a site table from YAML (either a list or a mapping with a "sites" key)."""
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or []
    if isinstance(raw, dict):
        raw = raw.get("sites") or []
    if not isinstance(raw, list):
        raise ValueError(f"Sites file {path} must contain a list of sites")
    return raw


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Overlay known keys from raw YAML onto base; unknown keys are ignored."""
    data = asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if key in _SECTIONS and isinstance(value, dict):
            data[key].update({k: v for k, v in value.items() if k in data[key]})
        elif key not in _SECTIONS:
            data[key] = value
    return _fromdict(data)


def _fromdict(data: dict[str, Any]) -> AppConfig:
    sections = {name: cls(**data[name]) for name, cls in _SECTIONS.items()}
    return AppConfig(sites=data.get("sites"), **sections)


_SECTIONS: dict[str, type] = {
    "fetch": FetchConfig,
    "feed": FeedConfig,
    "extract": ExtractConfig,
    "logging": LoggingConfig,
    "output": OutputConfig,
}
