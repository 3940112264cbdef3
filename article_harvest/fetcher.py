"""
HTTP transport for feed and article fetches.

One httpx.AsyncClient is built per run and shared by every fetch task;
it is never mutated after construction. Fetches return a FetchResult
rather than raising, so the orchestrator can record failures per site
and per article.
"""

from __future__ import annotations

from dataclasses import dataclass
import asyncio
from typing import Awaitable, Callable

import httpx

from . import __version__
from .config import FetchConfig
from .errors import TransportError


@dataclass
class FetchResult:
    """Outcome of one GET request.

    Exactly one of text and error is set.

    Attributes:
        url: Requested URL
        status_code: Final status after redirects; None when no response arrived
        text: Decoded body of a 2xx response
        error: Why the fetch produced no usable body
    """
    url: str
    status_code: int | None
    text: str | None
    error: str | None

    @property
    def ok(self) -> bool:
        return self.error is None and self.text is not None

    def raise_for_error(self) -> str:
        """Return the body, or raise TransportError if the fetch failed."""
        if not self.ok:
            raise TransportError(self.url, self.error or "Empty response", self.status_code)
        return self.text or ""


Fetcher = Callable[[str, str], Awaitable[FetchResult]]


def default_user_agent() -> str:
    return f"article-harvest/{__version__}"


def build_client(cfg: FetchConfig, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    """Build the shared async HTTP client.

    Args:
        cfg: Fetch configuration (timeout, pool limits, user agent, proxies)
        transport: Optional transport override, used by tests

    Returns:
        A configured httpx.AsyncClient; the caller owns closing it
    """
    headers = {"User-Agent": cfg.user_agent or default_user_agent()}
    limits = httpx.Limits(
        max_connections=cfg.max_connections,
        max_keepalive_connections=cfg.max_keepalive_connections,
    )
    return httpx.AsyncClient(
        timeout=cfg.timeout_seconds,
        headers=headers,
        limits=limits,
        follow_redirects=True,
        trust_env=cfg.trust_env,
        transport=transport,
    )


async def fetch_text(
    client: httpx.AsyncClient,
    url: str,
    cookie: str = "",
    retries: int = 0,
) -> FetchResult:
    """Fetch a URL with the shared client.

    Non-2xx responses are reported as errors. With retries > 0, failed
    attempts are retried with a linear backoff.

    Args:
        client: Shared async client
        url: The URL to fetch
        cookie: Opaque cookie header value ("" sends no Cookie header)
        retries: Number of retry attempts after the initial failure

    Returns:
        FetchResult for the last attempt
    """
    headers = {"Cookie": cookie} if cookie else None
    last_error: str | None = None
    last_status: int | None = None

    for attempt in range(retries + 1):
        try:
            resp = await client.get(url, headers=headers)
            if resp.is_success:
                return FetchResult(url=url, status_code=resp.status_code, text=resp.text, error=None)
            last_status = resp.status_code
            last_error = f"HTTP {resp.status_code} for {url}"
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            last_status = None
            last_error = f"{type(exc).__name__}: {exc}"
        if attempt < retries:
            # Linear backoff: 0.5s, 1.0s, 1.5s...
            await asyncio.sleep(0.5 * (attempt + 1))

    return FetchResult(url=url, status_code=last_status, text=None, error=last_error)


def make_fetcher(client: httpx.AsyncClient, retries: int = 0) -> Fetcher:
    """Bind the shared client into a Fetcher callable for the orchestrator."""

    async def _fetch(url: str, cookie: str) -> FetchResult:
        return await fetch_text(client, url, cookie=cookie, retries=retries)

    return _fetch
