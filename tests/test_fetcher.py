"""Tests for the httpx transport layer."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from article_harvest import __version__
from article_harvest.config import FetchConfig
from article_harvest.errors import TransportError
from article_harvest.fetcher import FetchResult, build_client, fetch_text, make_fetcher


def _run(handler, url: str, cookie: str = "", retries: int = 0, cfg: FetchConfig | None = None) -> FetchResult:
    async def go() -> FetchResult:
        async with build_client(cfg or FetchConfig(), transport=httpx.MockTransport(handler)) as client:
            return await fetch_text(client, url, cookie=cookie, retries=retries)

    return asyncio.run(go())


def test_fetch_text_returns_body_and_sends_headers():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text="<rss/>")

    result = _run(handler, "https://example.com/feed", cookie="session=abc")

    assert result.ok
    assert result.text == "<rss/>"
    assert result.status_code == 200
    assert seen[0].headers["Cookie"] == "session=abc"
    assert seen[0].headers["User-Agent"] == f"article-harvest/{__version__}"


def test_fetch_text_omits_cookie_when_empty():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text="ok")

    _run(handler, "https://example.com/", cfg=FetchConfig(user_agent="custom-agent/1.0"))

    assert "cookie" not in seen[0].headers
    assert seen[0].headers["User-Agent"] == "custom-agent/1.0"


def test_fetch_text_reports_non_success_status():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="not found")

    result = _run(handler, "https://example.com/missing")

    assert not result.ok
    assert result.text is None
    assert result.status_code == 404
    assert result.error == "HTTP 404 for https://example.com/missing"
    with pytest.raises(TransportError) as excinfo:
        result.raise_for_error()
    assert excinfo.value.status_code == 404
    assert excinfo.value.url == "https://example.com/missing"


def test_fetch_text_reports_network_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    result = _run(handler, "https://down.example.com/")

    assert not result.ok
    assert result.status_code is None
    assert "ConnectError" in result.error


def test_fetch_text_retries_until_success():
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        if calls == 1:
            return httpx.Response(503)
        return httpx.Response(200, text="recovered")

    result = _run(handler, "https://example.com/flaky", retries=1)

    assert calls == 2
    assert result.text == "recovered"


def test_fetch_text_does_not_retry_by_default():
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(500)

    result = _run(handler, "https://example.com/broken")

    assert calls == 1
    assert result.error == "HTTP 500 for https://example.com/broken"


def test_make_fetcher_binds_client():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=request.headers.get("cookie", "none"))

    async def go() -> FetchResult:
        async with build_client(FetchConfig(), transport=httpx.MockTransport(handler)) as client:
            fetch = make_fetcher(client)
            return await fetch("https://example.com/", "k=v")

    assert asyncio.run(go()).text == "k=v"


def test_fetch_text_reports_malformed_url_as_error():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text="ok")

    result = _run(handler, "http://[::1/x")

    assert not result.ok
    assert result.status_code is None
    assert result.text is None
    assert result.error.startswith("InvalidURL")
    assert seen == []
