"""
Error types raised by the harvesting pipeline.

Each stage raises its own error kind so the orchestrator can isolate
failures per site and per article:
- ParseError: feed body or date does not match the declared dialect
- SelectorError: a configured CSS selector does not compile
- ExtractionError: no content element found in an article page
- TransportError: a fetch failed (network error, timeout, bad status)
"""

from __future__ import annotations

from typing import Sequence


class HarvestError(Exception):
    """Base class for all pipeline errors."""


class ParseError(HarvestError):
    """Raised when a feed payload or item does not conform to its dialect."""


class SelectorError(HarvestError):
    """Raised when a CSS selector is syntactically invalid.

    Attributes:
        selector: The offending selector string
    """

    def __init__(self, selector: str, reason: str = ""):
        self.selector = selector
        message = f"Invalid selector {selector!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ExtractionError(HarvestError):
    """Raised when neither selectors nor the heuristic find article content.

    Attributes:
        selectors: The selectors that were attempted, in order
    """

    def __init__(self, message: str, selectors: Sequence[str] = ()):
        self.selectors = tuple(selectors)
        super().__init__(message)


class TransportError(HarvestError):
    """Raised when a fetch does not produce a usable body.

    Attributes:
        url: The URL that was requested
        status_code: HTTP status code, or None for network-level failures
    """

    def __init__(self, url: str, message: str, status_code: int | None = None):
        self.url = url
        self.status_code = status_code
        super().__init__(message)


def categorize_error(error: str | None, status_code: int | None) -> str:
    """Categorize fetch errors for logging.

    Args:
        error: Error message from the fetch attempt
        status_code: HTTP status code if available

    Returns:
        One of "timeout", "blocked", "network_failed", "http_status", "unknown"
    """
    if not error:
        return "unknown"
    error_lower = error.lower()
    if "timeout" in error_lower or "timed out" in error_lower:
        return "timeout"
    if status_code in (401, 403, 429) or "blocked" in error_lower:
        return "blocked"
    if "connect" in error_lower or "connection" in error_lower:
        return "network_failed"
    if status_code is not None:
        return "http_status"
    return "unknown"
