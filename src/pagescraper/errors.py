"""
Error types raised while fetching and extracting a page.
"""
from __future__ import annotations


class PageScrapeError(Exception):
    """Base error; also used to wrap unexpected failures."""


class InvalidUrlError(PageScrapeError):
    """The input is not an absolute http(s) URL."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Invalid URL format: {url!r}. Include http:// or https://")
        self.url = url


class HttpStatusError(PageScrapeError):
    """The server answered with a non-2xx status."""

    def __init__(self, status_code: int, reason: str) -> None:
        super().__init__(f"Error {status_code}: {reason}")
        self.status_code = status_code
        self.reason = reason


class TransportError(PageScrapeError):
    """Connection-level failure while talking to the server."""


class FetchTimeoutError(TransportError):
    """The server did not answer within the timeout."""


class NoResponseError(TransportError):
    """The request went out but no response came back."""
