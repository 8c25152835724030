"""
HTTP access for a single page.

Every failure leaves this module as one of the errors in
:mod:`pagescraper.errors`, selected by the requests exception type.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import List, Optional

import requests
from requests.utils import get_encoding_from_headers

from pagescraper.errors import (
    FetchTimeoutError,
    HttpStatusError,
    NoResponseError,
    TransportError,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 10.0
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; WebScraper/1.0)"
CHUNK_SIZE = 1024

TIMEOUT_MESSAGE = "Request timed out. The server did not respond in time."


@dataclass(frozen=True, slots=True)
class FetchResult:
    """
    Raw body of a successful GET.

    encoding is the charset named in the Content-Type header, or None so
    the parser detects it from the markup.
    """
    status_code: int
    content: bytes
    encoding: Optional[str]


def _declared_encoding(resp: requests.Response) -> Optional[str]:
    """Charset from the Content-Type header, ignoring requests' ISO-8859-1 fallback."""
    content_type = (resp.headers.get("content-type") or "").lower()
    if "charset" not in content_type:
        return None
    return get_encoding_from_headers(resp.headers)


def _check_deadline(deadline: float) -> None:
    if time.monotonic() > deadline:
        raise FetchTimeoutError(TIMEOUT_MESSAGE)


def fetch_page(
    url: str,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    user_agent: str = DEFAULT_USER_AGENT,
    session: Optional[requests.Session] = None,
) -> FetchResult:
    """
    Issue one GET request for url and return the undecoded body.

    timeout_s bounds the whole exchange: requests applies it to every socket
    operation, and the body is read in chunks against an overall deadline.

    Args:
        url: Absolute http(s) URL to fetch.
        timeout_s: Total time allowed for the request, in seconds.
        user_agent: User-Agent header sent with the request.
        session: Optional session to reuse. When omitted a fresh session
                 is opened and closed around the request.

    Raises:
        FetchTimeoutError: no complete response within timeout_s.
        NoResponseError: the connection failed before a response arrived.
        TransportError: any other requests failure.
        HttpStatusError: the server answered outside the 2xx range.
    """
    if session is None:
        with requests.Session() as own_session:
            return fetch_page(url, timeout_s, user_agent, session=own_session)

    logger.debug("GET %s (timeout=%ss)", url, timeout_s)
    deadline = time.monotonic() + timeout_s
    try:
        with session.get(
            url,
            headers={"User-Agent": user_agent},
            timeout=timeout_s,
            allow_redirects=True,
            stream=True,
        ) as resp:
            _check_deadline(deadline)
            logger.debug("%s answered %s", resp.url, resp.status_code)
            if not 200 <= resp.status_code < 300:
                raise HttpStatusError(resp.status_code, resp.reason or "")

            chunks: List[bytes] = []
            for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                chunks.append(chunk)
                _check_deadline(deadline)

            return FetchResult(
                status_code=resp.status_code,
                content=b"".join(chunks),
                encoding=_declared_encoding(resp),
            )
    except requests.Timeout as e:
        raise FetchTimeoutError(TIMEOUT_MESSAGE) from e
    except requests.ConnectionError as e:
        raise NoResponseError(
            "No response received from the server. Check your internet connection."
        ) from e
    except requests.RequestException as e:
        raise TransportError(f"Connection failed: {e}") from e
