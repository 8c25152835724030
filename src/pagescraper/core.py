"""
Core extraction logic: URL helpers, field extraction and the extract pipeline.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Dict, List, Optional, Tuple, Union
from urllib.parse import urljoin, urlparse, urlunparse

import requests
from bs4 import BeautifulSoup
from bs4.element import Tag

from pagescraper.errors import InvalidUrlError, PageScrapeError
from pagescraper.fetcher import DEFAULT_TIMEOUT_S, DEFAULT_USER_AGENT, fetch_page
from pagescraper.models import (
    HEADING_LEVELS,
    BasicInfo,
    ImageEntry,
    LinkEntry,
    PageRecord,
    SocialMetadata,
    Statistics,
    Structure,
)

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES: frozenset[str] = frozenset(("http", "https"))
DEFAULT_PORTS: Dict[str, int] = {"http": 80, "https": 443}

# Placeholders for absent or empty attributes
MISSING_DESCRIPTION = "Not found"
MISSING_LANGUAGE = "Not specified"
MISSING_KEYWORDS = "Not specified"
MISSING_LINK_TEXT = "[No text]"
MISSING_ALT = "No description"
MISSING_IMAGE_TITLE = "No title"
MISSING_DIMENSION = "Not specified"

OPEN_GRAPH_PREFIX = "og:"
TWITTER_PREFIX = "twitter:"


def utc_now_iso() -> str:
    """Return current UTC time in ISO format."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def is_valid_url(url: str) -> bool:
    """Check that url is an absolute http(s) URL with a usable host."""
    if not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url.strip())
        parsed.port
    except ValueError:
        return False
    hostname = parsed.hostname or ""
    if parsed.scheme.lower() not in ALLOWED_SCHEMES or not hostname:
        return False
    return not any(ch.isspace() for ch in hostname)


def resolve_url(href: str, base: str) -> Optional[str]:
    """
    Resolve href against base and normalize the result.

    - Lowercases scheme and host
    - Removes default ports (:80, :443)
    - Uses "/" for an empty path
    - Keeps query and fragment

    Returns None when the reference does not yield an absolute http(s) URL
    (javascript:, mailto:, broken hosts or ports).
    """
    try:
        parsed = urlparse(urljoin(base, href.strip()))
        port = parsed.port
    except ValueError:
        return None

    scheme = parsed.scheme.lower()
    hostname = parsed.hostname
    if scheme not in ALLOWED_SCHEMES or not hostname:
        return None
    if any(ch.isspace() for ch in hostname):
        return None

    host = f"[{hostname}]" if ":" in hostname else hostname
    if port is not None and port != DEFAULT_PORTS[scheme]:
        host = f"{host}:{port}"
    userinfo, at, _ = parsed.netloc.rpartition("@")
    netloc = f"{userinfo}{at}{host}"

    return urlunparse((
        scheme,
        netloc,
        parsed.path or "/",
        parsed.params,
        parsed.query,
        parsed.fragment,
    ))


def url_origin(url: str) -> Tuple[str, str, Optional[int]]:
    """Return (scheme, host, port) with the default port filled in."""
    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    return scheme, (parsed.hostname or ""), parsed.port or DEFAULT_PORTS.get(scheme)


def get_attr(tag: Optional[Tag], name: str, default: str) -> str:
    """Return the attribute value, or default when the tag or value is missing or empty."""
    if tag is None:
        return default
    value = tag.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    return value if value else default


def element_text(tag: Tag) -> str:
    """Concatenated text of tag and its descendants, trimmed."""
    return tag.get_text().strip()


def extract_basic_info(soup: BeautifulSoup, analyzed_at: str) -> BasicInfo:
    """Title, description, language and keywords, with placeholders for missing values."""
    title_tag = soup.find("title")
    return BasicInfo(
        title=element_text(title_tag) if title_tag else "",
        description=get_attr(soup.select_one('meta[name="description"]'), "content", MISSING_DESCRIPTION),
        language=get_attr(soup.find("html"), "lang", MISSING_LANGUAGE),
        keywords=get_attr(soup.select_one('meta[name="keywords"]'), "content", MISSING_KEYWORDS),
        analyzed_at=analyzed_at,
    )


def extract_texts(soup: BeautifulSoup, selector: str) -> Tuple[str, ...]:
    """Trimmed, non-empty text of every element matching selector, in document order."""
    return tuple(text for el in soup.select(selector) if (text := element_text(el)))


def extract_structure(soup: BeautifulSoup) -> Structure:
    """Headings for levels h1 to h6 and all paragraphs."""
    headings = {level: extract_texts(soup, level) for level in HEADING_LEVELS}
    return Structure(
        headings=MappingProxyType(headings),
        paragraphs=extract_texts(soup, "p"),
    )


def extract_links(soup: BeautifulSoup, page_url: str) -> Tuple[LinkEntry, ...]:
    """Collect every <a href>, skipping references that cannot be resolved."""
    page_origin = url_origin(page_url)
    links: List[LinkEntry] = []
    for a in soup.select("a[href]"):
        target = resolve_url(get_attr(a, "href", ""), page_url)
        if target is None:
            continue
        links.append(LinkEntry(
            url=target,
            text=element_text(a) or MISSING_LINK_TEXT,
            is_external=url_origin(target) != page_origin,
        ))
    return tuple(links)


def extract_images(soup: BeautifulSoup, page_url: str) -> Tuple[ImageEntry, ...]:
    """Collect every <img> with a src; width and height are passed through as-is."""
    images: List[ImageEntry] = []
    for img in soup.select("img[src]"):
        src = get_attr(img, "src", "")
        if not src:
            continue
        resolved = resolve_url(src, page_url)
        if resolved is None:
            continue
        images.append(ImageEntry(
            src=resolved,
            alt=get_attr(img, "alt", MISSING_ALT),
            title=get_attr(img, "title", MISSING_IMAGE_TITLE),
            width=get_attr(img, "width", MISSING_DIMENSION),
            height=get_attr(img, "height", MISSING_DIMENSION),
        ))
    return tuple(images)


def _prefixed_meta(soup: BeautifulSoup, attr: str, prefix: str) -> Dict[str, str]:
    """Map meta content by attr value with prefix removed; later tags win."""
    values: Dict[str, str] = {}
    for meta in soup.select(f'meta[{attr}^="{prefix}"]'):
        key = get_attr(meta, attr, "")[len(prefix):]
        values[key] = get_attr(meta, "content", "")
    return values


def extract_social_metadata(soup: BeautifulSoup) -> SocialMetadata:
    """Open Graph (meta property="og:*") and Twitter Card (meta name="twitter:*") values."""
    return SocialMetadata(
        open_graph=MappingProxyType(_prefixed_meta(soup, "property", OPEN_GRAPH_PREFIX)),
        twitter=MappingProxyType(_prefixed_meta(soup, "name", TWITTER_PREFIX)),
    )


def compute_statistics(paragraphs: Tuple[str, ...]) -> Statistics:
    """Paragraph and word counts; average is 0 when there are no paragraphs."""
    total_paragraphs = len(paragraphs)
    total_words = len(" ".join(paragraphs).split())
    return Statistics(
        total_paragraphs=total_paragraphs,
        total_words=total_words,
        words_per_paragraph=round(total_words / total_paragraphs, 2) if total_paragraphs else 0,
    )


def parse_page(
    html: Union[str, bytes],
    url: str,
    analyzed_at: Optional[str] = None,
    encoding: Optional[str] = None,
) -> PageRecord:
    """
    Build a PageRecord from an already fetched HTML body.

    Args:
        html: HTML markup, decoded or raw bytes. Malformed markup is tolerated.
        url: The page URL, used as base for relative links and images.
        analyzed_at: Analysis timestamp; defaults to the current UTC time.
        encoding: Known charset of raw bytes. When None, BeautifulSoup
                  reads <meta charset> or detects the encoding itself.
    """
    if isinstance(html, bytes):
        soup = BeautifulSoup(html, "lxml", from_encoding=encoding)
    else:
        soup = BeautifulSoup(html, "lxml")
    structure = extract_structure(soup)
    record = PageRecord(
        url=url,
        basic_info=extract_basic_info(soup, analyzed_at or utc_now_iso()),
        structure=structure,
        links=extract_links(soup, url),
        images=extract_images(soup, url),
        metadata=extract_social_metadata(soup),
        statistics=compute_statistics(structure.paragraphs),
    )
    logger.debug(
        "Extracted %d sections, %d paragraphs, %d links, %d images from %s",
        structure.total_sections,
        len(structure.paragraphs),
        len(record.links),
        len(record.images),
        url,
    )
    return record


def extract(
    url: str,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    user_agent: str = DEFAULT_USER_AGENT,
    session: Optional[requests.Session] = None,
) -> PageRecord:
    """
    Fetch a single page and extract its structured metadata.

    Args:
        url: Absolute http(s) URL of the page.
        timeout_s: Total time allowed for the HTTP request, in seconds.
        user_agent: User-Agent header to use for the request.
        session: Optional requests session (a new one is used otherwise).

    Returns:
        The PageRecord for the page.

    Raises:
        InvalidUrlError: url is not a valid absolute URL. No request is made.
        TransportError: timeout, missing response or connection failure.
        HttpStatusError: non-2xx response.
        PageScrapeError: any other failure, wrapping the original message.
    """
    if not is_valid_url(url):
        raise InvalidUrlError(url)
    url = url.strip()

    fetched = fetch_page(url, timeout_s=timeout_s, user_agent=user_agent, session=session)
    logger.debug("Fetched %s: HTTP %s, %d bytes", url, fetched.status_code, len(fetched.content))

    try:
        return parse_page(fetched.content, url, encoding=fetched.encoding)
    except Exception as e:
        raise PageScrapeError(f"Error: {e}") from e
