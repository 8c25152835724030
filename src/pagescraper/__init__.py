"""
Single-page scraper that fetches a URL and extracts structured metadata.
Outputs JSON with title, headings, paragraphs, links, images and social tags.
"""
from pagescraper.core import extract, parse_page
from pagescraper.errors import (
    FetchTimeoutError,
    HttpStatusError,
    InvalidUrlError,
    NoResponseError,
    PageScrapeError,
    TransportError,
)
from pagescraper.models import PageRecord

__version__ = "1.0.0"
__all__ = [
    "extract",
    "parse_page",
    "PageRecord",
    "PageScrapeError",
    "InvalidUrlError",
    "HttpStatusError",
    "TransportError",
    "FetchTimeoutError",
    "NoResponseError",
]
