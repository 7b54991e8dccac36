"""
Scrapers Package - Page Access
==============================
URL guard, static fetcher, markup parser and browser session.
"""

from scrapers.url_guard import normalize_url, validate_url
from scrapers.page_parser import (
    PageContent,
    parse_page,
    extract_visible_text,
    extract_structured_data,
    extract_links,
)
from scrapers.http_fetcher import FetchedPage, HttpFetcher

__all__ = [
    'normalize_url',
    'validate_url',
    'PageContent',
    'parse_page',
    'extract_visible_text',
    'extract_structured_data',
    'extract_links',
    'FetchedPage',
    'HttpFetcher',
]
