"""
Pricing Page Discovery
======================
Finds likely pricing pages for a website.

Two sources, merged and ranked:
1. Path probes  - /pricing, /plans, ... checked with a HEAD request;
                  earlier paths score higher (base - decay * index)
2. Homepage links - anchors whose href mentions a pricing keyword
                  (flat link score)

Homepage failures degrade to probe results only.
"""

from typing import Dict, List, Optional
from urllib.parse import urldefrag, urljoin, urlparse

from config import Cfg
from core.errors import InvalidURL, PricingScoutError
from models.pricing_response import PricingDiscoverResponse
from scrapers.http_fetcher import HttpFetcher
from scrapers.page_parser import extract_links
from scrapers.url_guard import normalize_url, validate_url
from utils_logging import log_debug, log_info, log_warning


def resolve_link(base_url: str, href: str) -> Optional[str]:
    """Absolute http(s) URL without fragment, or None."""
    if not href:
        return None
    full, _ = urldefrag(urljoin(base_url, href.strip()))
    if urlparse(full).scheme not in ("http", "https"):
        return None
    return full


def probe_common_paths(base_url: str, fetcher: HttpFetcher, cfg: Cfg) -> Dict[str, int]:
    """Scores every common pricing path that answers 200."""
    h = cfg.heuristics
    parsed = urlparse(base_url)
    origin = f"{parsed.scheme}://{parsed.netloc}"

    scores: Dict[str, int] = {}
    for i, path in enumerate(h.common_pricing_paths):
        candidate = f"{origin}{path}"
        if fetcher.exists(candidate):
            scores[candidate] = h.path_probe_base_score - i * h.path_probe_decay
            log_debug(f"probe hit: {candidate} (score {scores[candidate]})")
    return scores


def homepage_pricing_links(base_url: str, fetcher: HttpFetcher, cfg: Cfg) -> List[str]:
    """
    Pricing-looking links from the homepage, in document order.

    Raises:
        PricingScoutError: homepage could not be fetched
    """
    page = fetcher.fetch(base_url)
    keywords = cfg.heuristics.pricing_link_keywords

    links: List[str] = []
    for href in extract_links(page.raw_html):
        href_lower = href.lower()
        if not any(kw in href_lower for kw in keywords):
            continue
        full = resolve_link(page.final_url, href)
        if full and full not in links:
            links.append(full)
    return links


def discover_pricing_page(
    website_url: str,
    fetcher: HttpFetcher,
    cfg: Cfg,
    request_log=None,
) -> PricingDiscoverResponse:
    """
    Ranks candidate pricing pages for a website.

    Args:
        website_url: Raw user input; empty falls back to the default website
        fetcher: Shared static fetcher
        cfg: Heuristics (paths, keywords, scores) and limits

    Returns:
        PricingDiscoverResponse (error set for invalid input)
    """
    website_url = normalize_url(website_url) or cfg.general.default_website

    try:
        validate_url(website_url, fetcher.resolver)
    except InvalidURL as e:
        return PricingDiscoverResponse(error=f"invalid URL: {e}")

    scores = probe_common_paths(website_url, fetcher, cfg)
    if request_log:
        request_log.log_step("path_probe", hits=len(scores))

    try:
        links = homepage_pricing_links(website_url, fetcher, cfg)
    except PricingScoutError as e:
        log_warning(f"Homepage fetch failed for {website_url}: {e}")
        if request_log:
            request_log.log_step("homepage_links", error=str(e))
        links = []
    else:
        if request_log:
            request_log.log_step("homepage_links", found=len(links))

    for link in links:
        if link not in scores:
            scores[link] = cfg.heuristics.link_keyword_score

    # stable: equal scores keep discovery order
    ranked = sorted(scores, key=lambda u: scores[u], reverse=True)
    candidates = ranked[:cfg.extraction.max_candidates]

    log_info(f"   🔎 {len(candidates)} pricing candidates for {website_url}")
    return PricingDiscoverResponse(
        pricing_candidates=candidates,
        selected_pricing_url=candidates[0] if candidates else None,
    )
