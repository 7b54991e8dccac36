"""
Page Parser - Visible, Hidden & Embedded Pricing Content
========================================================
Derives three views from one markup tree:

1. Visible text  - what a visitor sees in the default page state
2. Hidden text   - aria-hidden / hidden / display:none content and tab
                   panels (inactive tabs often hold the other billing view)
3. Script data   - __NEXT_DATA__, JSON-LD and window.__NUXT__ payloads
                   that mention pricing

Strategy:
- One structural walk over the tree for text (iterative, no recursion limit)
- Script payloads read from the same parsed tree
"""

import re
from dataclasses import dataclass
from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag

from config import ExtractionConf, HeuristicsConf
from utils_text import contains_any, normalize_whitespace


# ==============================================================================
# CONFIGURATION
# ==============================================================================

SKIPPED_TAGS = {"script", "style", "noscript", "head", "meta", "link", "template"}

HIDDEN_DATA_STATES = {"inactive", "hidden"}

NUXT_ASSIGNMENT_RE = re.compile(r"window\.__NUXT__\s*=\s*([\s\S]+?)\s*;?\s*$")

TRUNCATION_MARKER = "...[truncated]"


@dataclass
class PageContent:
    """Derived text views of one page."""
    visible_text: str = ""
    hidden_text: str = ""
    structured_data: str = ""


# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================

def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def _is_hidden(tag: Tag) -> bool:
    """True for elements a visitor cannot see in the current state."""
    if str(tag.get("aria-hidden", "")).lower() == "true":
        return True
    if tag.has_attr("hidden"):
        return True
    style = str(tag.get("style", "")).lower().replace(" ", "")
    if "display:none" in style or "visibility:hidden" in style:
        return True
    if str(tag.get("data-state", "")).lower() in HIDDEN_DATA_STATES:
        return True
    return False


def _walk_text(root) -> tuple:
    """
    Single pass over the tree collecting visible and hidden text in
    document order.

    Returns:
        (visible_parts, hidden_parts)
    """
    visible: List[str] = []
    hidden: List[str] = []

    # (node, under_hidden_marker, under_tabpanel)
    stack = [(root, False, False)]
    while stack:
        node, in_hidden, in_tabpanel = stack.pop()

        if isinstance(node, NavigableString):
            if isinstance(node, PreformattedString):
                continue  # comments, doctype, CDATA
            text = node.strip()
            if not text:
                continue
            if in_hidden:
                hidden.append(text)
            else:
                visible.append(text)
                if in_tabpanel:
                    hidden.append(text)
            continue

        if not isinstance(node, Tag):
            continue
        if node.name in SKIPPED_TAGS:
            continue

        child_hidden = in_hidden or _is_hidden(node)
        child_tabpanel = in_tabpanel or str(node.get("role", "")).lower() == "tabpanel"

        for child in reversed(node.contents):
            stack.append((child, child_hidden, child_tabpanel))

    return visible, hidden


def _keep_pricing_payload(
    payload: str,
    extraction: ExtractionConf,
    heuristics: HeuristicsConf,
) -> Optional[str]:
    """Applies raw size cap, pricing keyword prefilter and kept-size cap."""
    payload = (payload or "").strip()
    if not payload or len(payload) > extraction.script_raw_limit:
        return None
    if not contains_any(payload, heuristics.script_pricing_keywords):
        return None
    if len(payload) > extraction.script_keep_limit:
        return payload[:extraction.script_keep_limit] + TRUNCATION_MARKER
    return payload


def _script_text(script: Tag) -> str:
    return script.string if script.string is not None else script.get_text()


def _structured_data_from_soup(
    soup: BeautifulSoup,
    extraction: ExtractionConf,
    heuristics: HeuristicsConf,
) -> str:
    lines: List[str] = []

    # --- __NEXT_DATA__ ---
    next_data = soup.find("script", id="__NEXT_DATA__")
    if next_data is not None:
        kept = _keep_pricing_payload(_script_text(next_data), extraction, heuristics)
        if kept:
            lines.append(f"NEXT_DATA: {kept}")

    # --- JSON-LD ---
    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        kept = _keep_pricing_payload(_script_text(script), extraction, heuristics)
        if kept:
            lines.append(f"LD+JSON: {kept}")

    # --- window.__NUXT__ ---
    for script in soup.find_all("script"):
        text = _script_text(script) or ""
        if "__NUXT__" not in text:
            continue
        match = NUXT_ASSIGNMENT_RE.search(text)
        if not match:
            continue
        kept = _keep_pricing_payload(match.group(1), extraction, heuristics)
        if kept:
            lines.append(f"NUXT_DATA: {kept}")
        break

    return "\n".join(lines)


# ==============================================================================
# PUBLIC API
# ==============================================================================

def parse_page(
    html: str,
    extraction: Optional[ExtractionConf] = None,
    heuristics: Optional[HeuristicsConf] = None,
) -> PageContent:
    """
    Parses raw markup into visible text, hidden text and script data.

    Args:
        html: Raw page markup
        extraction: Script payload size caps
        heuristics: Pricing keyword prefilter

    Returns:
        PageContent with whitespace-collapsed text views
    """
    extraction = extraction or ExtractionConf()
    heuristics = heuristics or HeuristicsConf()

    soup = _soup(html)
    visible, hidden = _walk_text(soup)

    return PageContent(
        visible_text=normalize_whitespace(" ".join(visible)),
        hidden_text=normalize_whitespace(" ".join(hidden)),
        structured_data=_structured_data_from_soup(soup, extraction, heuristics),
    )


def extract_visible_text(html: str) -> str:
    """Visible text only (used by the fetcher)."""
    visible, _ = _walk_text(_soup(html))
    return normalize_whitespace(" ".join(visible))


def extract_structured_data(
    html: str,
    extraction: Optional[ExtractionConf] = None,
    heuristics: Optional[HeuristicsConf] = None,
) -> str:
    """Script payloads only (used on browser-captured markup)."""
    return _structured_data_from_soup(
        _soup(html),
        extraction or ExtractionConf(),
        heuristics or HeuristicsConf(),
    )


def extract_links(html: str) -> List[str]:
    """Raw href values of all anchors, in document order."""
    return [a.get("href") for a in _soup(html).find_all("a", href=True)]
