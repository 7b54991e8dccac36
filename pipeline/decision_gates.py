"""
Decision Gates - Escalation Logic
==================================
Determines whether the static result is good enough or the browser pass
must run, and whether the browser result replaces the static one.

CRITICAL: Conservative escalation, heuristics only (no rendering here).
"""

from typing import List, Optional

from config import HeuristicsConf
from utils_text import contains_any, matched_phrases


def count_toggle_indicators(text: str, heuristics: Optional[HeuristicsConf] = None) -> int:
    """Number of distinct billing-toggle phrases present in text."""
    heuristics = heuristics or HeuristicsConf()
    return len(matched_phrases(text, heuristics.toggle_indicators))


def has_toggle_structure(raw_html: str, heuristics: Optional[HeuristicsConf] = None) -> bool:
    """Markup contains tablist/tab roles or toggle/switch controls."""
    heuristics = heuristics or HeuristicsConf()
    return contains_any(raw_html, heuristics.toggle_structural_markers)


def detect_billing_toggle(
    visible_text: str,
    raw_html: str,
    heuristics: Optional[HeuristicsConf] = None,
) -> bool:
    """
    Heuristic: does the page offer a monthly/yearly billing switch?

    True when at least 2 distinct indicators are present, or at least 1
    together with a structural marker (thresholds configurable).
    """
    heuristics = heuristics or HeuristicsConf()
    combined = f"{visible_text or ''} {raw_html or ''}".lower()

    count = count_toggle_indicators(combined, heuristics)
    if count >= heuristics.toggle_min_indicators:
        return True
    if count >= heuristics.toggle_min_indicators_with_structure and has_toggle_structure(combined, heuristics):
        return True
    return False


def needs_browser_render(
    has_toggle: bool,
    detected_periods: List[str],
    heuristics: Optional[HeuristicsConf] = None,
) -> bool:
    """Toggle suspected but the static pass saw at most one billing period."""
    heuristics = heuristics or HeuristicsConf()
    return has_toggle and len(detected_periods) <= heuristics.render_max_periods


def should_replace_static_result(
    static_plan_count: int,
    static_periods: List[str],
    browser_plan_count: int,
    browser_periods: List[str],
) -> bool:
    """Browser result wins only with strictly more plans or strictly more periods."""
    if browser_plan_count > static_plan_count:
        return True
    return len(browser_periods) > len(static_periods)
