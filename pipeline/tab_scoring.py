"""
Tab Scoring - Billing Toggle Location
=====================================
Finds the monthly and yearly billing tabs on a rendered page.

1. TAB_DISCOVERY_SCRIPT runs in the page and returns candidates in
   priority order (role=tab, tablist children, billing buttons, billing
   labels). Each element is tagged with a unique data attribute so its
   selector is exact.
2. Each candidate's text is scored against the monthly and yearly keyword
   sets (HeuristicsConf). Ambiguous text only counts for its stronger side.
3. Best monthly and best yearly are chosen independently.
"""

import json
from typing import List, Optional, Tuple

from config import HeuristicsConf
from models.pricing_response import TabCandidate
from utils_logging import log_debug, log_warning
from utils_text import normalize_whitespace


TAB_ATTRIBUTE = "data-pricing-scout-tab"

TAB_DISCOVERY_SCRIPT = """
() => {
    const ATTR = 'data-pricing-scout-tab';
    const tabs = [];
    let next = document.querySelectorAll('[' + ATTR + ']').length;

    const add = (el, kind) => {
        if (el.hasAttribute(ATTR)) {
            return;
        }
        const id = String(next++);
        el.setAttribute(ATTR, id);
        tabs.push({
            selector: '[' + ATTR + '="' + id + '"]',
            text: (el.textContent || '').trim(),
            ariaSelected: el.getAttribute('aria-selected') || '',
            type: kind,
        });
    };
    const mentions = (el, words) => {
        const text = (el.textContent || '').toLowerCase();
        return words.some((w) => text.includes(w));
    };

    document.querySelectorAll('[role="tab"]').forEach((el) => add(el, 'role-tab'));

    document.querySelectorAll('[role="tablist"] > *').forEach((el) => {
        if (el.getAttribute('role') !== 'tab') {
            add(el, 'tablist-child');
        }
    });

    document.querySelectorAll('button').forEach((el) => {
        if (mentions(el, ['month', 'year', 'annual', '/mo', '/yr', 'save'])) {
            add(el, 'button');
        }
    });

    document.querySelectorAll('label').forEach((el) => {
        if (mentions(el, ['month', 'year', 'annual'])) {
            add(el, 'label');
        }
    });

    return JSON.stringify(tabs);
}
"""

# billingType arrives as a typed argument, never spliced into the source
ARIA_SELECTED_SCRIPT = """
(billingType) => {
    const tabs = document.querySelectorAll('[role="tab"]');
    for (const tab of tabs) {
        if (tab.getAttribute('aria-selected') !== 'true') {
            continue;
        }
        const text = (tab.textContent || '').toLowerCase();
        if (billingType === 'monthly' && (text.includes('month') || text.includes('/mo'))) {
            return true;
        }
        if (billingType === 'yearly' && (text.includes('year') || text.includes('annual'))) {
            return true;
        }
    }
    return false;
}
"""


def score_tab_text(text: str, keywords: List[str], heuristics: Optional[HeuristicsConf] = None) -> int:
    """+hit per keyword contained in text, +exact bonus when text equals the keyword."""
    heuristics = heuristics or HeuristicsConf()
    normalized = normalize_whitespace(text).lower()

    score = 0
    for kw in keywords:
        if kw in normalized:
            score += heuristics.tab_keyword_hit
            if normalized == kw:
                score += heuristics.tab_exact_match_bonus
    return score


def parse_tab_candidates(raw) -> List[dict]:
    """Decodes the discovery script result. Malformed input -> no candidates."""
    if isinstance(raw, list):
        data = raw
    else:
        try:
            data = json.loads(raw or "[]")
        except (json.JSONDecodeError, TypeError) as e:
            log_warning(f"Could not parse tab candidates: {e}")
            return []
    if not isinstance(data, list):
        return []
    return [d for d in data if isinstance(d, dict) and d.get("selector")]


def score_candidate(raw: dict, heuristics: Optional[HeuristicsConf] = None) -> TabCandidate:
    """Scores one discovered element for both billing sides."""
    heuristics = heuristics or HeuristicsConf()
    text = str(raw.get("text") or "")
    kind = str(raw.get("type") or "")
    aria_selected = str(raw.get("ariaSelected") or "")

    monthly = score_tab_text(text, heuristics.monthly_tab_keywords, heuristics)
    yearly = score_tab_text(text, heuristics.yearly_tab_keywords, heuristics)

    bonus = 0
    if kind == "role-tab":
        bonus += heuristics.tab_role_bonus
    if aria_selected:
        bonus += heuristics.tab_aria_selected_bonus
    # Bonuses only strengthen a side that already matched a keyword
    if monthly > 0:
        monthly += bonus
    if yearly > 0:
        yearly += bonus

    if monthly > 0 and yearly > 0:
        if monthly > yearly:
            yearly = 0
        else:
            monthly = 0

    return TabCandidate(
        selector=str(raw["selector"]),
        text=text,
        score=max(monthly, yearly),
        is_monthly=monthly > 0,
        is_yearly=yearly > 0,
        kind=kind,
        aria_selected=aria_selected,
    )


def select_billing_tabs(
    raw_candidates,
    heuristics: Optional[HeuristicsConf] = None,
) -> Tuple[Optional[TabCandidate], Optional[TabCandidate]]:
    """
    Picks the best monthly and best yearly tab.

    Strictly greater score wins, so the earlier candidate keeps ties.

    Returns:
        (monthly_tab, yearly_tab), either may be None
    """
    heuristics = heuristics or HeuristicsConf()
    monthly_best: Optional[TabCandidate] = None
    yearly_best: Optional[TabCandidate] = None

    for raw in parse_tab_candidates(raw_candidates):
        cand = score_candidate(raw, heuristics)
        if cand.is_monthly and (monthly_best is None or cand.score > monthly_best.score):
            monthly_best = cand
        if cand.is_yearly and (yearly_best is None or cand.score > yearly_best.score):
            yearly_best = cand

    log_debug(
        f"tabs: monthly={monthly_best.selector if monthly_best else None} "
        f"yearly={yearly_best.selector if yearly_best else None}"
    )
    return monthly_best, yearly_best
