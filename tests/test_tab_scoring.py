"""
Tests for billing tab scoring and selection
===========================================
"""

import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import json

from pipeline.tab_scoring import (
    ARIA_SELECTED_SCRIPT,
    TAB_DISCOVERY_SCRIPT,
    score_candidate,
    score_tab_text,
    select_billing_tabs,
)
from config import HeuristicsConf


H = HeuristicsConf()


def _tab(i, text, kind="button", aria=""):
    return {"selector": f'[data-pricing-scout-tab="{i}"]', "text": text, "type": kind, "ariaSelected": aria}


def test_keyword_hits_and_exact_bonus():
    print("\n=== TEST: Keyword Scoring ===")

    # monthly, month, mo -> 3 hits, + exact match on "monthly"
    assert score_tab_text("Monthly", H.monthly_tab_keywords) == 3 * 10 + 20
    # yearly, year -> 2 hits, + exact
    assert score_tab_text("  Yearly ", H.yearly_tab_keywords) == 2 * 10 + 20
    assert score_tab_text("Features", H.monthly_tab_keywords) == 0

    print("✅ PASSED")


def test_ambiguous_text_keeps_higher_side():
    print("\n=== TEST: Ambiguous Candidate ===")

    # yearly: annual, annually, save -> 30 ; monthly: month, mo -> 20
    cand = score_candidate(_tab(0, "Annually (save 2 months)"))
    assert cand.is_yearly and not cand.is_monthly, f"❌ {cand}"

    # equal scores -> yearly keeps it
    # annual, annually -> 20 ; month, mo -> 20
    tie = score_candidate(_tab(1, "annually month"))
    assert tie.is_yearly and not tie.is_monthly

    print("✅ PASSED")


def test_bonuses_apply_to_matching_side_only():
    print("\n=== TEST: Role / Aria Bonuses ===")

    plain = score_candidate(_tab(0, "Monthly"))
    role = score_candidate(_tab(1, "Monthly", kind="role-tab", aria="true"))
    assert role.score == plain.score + 5 + 3

    unrelated = score_candidate(_tab(2, "Overview", kind="role-tab", aria="true"))
    assert not unrelated.is_monthly and not unrelated.is_yearly
    assert unrelated.score == 0

    print("✅ PASSED")


def test_select_best_tabs_independently():
    print("\n=== TEST: Tab Selection ===")

    raw = json.dumps([
        _tab(0, "Monthly", kind="role-tab", aria="true"),
        _tab(1, "Yearly", kind="role-tab", aria="false"),
        _tab(2, "Pay monthly"),
        _tab(3, "Save 20% with annual billing", kind="label"),
    ])
    monthly, yearly = select_billing_tabs(raw)

    assert monthly.selector == '[data-pricing-scout-tab="0"]', f"❌ {monthly}"
    assert yearly.selector == '[data-pricing-scout-tab="1"]', f"❌ {yearly}"

    print("✅ PASSED")


def test_earlier_candidate_keeps_ties():
    monthly, _ = select_billing_tabs([_tab(0, "Monthly"), _tab(1, "Monthly")])
    assert monthly.selector == '[data-pricing-scout-tab="0"]'


def test_malformed_candidates():
    print("\n=== TEST: Malformed Candidate JSON ===")

    assert select_billing_tabs("not json") == (None, None)
    assert select_billing_tabs('{"selector": "x"}') == (None, None)
    assert select_billing_tabs(None) == (None, None)
    assert select_billing_tabs(json.dumps([{"text": "Monthly"}])) == (None, None)

    print("✅ PASSED")


def test_scripts_take_billing_type_as_argument():
    """The aria check is a function expression; the billing type is never spliced in."""
    assert ARIA_SELECTED_SCRIPT.strip().startswith("(billingType) =>")
    assert "'monthly'" in ARIA_SELECTED_SCRIPT and "' + " not in ARIA_SELECTED_SCRIPT
    assert TAB_DISCOVERY_SCRIPT.strip().startswith("() =>")
    assert "data-pricing-scout-tab" in TAB_DISCOVERY_SCRIPT


if __name__ == "__main__":
    print("\n" + "="*60)
    print("RUNNING TAB SCORING TESTS")
    print("="*60)

    test_keyword_hits_and_exact_bonus()
    test_ambiguous_text_keeps_higher_side()
    test_bonuses_apply_to_matching_side_only()
    test_select_best_tabs_independently()
    test_earlier_candidate_keeps_ties()
    test_malformed_candidates()
    test_scripts_take_billing_type_as_argument()

    print("\n" + "="*60)
    print("✅ ALL TAB SCORING TESTS PASSED")
    print("="*60)
