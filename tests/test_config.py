"""
Tests for configuration, models and text helpers
================================================
"""

import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import tempfile

import pytest

from config import Cfg, HttpConf, load_config
from models.billing_types import BillingPeriod, parse_billing_period
from models.extracted_plan import ExtractedPlan
from models.pricing_response import PricingExtractResponse
from utils_text import first_number_token, parse_amount, plan_name_token, text_similarity


ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))


# ==============================================================================
# CONFIG
# ==============================================================================

def test_defaults():
    print("\n=== TEST: Config Defaults ===")

    cfg = Cfg()
    assert cfg.http.max_redirects == 10
    assert cfg.http.max_body_bytes == 5 * 1024 * 1024
    assert cfg.browser.timeout_sec == 60
    assert cfg.browser.max_click_attempts == 2
    assert cfg.extraction.max_content_chars == 25000
    assert cfg.extraction.min_content_chars == 100
    assert cfg.heuristics.common_pricing_paths[0] == "/pricing"
    assert cfg.ai.provider == "openai"

    with pytest.raises(Exception):
        cfg.http.timeout_sec = 1   # frozen: shared by every request

    print("✅ PASSED")


def test_bundled_config_loads():
    cfg = load_config(os.path.join(ROOT, "configs", "config.yaml"))
    assert cfg.general.default_website == "https://www.usemotion.com/"
    assert cfg.heuristics.toggle_min_indicators == 2
    # lists not present in the file keep their defaults
    assert "/plans" in cfg.heuristics.common_pricing_paths
    assert cfg.pg.db == "pricing_scout"


def test_yaml_overrides_and_unknown_keys():
    print("\n=== TEST: YAML Overrides ===")

    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "config.yaml")
        with open(path, "w", encoding="utf-8") as f:
            f.write(
                "http:\n"
                "  timeout_sec: 5\n"
                "  not_a_setting: 1\n"
                "browser:\n"
                "  enabled: false\n"
                "ai:\n"
                "  provider: claude\n"
                "postgres:\n"
                "  host: db.internal\n"
                "  port: 6543\n"
            )
        cfg = load_config(path)

    assert cfg.http.timeout_sec == 5
    assert cfg.http.max_redirects == HttpConf().max_redirects
    assert cfg.browser.enabled is False
    assert cfg.ai.provider == "claude"
    assert cfg.pg.host == "db.internal" and cfg.pg.port == 6543

    print("✅ PASSED")


def test_missing_explicit_path():
    with pytest.raises(FileNotFoundError):
        load_config("/nonexistent/pricing-scout.yaml")


def test_empty_yaml_gives_defaults():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "empty.yaml")
        open(path, "w").close()
        cfg = load_config(path)
    assert cfg.extraction.max_candidates == 5


# ==============================================================================
# MODELS
# ==============================================================================

def test_billing_period_parsing():
    assert parse_billing_period("Monthly") == BillingPeriod.MONTHLY
    assert parse_billing_period(" annual ") == BillingPeriod.YEARLY
    assert parse_billing_period("quarterly") == BillingPeriod.UNKNOWN
    assert parse_billing_period(None) == BillingPeriod.UNKNOWN
    assert parse_billing_period(BillingPeriod.YEARLY) == BillingPeriod.YEARLY


def test_unknown_plan_never_has_monthly_equivalent():
    print("\n=== TEST: Unknown Period Invariant ===")

    plan = ExtractedPlan(name="Pro", billing_period="unknown", monthly_equivalent_amount=12.0)
    assert plan.monthly_equivalent_amount is None

    from_model = ExtractedPlan.from_dict({
        "name": "Pro", "billing_period": "weekly", "monthly_equivalent_amount": "12",
    })
    assert from_model.billing_period == BillingPeriod.UNKNOWN
    assert from_model.monthly_equivalent_amount is None

    print("✅ PASSED")


def test_plan_from_dict_tolerates_bad_shapes():
    plan = ExtractedPlan.from_dict({
        "name": "  Team ",
        "price_amount": "$1,499.00",
        "billing_period": "yearly",
        "included_units": "5 seats",
        "features": ["SSO", "", None, "API"],
        "evidence": "see page",
    })
    assert plan.name == "Team"
    assert plan.price_amount == 1499.0
    assert plan.included_units == []
    assert plan.features == ["SSO", "API"]
    assert plan.evidence.price_snippet == ""


def test_plan_to_dict_round_trip():
    plan = ExtractedPlan(name="Pro", price_amount=120.0, billing_period="yearly",
                         monthly_equivalent_amount=10.0, features=["SSO"])
    assert ExtractedPlan.from_dict(plan.to_dict()) == plan


def test_response_to_dict():
    response = PricingExtractResponse(
        plans=[ExtractedPlan(name="Pro", billing_period="monthly")],
        source_url="https://example.com/pricing",
        detected_periods=["monthly"],
        warnings=["toggle_detected_single_period"],
    )
    d = response.to_dict()
    assert d["plans"][0]["billing_period"] == "monthly"
    assert d["needs_render"] is False and d["error"] is None
    assert d["warnings"] == ["toggle_detected_single_period"]


# ==============================================================================
# TEXT HELPERS
# ==============================================================================

def test_text_helpers():
    print("\n=== TEST: Text Helpers ===")

    assert text_similarity("a b c", "a b c") == 1.0
    assert text_similarity("", "a") == 0.0
    assert text_similarity("a b", "c d") == 0.0
    assert 0.0 < text_similarity("pro 12 monthly", "pro 120 yearly") < 1.0

    # repeated words count once
    assert text_similarity("pro team", "pro pro pro team team") == 1.0
    old =" ".join(f"w{i}" for i in range(100))
    new = " ".join([f"w{i}" for i in range(90)] * 2 + [f"n{i}" for i in range(10)])
    similarity = text_similarity(old, new)
    assert similarity <= 1.0
    assert abs(similarity - 90 / 110) < 1e-9, f"❌ {similarity}"

    assert first_number_token("$1,200.00/yr") == "1200.00"
    assert first_number_token("Contact us") is None
    assert parse_amount(True) is None
    assert parse_amount("19.99") == 19.99

    assert plan_name_token("Pro Plan") == "Pro_Plan"
    assert plan_name_token("  Team (5 seats) ") == "Team_5_seats"
    assert plan_name_token("") == "unnamed"

    print("✅ PASSED")


if __name__ == "__main__":
    print("\n" + "="*60)
    print("RUNNING CONFIG / MODEL TESTS")
    print("="*60)

    test_defaults()
    test_bundled_config_loads()
    test_yaml_overrides_and_unknown_keys()
    test_missing_explicit_path()
    test_empty_yaml_gives_defaults()
    test_billing_period_parsing()
    test_unknown_plan_never_has_monthly_equivalent()
    test_plan_from_dict_tolerates_bad_shapes()
    test_plan_to_dict_round_trip()
    test_response_to_dict()
    test_text_helpers()

    print("\n" + "="*60)
    print("✅ ALL CONFIG / MODEL TESTS PASSED")
    print("="*60)
