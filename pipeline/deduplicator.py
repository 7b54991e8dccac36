"""
Deduplicator - Plan Merging
===========================
The model often repeats a plan (default state + clicked state, visible +
hidden copy). Plans are keyed on name, billing period and price; entries
with the same key are merged left to right.

Identity key:
    normalized name | billing period | price key

The monthly equivalent is not part of the key, so a yearly
plan with and without its derived monthly figure collapse into one.
"""

import re
from dataclasses import replace
from typing import Dict, List

from models.billing_types import BillingPeriod
from models.extracted_plan import ExtractedPlan
from utils_text import first_number_token, normalize_whitespace


_NAME_SUFFIX_RE = re.compile(r"\s+(plan|tier)$")


def normalize_plan_name(name: str) -> str:
    """'  Pro   Plan ' -> 'pro'"""
    n = normalize_whitespace(name).lower()
    return _NAME_SUFFIX_RE.sub("", n, count=1)


def _price_key(plan: ExtractedPlan) -> str:
    if plan.price_amount is not None and plan.price_amount > 0:
        return "%.2f" % plan.price_amount
    return first_number_token(plan.price_string) or ""


def canonical_plan_key(plan: ExtractedPlan) -> str:
    """Identity key used for deduplication."""
    period = plan.billing_period.value if plan.billing_period else BillingPeriod.UNKNOWN.value
    return f"{normalize_plan_name(plan.name)}|{period}|{_price_key(plan)}"


def merge_plans(a: ExtractedPlan, b: ExtractedPlan) -> ExtractedPlan:
    """
    Merges b into a copy of a. Inputs are not mutated.

    - longer features list wins
    - longer included_units list wins
    - evidence with the longer price snippet wins
    - missing monthly equivalent / annual billed amounts are filled from b
    """
    return replace(
        a,
        features=list(b.features if len(b.features) > len(a.features) else a.features),
        included_units=list(
            b.included_units if len(b.included_units) > len(a.included_units) else a.included_units
        ),
        evidence=(
            b.evidence
            if len(b.evidence.price_snippet) > len(a.evidence.price_snippet)
            else a.evidence
        ),
        monthly_equivalent_amount=(
            a.monthly_equivalent_amount
            if a.monthly_equivalent_amount is not None
            else b.monthly_equivalent_amount
        ),
        annual_billed_amount=(
            a.annual_billed_amount
            if a.annual_billed_amount is not None
            else b.annual_billed_amount
        ),
    )


def deduplicate_plans(plans: List[ExtractedPlan]) -> List[ExtractedPlan]:
    """
    Merges duplicates and sorts by (name, billing period).

    Idempotent: deduplicate_plans(deduplicate_plans(x)) == deduplicate_plans(x)
    """
    merged: Dict[str, ExtractedPlan] = {}
    for plan in plans:
        key = canonical_plan_key(plan)
        if key in merged:
            merged[key] = merge_plans(merged[key], plan)
        else:
            merged[key] = plan

    return sorted(merged.values(), key=lambda p: (p.name, p.billing_period.value))


def detect_billing_periods(plans: List[ExtractedPlan]) -> List[str]:
    """Distinct known billing periods among plans, sorted."""
    periods = {
        p.billing_period.value
        for p in plans
        if p.billing_period != BillingPeriod.UNKNOWN
    }
    return sorted(periods)
