"""
Price Patterns - Deterministic Billing Evidence Parser
======================================================
Regex reading of a price snippet ("$10/mo billed annually") and the
reconciliation of a model-extracted plan against its own evidence.

Patterns:
- "$12/mo billed monthly"   -> monthly
- "$10/mo billed annually"  -> yearly, monthly equivalent 10, billed 120
- "$120/year"               -> yearly, per_year
- "$12/mo"                  -> unknown (no billing indicator)

RULE: Only explicit billing phrases change a period. A bare "/mo" is a
display frequency, not proof of how the customer is charged.
"""

import re
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from models.billing_types import BillingPeriod
from models.extracted_plan import ExtractedPlan
from utils_text import plan_name_token


CURRENCY_SYMBOLS = {
    "$": "USD",
    "€": "EUR",
    "£": "GBP",
}

PRICE_RE = re.compile(
    r"(?P<cur>[$€£])\s?(?P<amount>\d[\d,]*(?:\.\d+)?)"
    r"(?:\s*(?:/|per|a)\s*(?P<freq>month|mo|year|yr|annum)\b)?",
    re.IGNORECASE,
)

YEARLY_BILLING_RE = re.compile(
    r"billed\s+(?:annually|yearly)|annual\s+billing|paid\s+(?:annually|yearly)",
    re.IGNORECASE,
)

MONTHLY_BILLING_RE = re.compile(
    r"billed\s+monthly|monthly\s+billing|paid\s+monthly",
    re.IGNORECASE,
)


@dataclass
class PriceSignal:
    """What a price snippet says on its own."""
    amount: Optional[float] = None
    currency: str = ""
    frequency: str = ""                       # "per_month", "per_year" or ""
    billing_period: BillingPeriod = BillingPeriod.UNKNOWN
    monthly_equivalent_amount: Optional[float] = None
    annual_billed_amount: Optional[float] = None


def _frequency(token: Optional[str]) -> str:
    if not token:
        return ""
    token = token.lower()
    if token in ("month", "mo"):
        return "per_month"
    return "per_year"


def parse_price_snippet(text: str) -> PriceSignal:
    """
    Reads amount, currency, display frequency and billing period from text.

    Args:
        text: Price snippet and/or billing evidence

    Returns:
        PriceSignal (all-empty when no price is found)
    """
    signal = PriceSignal()
    if not text:
        return signal

    match = PRICE_RE.search(text)
    if match:
        signal.amount = float(match.group("amount").replace(",", ""))
        signal.currency = CURRENCY_SYMBOLS.get(match.group("cur"), "")
        signal.frequency = _frequency(match.group("freq"))

    billed_yearly = bool(YEARLY_BILLING_RE.search(text))
    billed_monthly = bool(MONTHLY_BILLING_RE.search(text))

    if signal.frequency == "per_year":
        signal.billing_period = BillingPeriod.YEARLY
        signal.annual_billed_amount = signal.amount
    elif billed_yearly and billed_monthly:
        # Both options in one snippet, nothing to pin it down
        pass
    elif billed_yearly:
        signal.billing_period = BillingPeriod.YEARLY
        if signal.frequency == "per_month" and signal.amount is not None:
            signal.monthly_equivalent_amount = signal.amount
            signal.annual_billed_amount = round(signal.amount * 12, 2)
        else:
            signal.annual_billed_amount = signal.amount
    elif billed_monthly:
        signal.billing_period = BillingPeriod.MONTHLY

    return signal


def reconcile_plan(plan: ExtractedPlan) -> Tuple[ExtractedPlan, List[str]]:
    """
    Checks a plan's billing fields against its own evidence snippets.

    - "$X/mo billed annually" on a monthly/unknown plan -> yearly plan with
      monthly_equivalent_amount X and annual_billed_amount 12X
    - explicit "billed monthly" on an unknown plan -> monthly
    - yearly plan with a monthly equivalent but no annual amount -> 12x derived

    Returns:
        (plan, warnings) - a new plan when anything changed, never mutates input
    """
    warnings: List[str] = []
    evidence_text = " ".join(
        t for t in (plan.evidence.price_snippet, plan.evidence.billing_evidence) if t
    )
    signal = parse_price_snippet(evidence_text)
    token = plan_name_token(plan.name)

    if (
        plan.billing_period in (BillingPeriod.MONTHLY, BillingPeriod.UNKNOWN)
        and signal.billing_period == BillingPeriod.YEARLY
        and signal.monthly_equivalent_amount is not None
    ):
        plan = replace(
            plan,
            billing_period=BillingPeriod.YEARLY,
            monthly_equivalent_amount=signal.monthly_equivalent_amount,
            annual_billed_amount=plan.annual_billed_amount or signal.annual_billed_amount,
        )
        warnings.append(f"billing_period_corrected_{token}")

    elif plan.billing_period == BillingPeriod.UNKNOWN and signal.billing_period != BillingPeriod.UNKNOWN:
        plan = replace(
            plan,
            billing_period=signal.billing_period,
            annual_billed_amount=plan.annual_billed_amount or signal.annual_billed_amount,
        )
        warnings.append(f"billing_period_corrected_{token}")

    if (
        plan.billing_period == BillingPeriod.YEARLY
        and plan.monthly_equivalent_amount is not None
        and plan.annual_billed_amount is None
    ):
        plan = replace(plan, annual_billed_amount=round(plan.monthly_equivalent_amount * 12, 2))

    return plan, warnings
