"""
Extracted Plan - Result of Pricing Extraction
=============================================
One subscription plan as recovered from a pricing page.

CRITICAL: Every value must be backed by verbatim evidence.
A plan with billing_period UNKNOWN never carries a monthly equivalent.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from models.billing_types import BillingPeriod, parse_billing_period
from utils_text import parse_amount


@dataclass
class IncludedUnit:
    """Quota bundled with a plan (seats, credits, projects...)."""
    name: str = ""
    amount: Optional[float] = None
    unit: str = ""
    raw_text: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "amount": self.amount,
            "unit": self.unit,
            "raw_text": self.raw_text,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'IncludedUnit':
        return IncludedUnit(
            name=str(data.get("name") or ""),
            amount=parse_amount(data.get("amount")),
            unit=str(data.get("unit") or ""),
            raw_text=str(data.get("raw_text") or ""),
        )


@dataclass
class PlanEvidence:
    """Verbatim source text justifying each extracted field."""
    name_snippet: str = ""
    price_snippet: str = ""
    units_snippet: str = ""
    billing_evidence: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name_snippet": self.name_snippet,
            "price_snippet": self.price_snippet,
            "units_snippet": self.units_snippet,
            "billing_evidence": self.billing_evidence,
        }

    @staticmethod
    def from_dict(data: Optional[Dict[str, Any]]) -> 'PlanEvidence':
        data = data if isinstance(data, dict) else {}
        return PlanEvidence(
            name_snippet=str(data.get("name_snippet") or ""),
            price_snippet=str(data.get("price_snippet") or ""),
            units_snippet=str(data.get("units_snippet") or ""),
            billing_evidence=str(data.get("billing_evidence") or ""),
        )


@dataclass
class ExtractedPlan:
    """
    Structured plan data - ONLY from page content.

    RULE: Nullable fields stay None unless the page states them.
    """

    # === IDENTITY ===
    name: str = ""

    # === PRICE ===
    price_amount: Optional[float] = None          # 19.0
    price_string: str = ""                        # "$19/mo"
    currency: str = ""                            # "USD"
    price_frequency: str = ""                     # "per_month", "per_year"

    # === BILLING ===
    billing_period: BillingPeriod = BillingPeriod.UNKNOWN
    monthly_equivalent_amount: Optional[float] = None   # yearly plans only
    annual_billed_amount: Optional[float] = None

    # === CONTENTS ===
    included_units: List[IncludedUnit] = field(default_factory=list)
    features: List[str] = field(default_factory=list)

    # === AUDIT ===
    evidence: PlanEvidence = field(default_factory=PlanEvidence)

    def __post_init__(self):
        self.billing_period = parse_billing_period(self.billing_period)
        # Monthly equivalent is only derivable once annual billing is confirmed
        if self.billing_period == BillingPeriod.UNKNOWN:
            self.monthly_equivalent_amount = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "price_amount": self.price_amount,
            "price_string": self.price_string,
            "currency": self.currency,
            "price_frequency": self.price_frequency,
            "billing_period": self.billing_period.value,
            "monthly_equivalent_amount": self.monthly_equivalent_amount,
            "annual_billed_amount": self.annual_billed_amount,
            "included_units": [u.to_dict() for u in self.included_units],
            "features": list(self.features),
            "evidence": self.evidence.to_dict(),
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'ExtractedPlan':
        """Create from dictionary (model output or stored row)."""
        units = data.get("included_units")
        features = data.get("features")
        return ExtractedPlan(
            name=str(data.get("name") or "").strip(),
            price_amount=parse_amount(data.get("price_amount")),
            price_string=str(data.get("price_string") or ""),
            currency=str(data.get("currency") or ""),
            price_frequency=str(data.get("price_frequency") or ""),
            billing_period=parse_billing_period(data.get("billing_period")),
            monthly_equivalent_amount=parse_amount(data.get("monthly_equivalent_amount")),
            annual_billed_amount=parse_amount(data.get("annual_billed_amount")),
            included_units=[
                IncludedUnit.from_dict(u) for u in units if isinstance(u, dict)
            ] if isinstance(units, list) else [],
            features=[str(f) for f in features if f] if isinstance(features, list) else [],
            evidence=PlanEvidence.from_dict(data.get("evidence")),
        )
