"""
Pricing Responses - API Boundary Types
======================================
Discovery/extraction responses plus transient browser and persistence types.

Errors are carried in the `error` field, never raised across the boundary.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from models.extracted_plan import ExtractedPlan


@dataclass
class PricingDiscoverResponse:
    """Candidate pricing pages, highest confidence first."""
    pricing_candidates: List[str] = field(default_factory=list)
    selected_pricing_url: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pricing_candidates": list(self.pricing_candidates),
            "selected_pricing_url": self.selected_pricing_url,
            "error": self.error,
        }


@dataclass
class PricingExtractResponse:
    """
    Final extraction result.

    needs_render: toggle suspected but not resolved
    render_used:  browser pass was attempted
    warnings:     ordered, append-only codes from every stage
    """
    plans: List[ExtractedPlan] = field(default_factory=list)
    source_url: str = ""
    detected_periods: List[str] = field(default_factory=list)
    needs_render: bool = False
    render_used: bool = False
    warnings: List[str] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "plans": [p.to_dict() for p in self.plans],
            "source_url": self.source_url,
            "detected_periods": list(self.detected_periods),
            "needs_render": self.needs_render,
            "render_used": self.render_used,
            "warnings": list(self.warnings),
            "error": self.error,
        }


@dataclass
class ExtractionResult:
    """Parsed output of one extraction pass."""
    plans: List[ExtractedPlan] = field(default_factory=list)
    detected_billing_options: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass
class TabCandidate:
    """Billing toggle element found during the browser pass."""
    selector: str
    text: str = ""
    score: int = 0
    is_monthly: bool = False
    is_yearly: bool = False
    kind: str = ""                 # "role-tab", "tablist-child", "button", "label"
    aria_selected: str = ""


@dataclass
class SavePlansResponse:
    saved_count: int = 0
    error: Optional[str] = None


@dataclass
class SavedPlansResponse:
    plans: List[Dict[str, Any]] = field(default_factory=list)
    count: int = 0
