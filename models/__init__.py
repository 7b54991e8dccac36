"""
Models Package - Pricing Data Structures
========================================
Core data models for plan extraction and the API boundary.
"""

from models.billing_types import BillingPeriod, parse_billing_period
from models.extracted_plan import ExtractedPlan, IncludedUnit, PlanEvidence
from models.pricing_response import (
    ExtractionResult,
    PricingDiscoverResponse,
    PricingExtractResponse,
    SavedPlansResponse,
    SavePlansResponse,
    TabCandidate,
)

__all__ = [
    'BillingPeriod',
    'parse_billing_period',
    'ExtractedPlan',
    'IncludedUnit',
    'PlanEvidence',
    'ExtractionResult',
    'PricingDiscoverResponse',
    'PricingExtractResponse',
    'SavedPlansResponse',
    'SavePlansResponse',
    'TabCandidate',
]
