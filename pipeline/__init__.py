"""
Pipeline Package - Processing Orchestration
============================================
Discovery, decision gates, browser re-extraction, dedup and execution.
"""

from pipeline.decision_gates import (
    detect_billing_toggle,
    needs_browser_render,
    should_replace_static_result,
)
from pipeline.deduplicator import (
    canonical_plan_key,
    merge_plans,
    deduplicate_plans,
    detect_billing_periods,
)
from pipeline.discovery import discover_pricing_page
from pipeline.pipeline_runner import PricingPipeline

__all__ = [
    'detect_billing_toggle',
    'needs_browser_render',
    'should_replace_static_result',
    'canonical_plan_key',
    'merge_plans',
    'deduplicate_plans',
    'detect_billing_periods',
    'discover_pricing_page',
    'PricingPipeline',
]
