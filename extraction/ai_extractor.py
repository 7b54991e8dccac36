"""
AI Extractor - Pricing Plan Extraction with OpenAI/Claude
=========================================================
Extracts structured plan data from combined page content using AI.

CRITICAL: Zero hallucinations. The model output is post-processed
deterministically:
- invalid plan entries are dropped
- billing periods are reconciled against each plan's own evidence
- unknown-period plans are flagged and lose any monthly equivalent
"""

import json
import re
from typing import Any, Dict, List, Optional

from core.errors import ExtractionFailed
from extraction.ai_prompt import SYSTEM_PROMPT, generate_extraction_prompt
from extraction.price_patterns import reconcile_plan
from models.billing_types import BillingPeriod, parse_billing_period
from models.extracted_plan import ExtractedPlan
from models.pricing_response import ExtractionResult
from utils_logging import log_debug, log_warning
from utils_text import parse_amount, plan_name_token


_FENCE_OPEN_RE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE_RE = re.compile(r"\s*```$")


def strip_code_fences(response: str) -> str:
    """Removes a surrounding ```json ... ``` / ``` ... ``` fence."""
    text = (response or "").strip()
    text = _FENCE_OPEN_RE.sub("", text, count=1)
    text = _FENCE_CLOSE_RE.sub("", text, count=1)
    return text.strip()


def _string_list(value) -> List[str]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, str) and v]


def _append_unique(warnings: List[str], code: str):
    if code not in warnings:
        warnings.append(code)


def _build_plans(raw_plans: List[Any], warnings: List[str]) -> List[ExtractedPlan]:
    """Converts raw model entries to plans and applies the evidence rules."""
    plans: List[ExtractedPlan] = []

    for raw in raw_plans:
        if not isinstance(raw, dict) or not str(raw.get("name") or "").strip():
            _append_unique(warnings, "invalid_plan_entry_dropped")
            continue

        # Captured before construction clears it for unknown periods
        had_monthly_equivalent = parse_amount(raw.get("monthly_equivalent_amount")) is not None
        model_period = parse_billing_period(raw.get("billing_period"))

        plan = ExtractedPlan.from_dict(raw)
        plan, corrections = reconcile_plan(plan)
        for code in corrections:
            _append_unique(warnings, code)

        token = plan_name_token(plan.name)
        if plan.billing_period == BillingPeriod.UNKNOWN:
            _append_unique(warnings, f"billing_period_unverified_{token}")
            if had_monthly_equivalent and model_period == BillingPeriod.UNKNOWN:
                _append_unique(warnings, f"monthly_equivalent_dropped_{token}")

        plans.append(plan)

    return plans


def parse_extraction_response(response: str) -> ExtractionResult:
    """
    Parses the raw model text into an ExtractionResult.

    Raises:
        ExtractionFailed: with warnings ["parse_error"] for non-JSON output
    """
    cleaned = strip_code_fences(response)
    try:
        data = json.loads(cleaned)
    except (json.JSONDecodeError, TypeError) as e:
        log_warning(f"Failed to parse extraction response: {e}")
        log_debug(f"response: {cleaned[:500]}")
        raise ExtractionFailed("failed to parse extraction result", warnings=["parse_error"])

    if not isinstance(data, dict):
        raise ExtractionFailed("failed to parse extraction result", warnings=["parse_error"])

    raw_plans = data.get("plans")
    if raw_plans is None:
        raw_plans = []
    if not isinstance(raw_plans, list):
        raise ExtractionFailed("failed to parse extraction result", warnings=["parse_error"])

    warnings = _string_list(data.get("warnings"))
    plans = _build_plans(raw_plans, warnings)

    return ExtractionResult(
        plans=plans,
        detected_billing_options=_string_list(data.get("detected_billing_options")),
        warnings=warnings,
    )


def extract_plans_with_ai(
    content: str,
    source_url: str,
    ai_client,
    max_chars: int = 25000,
    max_tokens: Optional[int] = None,
) -> ExtractionResult:
    """
    Extracts pricing plans from combined page content using AI.

    Args:
        content: Combined content (static or browser-captured)
        source_url: Page the content came from
        ai_client: Anything with complete(system, user, max_tokens)
        max_chars: Content cap before truncation
        max_tokens: Response token budget (client default when None)

    Returns:
        ExtractionResult with post-processed plans and warnings

    Raises:
        ExtractionFailed: No AI available, no response, or unparsable output
    """
    if ai_client is None:
        raise ExtractionFailed("AI client not configured", warnings=["ai_call_failed"])

    user_prompt = generate_extraction_prompt(content, source_url, max_chars)
    raw_response = ai_client.complete(SYSTEM_PROMPT, user_prompt, max_tokens)

    if not raw_response:
        raise ExtractionFailed("no response from AI", warnings=["ai_call_failed"])

    result = parse_extraction_response(raw_response)
    log_debug(f"extracted {len(result.plans)} plans from {source_url} ({len(result.warnings)} warnings)")
    return result
