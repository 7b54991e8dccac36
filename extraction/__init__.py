"""
Extraction Package - Plan Extraction
====================================
Prompt, AI extraction, evidence reconciliation and content assembly.
"""

from extraction.ai_prompt import SYSTEM_PROMPT, generate_extraction_prompt
from extraction.ai_extractor import (
    extract_plans_with_ai,
    parse_extraction_response,
    strip_code_fences,
)
from extraction.price_patterns import PriceSignal, parse_price_snippet, reconcile_plan
from extraction.content_builder import build_static_content, build_browser_content

__all__ = [
    'SYSTEM_PROMPT',
    'generate_extraction_prompt',
    'extract_plans_with_ai',
    'parse_extraction_response',
    'strip_code_fences',
    'PriceSignal',
    'parse_price_snippet',
    'reconcile_plan',
    'build_static_content',
    'build_browser_content',
]
