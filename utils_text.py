"""
Text Utilities for Pricing Scout
================================
- Whitespace normalization
- Keyword / phrase matching on lower-cased text
- Word-set similarity between two page captures
- Numeric token parsing for price strings
"""

import re
from typing import Iterable, List, Optional


_NUMBER_TOKEN_RE = re.compile(r"[\d,]+\.?\d*")


def normalize_whitespace(s: str) -> str:
    """Normalizes whitespace in string"""
    if not s:
        return ""
    return re.sub(r"\s+", " ", s, flags=re.S).strip()


def contains_any(text: str, phrases: Iterable[str]) -> bool:
    """Case-insensitive substring check against a phrase list."""
    t = (text or "").lower()
    return any(p.lower() in t for p in (phrases or []))


def matched_phrases(text: str, phrases: Iterable[str]) -> List[str]:
    """Returns the distinct phrases found in text (case-insensitive)."""
    t = (text or "").lower()
    found = []
    for p in phrases or []:
        p = p.lower()
        if p in t and p not in found:
            found.append(p)
    return found


def text_similarity(text1: str, text2: str) -> float:
    """
    Jaccard similarity of the two word sets (|A & B| / |A | B|).

    Repeated words count once, so the result stays within [0, 1];
    1.0 for identical input, 0.0 when either side is empty.
    """
    if text1 == text2:
        return 1.0

    words1 = set((text1 or "").lower().split())
    words2 = set((text2 or "").lower().split())
    if not words1 or not words2:
        return 0.0

    return len(words1 & words2) / len(words1 | words2)


def first_number_token(text: str) -> Optional[str]:
    """First numeric token with thousands separators removed ("$1,200.00/yr" -> "1200.00")."""
    if not text:
        return None
    for match in _NUMBER_TOKEN_RE.finditer(text):
        token = match.group(0).replace(",", "")
        if any(ch.isdigit() for ch in token):
            return token
    return None


def parse_amount(value) -> Optional[float]:
    """Parses numbers that may arrive as strings ("1,200", "$19.99")."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    token = first_number_token(str(value))
    if token is None:
        return None
    try:
        return float(token)
    except ValueError:
        return None


def plan_name_token(name: str) -> str:
    """Warning-code friendly plan name ("Pro Plan" -> "Pro_Plan")."""
    cleaned = normalize_whitespace(name or "")
    return re.sub(r"[^\w]+", "_", cleaned).strip("_") or "unnamed"
