"""
Pricing Scout Errors
====================
Error taxonomy for the discovery/extraction pipeline.

The orchestrator converts these into response-level `error` fields,
so callers never see them raised across the API boundary.
"""

from typing import List, Optional


class PricingScoutError(Exception):
    """Base class for all pipeline errors."""
    pass


class InvalidURL(PricingScoutError):
    """Scheme, format or SSRF violation. Never retried."""
    pass


class FetchFailed(PricingScoutError):
    """Non-2xx response or network error."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class TooManyRedirects(FetchFailed):
    """Redirect chain exceeded the configured ceiling."""

    def __init__(self, max_redirects: int):
        super().__init__(f"stopped after {max_redirects} redirects")
        self.max_redirects = max_redirects


class ContentTooShort(PricingScoutError):
    """Page text below the minimum usable length."""

    def __init__(self, length: int, minimum: int):
        super().__init__(f"page content too short ({length} < {minimum} chars)")
        self.length = length
        self.minimum = minimum


class ExtractionFailed(PricingScoutError):
    """AI call or response parse failure. Fatal for that extraction pass."""

    def __init__(self, message: str, warnings: Optional[List[str]] = None):
        super().__init__(message)
        self.warnings = list(warnings or [])


class BrowserRenderFailed(PricingScoutError):
    """Headless browser pass failed. Always downgraded to the static result."""
    pass


class BrowserDeadlineExceeded(BrowserRenderFailed):
    """The per-request browser deadline ran out. Remaining steps are skipped."""
    pass
