"""Core modules for AI client and error types."""

from .ai_client import AIClient, create_ai_client
from .errors import (
    PricingScoutError,
    InvalidURL,
    FetchFailed,
    TooManyRedirects,
    ContentTooShort,
    ExtractionFailed,
    BrowserRenderFailed,
    BrowserDeadlineExceeded,
)

__all__ = [
    'AIClient',
    'create_ai_client',
    'PricingScoutError',
    'InvalidURL',
    'FetchFailed',
    'TooManyRedirects',
    'ContentTooShort',
    'ExtractionFailed',
    'BrowserRenderFailed',
    'BrowserDeadlineExceeded',
]
