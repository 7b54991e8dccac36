"""
Logging Utils - Request Logging
===============================
Transparent logging for AI costs and processing steps.
"""

from logging_utils.request_log import RequestLog

__all__ = [
    'RequestLog',
]
