# -*- coding: utf-8 -*-
"""
backend/app/shared/middleware/__init__.py

Middlewares y dependencias HTTP compartidas.
"""

from .exception_handler import JSONExceptionMiddleware, get_request_id
from .rate_limiter import SlidingWindowRateLimiter, rate_limit, reset_rate_limiters

__all__ = [
    "JSONExceptionMiddleware",
    "SlidingWindowRateLimiter",
    "get_request_id",
    "rate_limit",
    "reset_rate_limiters",
]
