"""
=============================================================================
MIDDLEWARE
=============================================================================

    Middleware          - Base class
    MiddlewarePipeline  - Chains middleware around the router
    LoggingMiddleware   - Access log (text or JSON)

=============================================================================
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import LoggingMiddleware, RequestLog

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "LoggingMiddleware",
    "RequestLog",
]
