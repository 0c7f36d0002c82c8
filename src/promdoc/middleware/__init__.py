"""
=============================================================================
MIDDLEWARE MODULE
=============================================================================

Cross-cutting request processing wrapped around the router.

    ┌─────────────────────────────────────────────────────────────────────┐
    │    Request ───► LoggingMiddleware ───► Router ───► Handler          │
    │    Response ◄── LoggingMiddleware ◄─── Router ◄─── Handler          │
    └─────────────────────────────────────────────────────────────────────┘

LoggingMiddleware:
    Times each request and writes an access line to "promdoc.access".

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
