"""
Middleware modules for the Usogui DB server.

This package contains custom middleware for request timing and logging.
"""

from .request_metrics import RequestMetricsMiddleware

__all__ = ["RequestMetricsMiddleware"]
