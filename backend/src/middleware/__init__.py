"""FastAPI middleware components.

This package contains custom middleware for request logging, metrics and
security headers.
"""

from backend.src.middleware.request_logging import (
    CORRELATION_HEADER,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)

__all__ = [
    "CORRELATION_HEADER",
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
]
