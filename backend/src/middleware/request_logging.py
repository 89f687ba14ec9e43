"""
Request logging and metrics middleware.

Assigns each request a correlation ID (reusing ``X-Correlation-ID`` when the
client sends one), binds it to the structlog context, records Prometheus
HTTP metrics and logs start/completion of the request. Exceptions that no
handler turned into a response are rendered here as a 500 so the reply
still carries the correlation ID.
"""

import time
import uuid
import structlog
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from backend.src.errors import UnhandledError
from shared.logging import bind_context, clear_context
from shared.metrics import HttpMetrics

logger = structlog.get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
UNMATCHED_ENDPOINT = "unmatched"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request logging and metrics."""

    def __init__(self, app, metrics: HttpMetrics):
        super().__init__(app)
        self.metrics = metrics

    async def dispatch(self, request: Request, call_next):
        """Process request and log details."""
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())

        method = request.method
        path = request.url.path
        client_ip = request.client.host if request.client else "unknown"

        clear_context()
        bind_context(correlation_id=correlation_id)

        self.metrics.requests_in_progress.labels(method=method).inc()
        start_time = time.perf_counter()

        logger.info(
            "request_started",
            method=method,
            path=path,
            client_ip=client_ip
        )

        try:
            response = await call_next(request)

            duration = time.perf_counter() - start_time
            self._observe(request, response.status_code, duration)

            logger.info(
                "request_completed",
                method=method,
                path=path,
                status_code=response.status_code,
                duration=f"{duration:.3f}s"
            )

        except Exception as e:
            duration = time.perf_counter() - start_time
            self._observe(request, status.HTTP_500_INTERNAL_SERVER_ERROR, duration)

            logger.error(
                "request_failed",
                method=method,
                path=path,
                error=str(e),
                duration=f"{duration:.3f}s",
                exc_info=True
            )
            response = JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=UnhandledError().to_body()
            )

        finally:
            self.metrics.requests_in_progress.labels(method=method).dec()

        response.headers[CORRELATION_HEADER] = correlation_id
        return response

    def _observe(self, request: Request, status_code: int, duration: float) -> None:
        endpoint = self._endpoint(request)
        self.metrics.requests_total.labels(
            method=request.method,
            endpoint=endpoint,
            status=status_code
        ).inc()
        self.metrics.request_duration.labels(
            method=request.method,
            endpoint=endpoint
        ).observe(duration)

    @staticmethod
    def _endpoint(request: Request) -> str:
        """Route template (e.g. ``/trip/delete/{trip_id}``), or ``unmatched`` for unrouted paths."""
        route = request.scope.get("route")
        return getattr(route, "path", UNMATCHED_ENDPOINT)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        return response
