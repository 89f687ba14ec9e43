"""Prometheus metrics definitions and helpers.

Provides HTTP and authentication metrics for the backend. Each application
instance owns its registry so several apps (e.g. in tests) can coexist.
"""

from typing import Callable

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    REGISTRY,
    CollectorRegistry,
)


class HttpMetrics:
    """HTTP request metrics."""

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        """Initialize HTTP metrics.

        Args:
            registry: Prometheus registry to use
        """
        # Requests served
        self.requests_total = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status"],
            registry=registry,
        )

        # Request latency
        self.request_duration = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
            registry=registry,
        )

        # In-flight requests; the route is not known until routing has run
        self.requests_in_progress = Gauge(
            "http_requests_in_progress",
            "HTTP requests currently in progress",
            ["method"],
            registry=registry,
        )


class AuthMetrics:
    """Authentication outcome metrics."""

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        """Initialize auth metrics.

        Args:
            registry: Prometheus registry to use
        """
        self.signups = Counter(
            "auth_signups_total",
            "Signup attempts by outcome",
            ["outcome"],
            registry=registry,
        )

        self.logins = Counter(
            "auth_logins_total",
            "Login attempts by outcome",
            ["outcome"],
            registry=registry,
        )

        self.password_resets = Counter(
            "auth_password_resets_total",
            "Password reset requests by outcome",
            ["outcome"],
            registry=registry,
        )


def setup_metrics(registry: CollectorRegistry = REGISTRY) -> tuple[HttpMetrics, AuthMetrics]:
    """Setup and return metric instances.

    Args:
        registry: Prometheus registry to register the metrics in

    Returns:
        Tuple of (HttpMetrics, AuthMetrics)
    """
    return HttpMetrics(registry), AuthMetrics(registry)


def get_metrics_handler(registry: CollectorRegistry = REGISTRY) -> Callable[[], bytes]:
    """Get metrics handler for HTTP endpoint.

    Args:
        registry: Registry to expose

    Returns:
        Function that generates Prometheus metrics output
    """

    def metrics_handler() -> bytes:
        return generate_latest(registry)

    return metrics_handler
