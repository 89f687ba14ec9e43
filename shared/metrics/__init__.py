"""Metrics module using Prometheus."""

from .prometheus_metrics import (
    HttpMetrics,
    AuthMetrics,
    setup_metrics,
    get_metrics_handler,
)

__all__ = [
    "HttpMetrics",
    "AuthMetrics",
    "setup_metrics",
    "get_metrics_handler",
]
