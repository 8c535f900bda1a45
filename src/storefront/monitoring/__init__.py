"""
Monitoring module for metrics and observability.
"""

from .prometheus_metrics import (
    PrometheusMetrics,
    MetricsMiddleware,
    get_metrics,
    normalize_endpoint,
)
from .sentry_config import setup_sentry, set_user_context

__all__ = [
    "PrometheusMetrics",
    "MetricsMiddleware",
    "get_metrics",
    "normalize_endpoint",
    "setup_sentry",
    "set_user_context",
]
