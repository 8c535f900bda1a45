"""
Prometheus metrics for monitoring application performance.

Metrics exported:
- storefront_requests_total: Total HTTP requests
- storefront_request_duration_seconds: Request duration histogram
- storefront_errors_total: Total errors
- storefront_auth_attempts_total: Login and registration outcomes
- storefront_cart_operations_total: Cart mutations
- storefront_sync_deliveries_total: Orchestrator sync deliveries
"""

import re
import time
import logging
from typing import Optional

from prometheus_client import Counter, Histogram, CollectorRegistry, REGISTRY
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

UUID_PATTERN = re.compile(
    r'[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}',
    re.IGNORECASE
)


class PrometheusMetrics:
    """
    Prometheus metrics collector for Storefront.

    Tracks:
    - HTTP request metrics (rate, duration, status codes)
    - Authentication outcomes
    - Cart operations
    - Sync deliveries to orchestrators
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Initialize Prometheus metrics.

        Args:
            registry: Prometheus registry (defaults to the global registry)
        """
        self.registry = registry or REGISTRY

        self.requests_total = Counter(
            "storefront_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
            registry=self.registry,
        )

        self.request_duration = Histogram(
            "storefront_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
            registry=self.registry,
        )

        self.errors_total = Counter(
            "storefront_errors_total",
            "Total errors",
            ["error_type", "endpoint"],
            registry=self.registry,
        )

        self.auth_attempts_total = Counter(
            "storefront_auth_attempts_total",
            "Authentication attempts",
            ["method", "outcome"],
            registry=self.registry,
        )

        self.cart_operations_total = Counter(
            "storefront_cart_operations_total",
            "Cart operations",
            ["operation"],
            registry=self.registry,
        )

        self.sync_deliveries_total = Counter(
            "storefront_sync_deliveries_total",
            "User sync deliveries to orchestrators",
            ["app_name", "status"],
            registry=self.registry,
        )

        logger.info("Prometheus metrics initialized")

    def track_request(self, method: str, endpoint: str, status_code: int, duration: float):
        """
        Track HTTP request metrics.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: Normalized request path
            status_code: HTTP status code
            duration: Request duration in seconds
        """
        self.requests_total.labels(method=method, endpoint=endpoint, status_code=status_code).inc()
        self.request_duration.labels(method=method, endpoint=endpoint).observe(duration)

    def track_error(self, error_type: str, endpoint: str):
        self.errors_total.labels(error_type=error_type, endpoint=endpoint).inc()

    def track_auth(self, method: str, outcome: str):
        """method: password, keycloak or register; outcome: success or failure."""
        self.auth_attempts_total.labels(method=method, outcome=outcome).inc()

    def track_cart_operation(self, operation: str):
        self.cart_operations_total.labels(operation=operation).inc()

    def track_sync_delivery(self, app_name: str, status: str):
        self.sync_deliveries_total.labels(app_name=app_name, status=status).inc()


_metrics: Optional[PrometheusMetrics] = None


def get_metrics() -> PrometheusMetrics:
    """
    Get global metrics instance.

    Returns:
        PrometheusMetrics instance
    """
    global _metrics
    if _metrics is None:
        _metrics = PrometheusMetrics()
    return _metrics


def normalize_endpoint(path: str) -> str:
    """
    Normalize endpoint path for metrics labels.

    Replaces UUIDs and numeric IDs with placeholders to keep label
    cardinality bounded.
    """
    path = UUID_PATTERN.sub('{uuid}', path)
    return re.sub(r'/\d+(?=/|$)', '/{id}', path)


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Middleware for automatic request metrics collection.
    """

    def __init__(self, app):
        super().__init__(app)
        self.metrics = get_metrics()

    async def dispatch(self, request: Request, call_next):
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.time()
        endpoint = normalize_endpoint(request.url.path)
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        except Exception as e:
            self.metrics.track_error(type(e).__name__, endpoint)
            raise
        finally:
            self.metrics.track_request(
                method=request.method,
                endpoint=endpoint,
                status_code=status_code,
                duration=time.time() - start_time,
            )
