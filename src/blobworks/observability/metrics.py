"""Prometheus metrics for blobworks.

Provides metrics collection and exposure:
- HTTP request metrics (latency, count)
- Blob operation metrics (count by operation, namespace and outcome)
- Stored and served byte counters

Usage:
    from blobworks.observability.metrics import get_metrics

    metrics = get_metrics()
    metrics.blob_operations_total.labels(
        operation="create", namespace="memory", outcome="success"
    ).inc()
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from blobworks.config import settings

if TYPE_CHECKING:
    from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

SKIPPED_PATHS = ("/health/live", "/health/ready", "/metrics")


@dataclass
class MetricsRegistry:
    """Registry for Prometheus metrics."""

    # HTTP metrics
    http_requests_total: Any = None
    http_request_duration_seconds: Any = None
    http_requests_in_progress: Any = None

    # Blob storage metrics
    blob_operations_total: Any = None
    blob_operation_duration_seconds: Any = None
    blob_bytes_total: Any = None

    enabled: bool = True

    _initialized: bool = field(default=False, repr=False)
    _registry: CollectorRegistry | None = field(default=None, repr=False)

    def initialize(self) -> None:
        """Initialize Prometheus metrics."""
        if self._initialized:
            return

        if not self.enabled:
            logger.info("Metrics are disabled")
            self._initialized = True
            return

        self._registry = CollectorRegistry()

        self.http_requests_total = Counter(
            "blobworks_http_requests_total",
            "Total HTTP requests",
            ["method", "path", "status"],
            registry=self._registry,
        )
        self.http_request_duration_seconds = Histogram(
            "blobworks_http_request_duration_seconds",
            "HTTP request latency in seconds",
            ["method", "path"],
            buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
            registry=self._registry,
        )
        self.http_requests_in_progress = Gauge(
            "blobworks_http_requests_in_progress",
            "HTTP requests currently in progress",
            ["method"],
            registry=self._registry,
        )

        self.blob_operations_total = Counter(
            "blobworks_blob_operations_total",
            "Blob storage service operations",
            ["operation", "namespace", "outcome"],
            registry=self._registry,
        )
        self.blob_operation_duration_seconds = Histogram(
            "blobworks_blob_operation_duration_seconds",
            "Blob storage service operation latency in seconds",
            ["operation"],
            buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
            registry=self._registry,
        )
        self.blob_bytes_total = Counter(
            "blobworks_blob_bytes_total",
            "Plaintext bytes stored or served",
            ["direction", "namespace"],
            registry=self._registry,
        )

        self._initialized = True
        logger.info("Prometheus metrics initialized")

    def generate_latest(self) -> bytes:
        """Generate Prometheus metrics in exposition format."""
        if self._registry is None:
            return b"# Metrics disabled\n"
        return generate_latest(self._registry)


metrics_registry = MetricsRegistry(enabled=settings.enable_metrics)


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry.

    Initializes metrics on first access.
    """
    if not metrics_registry._initialized:
        metrics_registry.initialize()
    return metrics_registry


def record_blob_operation(
    operation: str, namespace: str | None, outcome: str, duration: float
) -> None:
    """Record a blob storage service operation.

    Args:
        operation: create, get, update, remove or query
        namespace: Registered connector namespace, "unknown" for any other
            namespace, "" when not resolved
        outcome: success or the error class name
        duration: Operation duration in seconds
    """
    metrics = get_metrics()
    if metrics.blob_operations_total:
        metrics.blob_operations_total.labels(
            operation=operation,
            namespace=namespace or "",
            outcome=outcome,
        ).inc()
    if metrics.blob_operation_duration_seconds:
        metrics.blob_operation_duration_seconds.labels(operation=operation).observe(duration)


def record_blob_bytes(direction: str, namespace: str, size: int) -> None:
    """Record plaintext bytes stored ("in") or served ("out")."""
    metrics = get_metrics()
    if metrics.blob_bytes_total:
        metrics.blob_bytes_total.labels(direction=direction, namespace=namespace).inc(size)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware for HTTP request metrics.

    Records:
    - Request count by method, path, status
    - Request duration histogram
    - Requests in progress gauge
    """

    def __init__(self, app: "ASGIApp", base_route: str = "/blob") -> None:
        super().__init__(app)
        self.metrics = get_metrics()
        self.base_route = base_route.rstrip("/")

    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
        if request.url.path in SKIPPED_PATHS:
            return await call_next(request)

        method = request.method
        path = self._normalize_path(request.url.path)

        if self.metrics.http_requests_in_progress:
            self.metrics.http_requests_in_progress.labels(method=method).inc()

        start_time = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration = time.perf_counter() - start_time

            if self.metrics.http_requests_total:
                self.metrics.http_requests_total.labels(
                    method=method,
                    path=path,
                    status=status_code,
                ).inc()
            if self.metrics.http_request_duration_seconds:
                self.metrics.http_request_duration_seconds.labels(
                    method=method,
                    path=path,
                ).observe(duration)
            if self.metrics.http_requests_in_progress:
                self.metrics.http_requests_in_progress.labels(method=method).dec()

    def _normalize_path(self, path: str) -> str:
        """Replace blob ids with placeholders to bound label cardinality.

        Examples:
            /blob/blob:memory:abc -> /blob/{id}
            /blob/blob:memory:abc/content -> /blob/{id}/content
        """
        prefix = self.base_route + "/"
        if not path.startswith(prefix):
            return path
        rest = path[len(prefix) :]
        if not rest:
            return path
        suffix = "/content" if rest.endswith("/content") else ""
        return f"{self.base_route}/{{id}}{suffix}"
