"""Tests for Prometheus metrics."""

from __future__ import annotations

from fastapi import FastAPI

from blobworks.observability.metrics import (
    MetricsMiddleware,
    MetricsRegistry,
    get_metrics,
    record_blob_bytes,
    record_blob_operation,
)


class TestMetricsRegistry:
    """Tests for MetricsRegistry."""

    def test_disabled_registry(self) -> None:
        registry = MetricsRegistry(enabled=False)
        registry.initialize()

        assert registry.blob_operations_total is None
        assert registry.generate_latest() == b"# Metrics disabled\n"

    def test_isolated_registries(self) -> None:
        """Each registry owns its collectors, so several can coexist."""
        first = MetricsRegistry()
        second = MetricsRegistry()
        first.initialize()
        second.initialize()

        first.blob_bytes_total.labels(direction="in", namespace="memory").inc(3)

        assert b'direction="in"' in first.generate_latest()
        assert b'direction="in"' not in second.generate_latest()


class TestRecorders:
    """Tests for the module level recorders."""

    def test_record_blob_operation(self) -> None:
        record_blob_operation("create", "memory", "success", 0.01)
        record_blob_operation("get", None, "NotFoundError", 0.01)

        output = get_metrics().generate_latest().decode()

        if get_metrics().enabled:
            assert 'operation="create"' in output
            assert 'outcome="NotFoundError"' in output

    def test_record_blob_bytes(self) -> None:
        record_blob_bytes("out", "memory", 42)

        if get_metrics().enabled:
            assert b'direction="out"' in get_metrics().generate_latest()


class TestNormalizePath:
    """Tests for MetricsMiddleware path normalization."""

    def test_paths(self) -> None:
        middleware = MetricsMiddleware(FastAPI(), base_route="/blob")

        assert middleware._normalize_path("/blob") == "/blob"
        assert middleware._normalize_path("/blob/blob:memory:abc") == "/blob/{id}"
        assert middleware._normalize_path("/blob/blob:memory:abc/content") == "/blob/{id}/content"
        assert middleware._normalize_path("/docs") == "/docs"
