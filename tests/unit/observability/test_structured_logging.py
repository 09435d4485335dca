"""Tests for structured logging."""

from __future__ import annotations

import json
import logging

from blobworks.observability import LogContext, request_id_var
from blobworks.observability.logging import JsonFormatter, node_identity_var


def _record(message: str) -> logging.LogRecord:
    return logging.LogRecord(
        name="blobworks.service.blob_storage",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )


class TestLogContext:
    """Tests for LogContext."""

    def test_sets_and_resets(self) -> None:
        with LogContext(request_id="req-1", node_identity="did:node:1"):
            assert request_id_var.get() == "req-1"
            assert node_identity_var.get() == "did:node:1"

        assert request_id_var.get() == ""
        assert node_identity_var.get() == ""

    def test_skips_none_and_unknown(self) -> None:
        with LogContext(user_identity=None, unknown="x"):
            assert request_id_var.get() == ""


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_includes_context(self) -> None:
        with LogContext(request_id="req-2", node_identity="did:node:1"):
            output = json.loads(JsonFormatter().format(_record("Blob created")))

        assert output["message"] == "Blob created"
        assert output["level"] == "INFO"
        assert output["logger"] == "blobworks.service.blob_storage"
        assert output["request_id"] == "req-2"
        assert output["node_identity"] == "did:node:1"
        assert "user_identity" not in output

    def test_extra_fields(self) -> None:
        record = _record("x")
        record.blob_id = "blob:memory:abc"

        output = json.loads(JsonFormatter().format(record))

        assert output["blob_id"] == "blob:memory:abc"
