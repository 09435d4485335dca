"""Tests for the blob storage error taxonomy."""

import pytest

from blobworks.errors import (
    BlobStorageError,
    GeneralError,
    NamespaceMismatchError,
    NotFoundError,
    ValidationError,
    guard_string_value,
)


class TestBlobStorageError:
    """Tests for BlobStorageError."""

    def test_fields(self) -> None:
        """Source, message, properties and cause are recorded."""
        cause = RuntimeError("disk full")
        error = GeneralError("FileConnector", "setBlobFailed", {"id": "x"}, cause)

        assert error.source == "FileConnector"
        assert error.message == "setBlobFailed"
        assert error.properties == {"id": "x"}
        assert error.cause is cause
        assert isinstance(error, BlobStorageError)

    def test_str_includes_context(self) -> None:
        """String form carries source, message, properties and cause."""
        error = GeneralError("Svc", "createFailed", {"namespace": "s3"}, ValueError("boom"))

        assert str(error) == "Svc: createFailed (namespace='s3'): boom"

    def test_to_dict(self) -> None:
        """to_dict omits empty properties and cause."""
        assert ValidationError("Svc", "stringBase64").to_dict() == {
            "name": "ValidationError",
            "source": "Svc",
            "message": "stringBase64",
        }

    def test_namespace_mismatch(self) -> None:
        """NamespaceMismatchError records the expected namespace and id."""
        error = NamespaceMismatchError("MemoryBlobStorageConnector", "memory", "blob:file:abc")

        assert error.message == "namespaceMismatch"
        assert error.namespace == "memory"
        assert error.id == "blob:file:abc"

    def test_not_found(self) -> None:
        """NotFoundError records the id."""
        error = NotFoundError("Svc", "entryNotFound", "blob:memory:abc")

        assert error.id == "blob:memory:abc"
        assert error.properties == {"id": "blob:memory:abc"}


class TestGuardStringValue:
    """Tests for guard_string_value."""

    def test_returns_value(self) -> None:
        assert guard_string_value("Src", "bucketName", "bucket") == "bucket"

    @pytest.mark.parametrize("value", ["", "   ", None, 3])
    def test_rejects_empty_or_non_string(self, value: object) -> None:
        """Empty or non-string values raise ValidationError naming the property."""
        with pytest.raises(ValidationError) as exc_info:
            guard_string_value("Src", "bucketName", value)

        assert exc_info.value.properties == {"property": "bucketName"}
