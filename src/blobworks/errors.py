"""Domain errors for blob storage.

All errors raised by connectors and the blob storage service derive from
BlobStorageError, which records:
- source: the class or module raising the error
- message: a short message key (e.g. "createFailed")
- properties: structured context for logs and API responses
- cause: the underlying exception, if any

The REST layer maps these to HTTP responses in blobworks.api.errors.
"""

from __future__ import annotations

from typing import Any


class BlobStorageError(Exception):
    """Base class for all blob storage errors."""

    def __init__(
        self,
        source: str,
        message: str,
        properties: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.source = source
        self.message = message
        self.properties = properties or {}
        self.cause = cause
        super().__init__(self._format())

    def _format(self) -> str:
        text = f"{self.source}: {self.message}"
        if self.properties:
            details = ", ".join(f"{key}={value!r}" for key, value in self.properties.items())
            text = f"{text} ({details})"
        if self.cause is not None:
            text = f"{text}: {self.cause}"
        return text

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        data: dict[str, Any] = {
            "name": type(self).__name__,
            "source": self.source,
            "message": self.message,
        }
        if self.properties:
            data["properties"] = self.properties
        if self.cause is not None:
            data["cause"] = str(self.cause)
        return data


class ValidationError(BlobStorageError):
    """Malformed input: bad base64, invalid JSON-LD, missing identity."""


class NamespaceMismatchError(BlobStorageError):
    """A URN's namespace does not belong to the connector it was sent to."""

    def __init__(self, source: str, namespace: str, id: str) -> None:
        super().__init__(source, "namespaceMismatch", {"namespace": namespace, "id": id})
        self.namespace = namespace
        self.id = id


class NotFoundError(BlobStorageError):
    """Metadata entry or blob content is absent."""

    def __init__(self, source: str, message: str, id: str) -> None:
        super().__init__(source, message, {"id": id})
        self.id = id


class GeneralError(BlobStorageError):
    """Wraps an unexpected backend, SDK or filesystem failure."""


def guard_string_value(source: str, name: str, value: Any) -> str:
    """Require a non-empty string.

    Raises:
        ValidationError: If value is not a non-empty string
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(source, "stringValue", {"property": name})
    return value
