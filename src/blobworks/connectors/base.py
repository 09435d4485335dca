"""Base blob storage connector interface.

Defines the abstract contract every storage backend implements:
- set(blob) -> id: content-addressed write, idempotent for identical bytes
- get(id) -> bytes | None: None when the backend reports not-found
- remove(id) -> bool: False when the blob did not exist
"""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from typing import ClassVar

from blobworks import urn
from blobworks.errors import NamespaceMismatchError, ValidationError


class BlobStorageConnector(ABC):
    """Abstract base class for blob storage backends."""

    NAMESPACE: ClassVar[str] = ""

    @property
    def class_name(self) -> str:
        return type(self).__name__

    @property
    def namespace(self) -> str:
        return self.NAMESPACE

    async def bootstrap(self) -> bool:
        """Prepare backend resources (directory, bucket, container).

        Returns:
            True if the backend is ready, False if preparation failed
        """
        return True

    @abstractmethod
    async def set(self, blob: bytes) -> str:
        """Store a blob.

        Args:
            blob: Raw bytes to store

        Returns:
            The blob id in blob:<namespace>:<content-id> form
        """
        ...

    @abstractmethod
    async def get(self, id: str) -> bytes | None:
        """Fetch a blob.

        Args:
            id: The blob id

        Returns:
            The bytes, or None if the backend has no such blob

        Raises:
            NamespaceMismatchError: If id belongs to another connector
            GeneralError: On any other backend failure
        """
        ...

    @abstractmethod
    async def remove(self, id: str) -> bool:
        """Delete a blob.

        Args:
            id: The blob id

        Returns:
            True if deleted, False if not found

        Raises:
            NamespaceMismatchError: If id belongs to another connector
            GeneralError: On any other backend failure
        """
        ...

    async def close(self) -> None:
        """Release backend clients."""
        return None

    @staticmethod
    def compute_hash(content: bytes) -> str:
        """Compute SHA256 hash of content."""
        return hashlib.sha256(content).hexdigest()

    def _build_id(self, content_id: str) -> str:
        return urn.build(self.namespace, content_id)

    def _content_id(self, id: str) -> str:
        """Validate id and return its content-specific part."""
        parsed = urn.BlobUrn.parse(id, source=self.class_name)
        if parsed.namespace != self.namespace:
            raise NamespaceMismatchError(self.class_name, self.namespace, id)
        return parsed.content_id

    def _require_bytes(self, blob: bytes) -> bytes:
        if not isinstance(blob, (bytes, bytearray, memoryview)):
            raise ValidationError(self.class_name, "uint8Array", {"property": "blob"})
        return bytes(blob)
