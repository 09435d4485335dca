"""In-memory blob storage connector.

Keeps blobs in a dictionary keyed by SHA-256. Intended for tests and
single-process development deployments.
"""

from __future__ import annotations

from blobworks.connectors.base import BlobStorageConnector


class MemoryBlobStorageConnector(BlobStorageConnector):
    """Dictionary-backed blob storage."""

    NAMESPACE = "memory"

    def __init__(self) -> None:
        self._store: dict[str, bytes] = {}

    async def set(self, blob: bytes) -> str:
        content = self._require_bytes(blob)
        content_id = self.compute_hash(content)
        self._store[content_id] = content
        return self._build_id(content_id)

    async def get(self, id: str) -> bytes | None:
        return self._store.get(self._content_id(id))

    async def remove(self, id: str) -> bool:
        content_id = self._content_id(id)
        if content_id in self._store:
            del self._store[content_id]
            return True
        return False

    def get_store(self) -> dict[str, bytes]:
        """Expose the backing dictionary (for inspection in tests)."""
        return self._store
