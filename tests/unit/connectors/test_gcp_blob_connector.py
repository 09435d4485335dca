"""Unit tests for the Google Cloud Storage blob connector."""

from __future__ import annotations

import base64
import json
from typing import Any

import pytest

from blobworks.connectors.gcp import GcpBlobStorageConnector
from blobworks.errors import ValidationError


class FakeGcsBlob:
    def __init__(self, store: dict[str, bytes], name: str) -> None:
        self._store = store
        self.name = name

    def upload_from_string(self, data: bytes, content_type: str | None = None) -> None:
        self._store[self.name] = data

    def download_as_bytes(self) -> bytes:
        return self._store[self.name]

    def exists(self) -> bool:
        return self.name in self._store

    def delete(self) -> None:
        self._store.pop(self.name, None)


class FakeGcsBucket:
    def __init__(self, store: dict[str, bytes]) -> None:
        self._store = store

    def blob(self, name: str) -> FakeGcsBlob:
        return FakeGcsBlob(self._store, name)


class FakeGcsClient:
    def __init__(self) -> None:
        self._store: dict[str, bytes] = {}
        self.buckets: set[str] = set()

    def bucket(self, name: str) -> FakeGcsBucket:
        return FakeGcsBucket(self._store)

    def lookup_bucket(self, name: str) -> object | None:
        return object() if name in self.buckets else None

    def create_bucket(self, name: str) -> None:
        self.buckets.add(name)


@pytest.mark.asyncio
async def test_gcp_connector_roundtrip(monkeypatch: pytest.MonkeyPatch) -> None:
    """Store, retrieve and delete using mocked GCS storage."""
    client = FakeGcsClient()

    async def get_client() -> Any:
        return client

    connector = GcpBlobStorageConnector(project_id="test-project", bucket_name="blobs")
    monkeypatch.setattr(connector, "_get_client", get_client)

    assert await connector.bootstrap() is True
    assert client.buckets == {"blobs"}

    blob_id = await connector.set(b"blobworks-gcs")

    assert blob_id.startswith("blob:gcp:")
    assert await connector.get(blob_id) == b"blobworks-gcs"
    assert await connector.remove(blob_id) is True
    assert await connector.get(blob_id) is None
    assert await connector.remove(blob_id) is False


def test_gcp_connector_decodes_credentials() -> None:
    info = {"type": "service_account", "project_id": "test-project"}
    encoded = base64.b64encode(json.dumps(info).encode()).decode()

    connector = GcpBlobStorageConnector(
        project_id="test-project", bucket_name="blobs", credentials=encoded
    )

    assert connector._credentials_info == info


def test_gcp_connector_rejects_bad_credentials() -> None:
    with pytest.raises(ValidationError):
        GcpBlobStorageConnector(project_id="p", bucket_name="b", credentials="%%%")
