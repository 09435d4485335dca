"""Unit tests for the local filesystem blob connector."""

from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from blobworks.connectors import FileBlobStorageConnector
from blobworks.errors import NamespaceMismatchError, ValidationError


@pytest.mark.asyncio
async def test_file_connector_roundtrip(tmp_path: Path) -> None:
    """Store, retrieve and delete a blob on disk."""
    connector = FileBlobStorageConnector(tmp_path / "blobs")
    assert await connector.bootstrap() is True

    content = b"blobworks-file"
    blob_id = await connector.set(content)
    digest = hashlib.sha256(content).hexdigest()

    assert blob_id == f"blob:file:{digest}"
    assert (tmp_path / "blobs" / f"{digest}.blob").read_bytes() == content
    assert await connector.get(blob_id) == content

    assert await connector.remove(blob_id) is True
    assert await connector.get(blob_id) is None
    assert await connector.remove(blob_id) is False


@pytest.mark.asyncio
async def test_file_connector_bootstrap_existing_directory(tmp_path: Path) -> None:
    connector = FileBlobStorageConnector(tmp_path)

    assert await connector.bootstrap() is True


@pytest.mark.asyncio
async def test_file_connector_custom_extension(tmp_path: Path) -> None:
    connector = FileBlobStorageConnector(tmp_path, extension="")
    blob_id = await connector.set(b"x")

    assert (tmp_path / blob_id.rsplit(":", 1)[1]).exists()


@pytest.mark.asyncio
async def test_file_connector_namespace_mismatch(tmp_path: Path) -> None:
    connector = FileBlobStorageConnector(tmp_path)

    with pytest.raises(NamespaceMismatchError):
        await connector.get("blob:memory:abc")


def test_file_connector_requires_directory() -> None:
    with pytest.raises(ValidationError):
        FileBlobStorageConnector("")


@pytest.mark.asyncio
@pytest.mark.parametrize("blob_id", ["blob:file:../outside", "blob:file:sub/dir", "blob:file:ABC"])
async def test_file_connector_rejects_non_hash_ids(tmp_path: Path, blob_id: str) -> None:
    """Only hex SHA-256 content ids map to files inside the directory."""
    directory = tmp_path / "blobs"
    (tmp_path / "outside.blob").write_bytes(b"secret")
    connector = FileBlobStorageConnector(directory)

    with pytest.raises(ValidationError) as exc_info:
        await connector.get(blob_id)
    assert exc_info.value.message == "contentId"

    with pytest.raises(ValidationError):
        await connector.remove(blob_id)
    assert (tmp_path / "outside.blob").exists()
