"""Global pytest configuration and fixtures.

Provides in-memory building blocks shared by the unit tests:
- the BlobStorageEntry schema
- memory blob connector and entry store
- a BlobStorageService wired to them
"""

from __future__ import annotations

import pytest

from blobworks.connectors import ConnectorRegistry, MemoryBlobStorageConnector
from blobworks.entity.memory import MemoryEntityStorageConnector
from blobworks.entity.schema import EntitySchema
from blobworks.service import BlobStorageService, build_blob_storage_entry_schema
from blobworks.tenancy import TenantContext


@pytest.fixture
def entry_schema() -> EntitySchema:
    return build_blob_storage_entry_schema()


@pytest.fixture
def memory_connector() -> MemoryBlobStorageConnector:
    return MemoryBlobStorageConnector()


@pytest.fixture
def entry_storage(entry_schema: EntitySchema) -> MemoryEntityStorageConnector:
    return MemoryEntityStorageConnector(entry_schema)


@pytest.fixture
def service(
    memory_connector: MemoryBlobStorageConnector,
    entry_storage: MemoryEntityStorageConnector,
) -> BlobStorageService:
    """Service scoped by node identity only, no encryption."""
    return BlobStorageService(
        connectors=ConnectorRegistry([memory_connector]),
        entry_storage=entry_storage,
    )


@pytest.fixture
def node_tenant() -> TenantContext:
    return TenantContext(node_identity="did:node:1")
