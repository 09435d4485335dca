"""Blob storage connectors for blobworks.

Provides interchangeable content-addressed storage backends:
- In-memory (tests, development)
- Local filesystem (default for single-node deployments)
- S3-compatible storage (AWS S3, MinIO)
- Azure Blob Storage
- Google Cloud Storage
- IPFS HTTP API

Cloud connectors are imported lazily by the registry so that only the SDKs
for enabled backends are loaded.
"""

from blobworks.connectors.base import BlobStorageConnector
from blobworks.connectors.file import FileBlobStorageConnector
from blobworks.connectors.memory import MemoryBlobStorageConnector
from blobworks.connectors.registry import ConnectorRegistry, build_registry, create_connector

__all__ = [
    "BlobStorageConnector",
    "ConnectorRegistry",
    "FileBlobStorageConnector",
    "MemoryBlobStorageConnector",
    "build_registry",
    "create_connector",
]
