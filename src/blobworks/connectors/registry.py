"""Connector registry for blob storage.

Builds the explicit namespace -> connector mapping used by the service.
The mapping is assembled once at startup from settings; there is no global
mutable factory.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping

from blobworks.config import Settings
from blobworks.connectors.base import BlobStorageConnector
from blobworks.errors import ValidationError

logger = logging.getLogger(__name__)


class ConnectorRegistry(Mapping[str, BlobStorageConnector]):
    """Immutable namespace -> connector mapping, in registration order."""

    def __init__(self, connectors: list[BlobStorageConnector] | None = None) -> None:
        self._connectors: dict[str, BlobStorageConnector] = {}
        for connector in connectors or []:
            if connector.namespace in self._connectors:
                raise ValidationError(
                    "ConnectorRegistry", "duplicateNamespace", {"namespace": connector.namespace}
                )
            self._connectors[connector.namespace] = connector

    def __getitem__(self, namespace: str) -> BlobStorageConnector:
        return self._connectors[namespace]

    def __iter__(self) -> Iterator[str]:
        return iter(self._connectors)

    def __len__(self) -> int:
        return len(self._connectors)

    async def bootstrap(self) -> dict[str, bool]:
        """Run bootstrap on every connector."""
        results: dict[str, bool] = {}
        for namespace, connector in self._connectors.items():
            results[namespace] = await connector.bootstrap()
            if not results[namespace]:
                logger.warning(f"Bootstrap failed for connector '{namespace}'")
        return results

    async def close(self) -> None:
        for connector in self._connectors.values():
            await connector.close()


def create_connector(namespace: str, settings: Settings) -> BlobStorageConnector:
    """Create one connector from settings.

    Raises:
        ValidationError: If the namespace is unknown or its settings are incomplete
    """
    if namespace == "memory":
        from blobworks.connectors.memory import MemoryBlobStorageConnector

        return MemoryBlobStorageConnector()
    if namespace == "file":
        from blobworks.connectors.file import FileBlobStorageConnector

        return FileBlobStorageConnector(
            directory=settings.file_directory, extension=settings.file_extension
        )
    if namespace == "s3":
        from blobworks.connectors.s3 import S3BlobStorageConnector

        return S3BlobStorageConnector(
            region=settings.s3_region or "",
            bucket_name=settings.s3_bucket_name or "",
            access_key_id=settings.s3_access_key_id or "",
            secret_access_key=settings.s3_secret_access_key or "",
            endpoint=settings.s3_endpoint,
        )
    if namespace == "azure":
        from blobworks.connectors.azure import AzureBlobStorageConnector

        return AzureBlobStorageConnector(
            account_name=settings.azure_account_name or "",
            account_key=settings.azure_account_key or "",
            container_name=settings.azure_container_name or "",
            endpoint=settings.azure_endpoint,
        )
    if namespace == "gcp":
        from blobworks.connectors.gcp import GcpBlobStorageConnector

        return GcpBlobStorageConnector(
            project_id=settings.gcp_project_id or "",
            bucket_name=settings.gcp_bucket_name or "",
            credentials=settings.gcp_credentials,
            api_endpoint=settings.gcp_api_endpoint,
        )
    if namespace == "ipfs":
        from blobworks.connectors.ipfs import IpfsBlobStorageConnector

        return IpfsBlobStorageConnector(
            api_url=settings.ipfs_api_url or "",
            bearer_token=settings.ipfs_bearer_token,
        )
    raise ValidationError(
        "ConnectorRegistry",
        "unsupportedNamespace",
        {"namespace": namespace, "supported": ["memory", "file", "s3", "azure", "gcp", "ipfs"]},
    )


def build_registry(settings: Settings) -> ConnectorRegistry:
    """Build the registry for every namespace enabled in settings."""
    namespaces = settings.connector_namespaces
    if not namespaces:
        raise ValidationError("ConnectorRegistry", "noConnectors")
    return ConnectorRegistry([create_connector(namespace, settings) for namespace in namespaces])
