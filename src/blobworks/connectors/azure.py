"""Azure Blob Storage connector."""

from __future__ import annotations

import logging
from typing import Any, cast

from azure.core.exceptions import ResourceNotFoundError

from blobworks.connectors.base import BlobStorageConnector
from blobworks.errors import GeneralError, guard_string_value

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://{accountName}.blob.core.windows.net/"


class AzureBlobStorageConnector(BlobStorageConnector):
    """Azure Blob Storage implementation using azure-storage-blob aio client."""

    NAMESPACE = "azure"

    def __init__(
        self,
        account_name: str,
        account_key: str,
        container_name: str,
        endpoint: str | None = None,
    ) -> None:
        self.account_name = guard_string_value(self.class_name, "accountName", account_name)
        self.account_key = guard_string_value(self.class_name, "accountKey", account_key)
        self.container_name = guard_string_value(self.class_name, "containerName", container_name)
        self.account_url = (endpoint or DEFAULT_ENDPOINT).replace("{accountName}", account_name)
        self._client: Any | None = None

    async def _get_client(self) -> Any:
        """Get or create BlobServiceClient."""
        if self._client is None:
            from azure.storage.blob.aio import BlobServiceClient

            self._client = BlobServiceClient(
                account_url=self.account_url,
                credential={"account_name": self.account_name, "account_key": self.account_key},
            )
        return self._client

    async def _get_container_client(self) -> Any:
        client = await self._get_client()
        return client.get_container_client(self.container_name)

    async def bootstrap(self) -> bool:
        """Create the container if it does not exist."""
        logger.info(f"Creating container: {self.container_name}")
        try:
            container_client = await self._get_container_client()
            if await container_client.exists():
                logger.info(f"Container exists: {self.container_name}")
                return True
            await container_client.create_container()
        except Exception:
            logger.exception(f"Failed to create container: {self.container_name}")
            return False

        logger.info(f"Created container: {self.container_name}")
        return True

    async def set(self, blob: bytes) -> str:
        content = self._require_bytes(blob)
        blob_name = self.compute_hash(content)

        try:
            container_client = await self._get_container_client()
            blob_client = container_client.get_blob_client(blob_name)
            await blob_client.upload_blob(content, overwrite=True)
        except Exception as exc:
            raise GeneralError(self.class_name, "setBlobFailed", cause=exc) from exc

        return self._build_id(blob_name)

    async def get(self, id: str) -> bytes | None:
        blob_name = self._content_id(id)

        try:
            container_client = await self._get_container_client()
            blob_client = container_client.get_blob_client(blob_name)
            stream = await blob_client.download_blob()
            return cast(bytes, await stream.readall())
        except ResourceNotFoundError:
            return None
        except Exception as exc:
            raise GeneralError(
                self.class_name,
                "getBlobFailed",
                {"id": id, "namespace": self.NAMESPACE},
                exc,
            ) from exc

    async def remove(self, id: str) -> bool:
        blob_name = self._content_id(id)

        try:
            container_client = await self._get_container_client()
            blob_client = container_client.get_blob_client(blob_name)
            await blob_client.delete_blob(delete_snapshots="include")
            return True
        except ResourceNotFoundError:
            return False
        except Exception as exc:
            raise GeneralError(self.class_name, "removeBlobFailed", {"id": id}, exc) from exc

    async def close(self) -> None:
        """Close the underlying client."""
        if self._client is not None:
            await self._client.close()
            self._client = None
