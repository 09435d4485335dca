"""Google Cloud Storage blob storage connector."""

from __future__ import annotations

import asyncio
import base64
import binascii
import json
import logging
from typing import Any, cast

from google.api_core.exceptions import NotFound

from blobworks.connectors.base import BlobStorageConnector
from blobworks.errors import GeneralError, ValidationError, guard_string_value

logger = logging.getLogger(__name__)


class GcpBlobStorageConnector(BlobStorageConnector):
    """GCS blob storage implementation.

    Uses google-cloud-storage with asyncio.to_thread for non-blocking I/O.
    """

    NAMESPACE = "gcp"

    def __init__(
        self,
        project_id: str,
        bucket_name: str,
        credentials: str | None = None,
        api_endpoint: str | None = None,
    ) -> None:
        """Initialize GCS storage.

        Args:
            project_id: GCP project id
            bucket_name: Bucket holding the blobs
            credentials: Base64 encoded service account JSON (optional,
                falls back to application default credentials)
            api_endpoint: Custom endpoint, e.g. for an emulator
        """
        self.project_id = guard_string_value(self.class_name, "projectId", project_id)
        self._credentials_info: dict[str, Any] | None = None
        if credentials:
            try:
                self._credentials_info = json.loads(base64.b64decode(credentials, validate=True))
            except (binascii.Error, ValueError) as exc:
                raise ValidationError(
                    self.class_name, "stringBase64", {"property": "credentials"}, exc
                ) from exc
        self.bucket_name = guard_string_value(self.class_name, "bucketName", bucket_name)
        self.api_endpoint = api_endpoint
        self._client: Any | None = None

    async def _get_client(self) -> Any:
        """Get or create GCS client."""
        if self._client is None:
            from google.cloud import storage

            client_options = {"api_endpoint": self.api_endpoint} if self.api_endpoint else None
            if self._credentials_info is not None:
                from google.oauth2 import service_account

                credentials = service_account.Credentials.from_service_account_info(
                    self._credentials_info
                )
                self._client = storage.Client(
                    project=self.project_id,
                    credentials=credentials,
                    client_options=client_options,
                )
            else:
                self._client = storage.Client(
                    project=self.project_id, client_options=client_options
                )
        return self._client

    async def _get_blob(self, key: str) -> Any:
        client = await self._get_client()
        return client.bucket(self.bucket_name).blob(key)

    async def bootstrap(self) -> bool:
        """Create the bucket if it does not exist."""
        logger.info(f"Creating bucket: {self.bucket_name}")
        try:
            client = await self._get_client()
            bucket = await asyncio.to_thread(client.lookup_bucket, self.bucket_name)
            if bucket is not None:
                logger.info(f"Bucket exists: {self.bucket_name}")
                return True
            await asyncio.to_thread(client.create_bucket, self.bucket_name)
        except Exception:
            logger.exception(f"Failed to create bucket: {self.bucket_name}")
            return False

        logger.info(f"Created bucket: {self.bucket_name}")
        return True

    async def set(self, blob: bytes) -> str:
        content = self._require_bytes(blob)
        key = self.compute_hash(content)

        try:
            gcs_blob = await self._get_blob(key)
            await asyncio.to_thread(
                gcs_blob.upload_from_string, content, content_type="application/octet-stream"
            )
        except Exception as exc:
            raise GeneralError(self.class_name, "setBlobFailed", cause=exc) from exc

        return self._build_id(key)

    async def get(self, id: str) -> bytes | None:
        key = self._content_id(id)

        try:
            gcs_blob = await self._get_blob(key)
            if not await asyncio.to_thread(gcs_blob.exists):
                return None
            return cast(bytes, await asyncio.to_thread(gcs_blob.download_as_bytes))
        except NotFound:
            return None
        except Exception as exc:
            raise GeneralError(self.class_name, "getBlobFailed", {"id": id}, exc) from exc

    async def remove(self, id: str) -> bool:
        key = self._content_id(id)

        try:
            gcs_blob = await self._get_blob(key)
            if not await asyncio.to_thread(gcs_blob.exists):
                return False
            await asyncio.to_thread(gcs_blob.delete)
            return True
        except NotFound:
            return False
        except Exception as exc:
            raise GeneralError(self.class_name, "removeBlobFailed", {"id": id}, exc) from exc

    async def close(self) -> None:
        if self._client is not None:
            await asyncio.to_thread(self._client.close)
            self._client = None
