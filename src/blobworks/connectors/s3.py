"""S3-compatible blob storage connector.

Supports:
- AWS S3
- MinIO
- Any S3-compatible object storage

Objects are keyed by the hex SHA-256 of their content.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, cast

from botocore.exceptions import ClientError

from blobworks.connectors.base import BlobStorageConnector
from blobworks.errors import GeneralError, guard_string_value

if TYPE_CHECKING:
    import aioboto3

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


def _is_not_found(exc: ClientError) -> bool:
    return str(exc.response.get("Error", {}).get("Code", "")) in _NOT_FOUND_CODES


class S3BlobStorageConnector(BlobStorageConnector):
    """S3-compatible blob storage implementation.

    Uses aioboto3 for async S3 operations.

    Configuration via:
    - region: AWS region
    - bucket_name: S3 bucket name
    - access_key_id / secret_access_key: explicit credentials
    - endpoint: For non-AWS S3-compatible services (path-style addressing)
    """

    NAMESPACE = "s3"

    def __init__(
        self,
        region: str,
        bucket_name: str,
        access_key_id: str,
        secret_access_key: str,
        endpoint: str | None = None,
    ):
        """Initialize S3 blob storage.

        Args:
            region: AWS region
            bucket_name: S3 bucket name
            access_key_id: Access key
            secret_access_key: Secret key
            endpoint: Custom endpoint for S3-compatible services
        """
        self.region = guard_string_value(self.class_name, "region", region)
        self.bucket_name = guard_string_value(self.class_name, "bucketName", bucket_name)
        self.access_key_id = guard_string_value(self.class_name, "accessKeyId", access_key_id)
        self.secret_access_key = guard_string_value(
            self.class_name, "secretAccessKey", secret_access_key
        )
        self.endpoint = endpoint
        self._session: "aioboto3.Session | None" = None

    async def _get_session(self) -> "aioboto3.Session":
        """Get or create aioboto3 session."""
        if self._session is None:
            import aioboto3

            self._session = aioboto3.Session(
                aws_access_key_id=self.access_key_id,
                aws_secret_access_key=self.secret_access_key,
                region_name=self.region,
            )
        return self._session

    def _client(self, session: Any) -> Any:
        from botocore.config import Config

        return session.client(
            "s3",
            endpoint_url=self.endpoint,
            config=Config(s3={"addressing_style": "path"}),
        )

    async def bootstrap(self) -> bool:
        """Create the bucket if it does not exist."""
        logger.info(f"Creating bucket: {self.bucket_name}")
        try:
            session = await self._get_session()
            async with self._client(session) as s3:
                response = await s3.list_buckets()
                names = {bucket.get("Name") for bucket in response.get("Buckets", [])}
                if self.bucket_name in names:
                    logger.info(f"Bucket exists: {self.bucket_name}")
                    return True
                await s3.create_bucket(Bucket=self.bucket_name)
        except Exception:
            logger.exception(f"Failed to create bucket: {self.bucket_name}")
            return False

        logger.info(f"Created bucket: {self.bucket_name}")
        return True

    async def set(self, blob: bytes) -> str:
        content = self._require_bytes(blob)
        key = self.compute_hash(content)

        try:
            session = await self._get_session()
            async with self._client(session) as s3:
                await s3.put_object(Bucket=self.bucket_name, Key=key, Body=content)
        except Exception as exc:
            raise GeneralError(self.class_name, "setBlobFailed", cause=exc) from exc

        return self._build_id(key)

    async def get(self, id: str) -> bytes | None:
        key = self._content_id(id)

        try:
            session = await self._get_session()
            async with self._client(session) as s3:
                response = await s3.get_object(Bucket=self.bucket_name, Key=key)
                async with response["Body"] as stream:
                    return cast(bytes, await stream.read())
        except ClientError as exc:
            if _is_not_found(exc):
                return None
            raise GeneralError(self.class_name, "getBlobFailed", {"id": id}, exc) from exc
        except Exception as exc:
            raise GeneralError(self.class_name, "getBlobFailed", {"id": id}, exc) from exc

    async def remove(self, id: str) -> bool:
        key = self._content_id(id)

        try:
            session = await self._get_session()
            async with self._client(session) as s3:
                try:
                    await s3.head_object(Bucket=self.bucket_name, Key=key)
                except ClientError as exc:
                    if _is_not_found(exc):
                        return False
                    raise
                await s3.delete_object(Bucket=self.bucket_name, Key=key)
                return True
        except Exception as exc:
            raise GeneralError(self.class_name, "removeBlobFailed", {"id": id}, exc) from exc

    async def close(self) -> None:
        """Close the S3 session."""
        # aioboto3 sessions don't need explicit closing
        self._session = None
