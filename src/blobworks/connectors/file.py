"""Local filesystem blob storage connector.

Stores blobs as flat files named by content hash:
    {directory}/{sha256}{extension}

This provides:
- Simple deployment (no external services)
- Easy backup and inspection
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import cast

import aiofiles  # type: ignore[import-untyped]
import aiofiles.os  # type: ignore[import-untyped]

from blobworks.connectors.base import BlobStorageConnector
from blobworks.errors import GeneralError, ValidationError, guard_string_value

logger = logging.getLogger(__name__)

_CONTENT_ID = re.compile(r"^[0-9a-f]{64}$")


class FileBlobStorageConnector(BlobStorageConnector):
    """Local filesystem blob storage backend."""

    NAMESPACE = "file"

    def __init__(self, directory: str | Path, extension: str | None = ".blob") -> None:
        """Initialize filesystem storage.

        Args:
            directory: Base directory for blob files
            extension: File extension appended to each content hash
        """
        guard_string_value(self.class_name, "directory", str(directory) if directory else "")
        self.directory = Path(directory).resolve()
        self.extension = extension or ""

    def _get_blob_path(self, content_id: str) -> Path:
        if not _CONTENT_ID.match(content_id):
            raise ValidationError(self.class_name, "contentId", {"value": content_id})
        return self.directory / f"{content_id}{self.extension}"

    async def bootstrap(self) -> bool:
        """Create the storage directory if it does not exist."""
        if await aiofiles.os.path.isdir(self.directory):
            logger.info(f"Blob directory exists: {self.directory}")
            return True

        logger.info(f"Creating blob directory: {self.directory}")
        try:
            await aiofiles.os.makedirs(self.directory, exist_ok=True)
        except OSError:
            logger.exception(f"Failed to create blob directory: {self.directory}")
            return False

        logger.info(f"Created blob directory: {self.directory}")
        return True

    async def set(self, blob: bytes) -> str:
        content = self._require_bytes(blob)
        content_id = self.compute_hash(content)
        blob_path = self._get_blob_path(content_id)

        try:
            await aiofiles.os.makedirs(self.directory, exist_ok=True)
            async with aiofiles.open(blob_path, "wb") as f:
                await f.write(content)
        except OSError as exc:
            raise GeneralError(self.class_name, "setBlobFailed", cause=exc) from exc

        logger.debug(f"Stored blob {content_id} at {blob_path} ({len(content)} bytes)")
        return self._build_id(content_id)

    async def get(self, id: str) -> bytes | None:
        blob_path = self._get_blob_path(self._content_id(id))

        try:
            async with aiofiles.open(blob_path, "rb") as f:
                return cast(bytes, await f.read())
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise GeneralError(self.class_name, "getBlobFailed", {"id": id}, exc) from exc

    async def remove(self, id: str) -> bool:
        blob_path = self._get_blob_path(self._content_id(id))

        try:
            await aiofiles.os.remove(blob_path)
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise GeneralError(self.class_name, "removeBlobFailed", {"id": id}, exc) from exc

        logger.debug(f"Deleted blob at {blob_path}")
        return True
