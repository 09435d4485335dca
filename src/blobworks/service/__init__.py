"""Blob storage service and its entry model."""

from blobworks.service.blob_storage import BlobStorageService, blob_hash
from blobworks.service.entry import (
    ENTRY_TABLE_NAME,
    BlobStorageEntry,
    BlobStorageEntryList,
    CompressionType,
    CreateOptions,
    GetOptions,
    build_blob_storage_entry_schema,
    record_property,
)

__all__ = [
    "ENTRY_TABLE_NAME",
    "BlobStorageEntry",
    "BlobStorageEntryList",
    "BlobStorageService",
    "CompressionType",
    "CreateOptions",
    "GetOptions",
    "blob_hash",
    "build_blob_storage_entry_schema",
    "record_property",
]
