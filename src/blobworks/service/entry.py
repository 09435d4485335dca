"""Blob storage entry model.

A BlobStorageEntry is the metadata record kept for every stored blob per
identity scope. This module defines:
- the entry and entry list dataclasses with their JSON / JSON-LD renderings
- the explicit entity schema the entry store is built from
- the options accepted by the service's create and get operations
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from blobworks.entity.schema import EntityProperty, EntitySchema, PropertyType, SortDirection
from blobworks.jsonld import (
    CONTEXT_ROOT,
    CONTEXT_ROOT_COMMON,
    TYPE_ENTRY,
    TYPE_ENTRY_LIST,
    contexts_of,
    merge_contexts,
)

ENTRY_TABLE_NAME = "blob_storage_entries"


class CompressionType(str, Enum):
    """Compression applied to blob bytes before storage."""

    GZIP = "gzip"
    DEFLATE = "deflate"


def build_blob_storage_entry_schema() -> EntitySchema:
    """Build the entity schema of BlobStorageEntry.

    The primary key is (id, user_identity, node_identity) so identical
    content stored by two tenants yields two entries with one id.
    """
    return EntitySchema(
        type="BlobStorageEntry",
        properties=(
            EntityProperty("id", PropertyType.STRING, is_primary=True, optional=False),
            EntityProperty(
                "date_created",
                PropertyType.STRING,
                optional=False,
                format="date-time",
                sort_direction=SortDirection.DESCENDING,
            ),
            EntityProperty(
                "date_modified",
                PropertyType.STRING,
                format="date-time",
                sort_direction=SortDirection.DESCENDING,
            ),
            EntityProperty("blob_size", PropertyType.INTEGER, optional=False),
            EntityProperty("blob_hash", PropertyType.STRING, optional=False),
            EntityProperty("encoding_format", PropertyType.STRING),
            EntityProperty("file_extension", PropertyType.STRING),
            EntityProperty("metadata", PropertyType.OBJECT),
            EntityProperty("is_encrypted", PropertyType.BOOLEAN, optional=False),
            EntityProperty("compression", PropertyType.STRING),
            EntityProperty("user_identity", PropertyType.STRING, is_primary=True),
            EntityProperty("node_identity", PropertyType.STRING, is_primary=True),
        ),
    )


# snake_case record field -> camelCase JSON property
_JSON_NAMES = {
    "id": "id",
    "date_created": "dateCreated",
    "date_modified": "dateModified",
    "blob_size": "blobSize",
    "blob_hash": "blobHash",
    "encoding_format": "encodingFormat",
    "file_extension": "fileExtension",
    "metadata": "metadata",
    "is_encrypted": "isEncrypted",
    "compression": "compression",
}
_RECORD_NAMES = {json_name: name for name, json_name in _JSON_NAMES.items()}


def record_property(name: str) -> str:
    """Map a camelCase JSON property name to its record field name."""
    return _RECORD_NAMES.get(name, name)


@dataclass
class BlobStorageEntry:
    """Metadata describing one stored blob.

    blob_size and blob_hash always describe the plaintext, even when the
    stored bytes are compressed or encrypted.
    """

    id: str
    date_created: str
    blob_size: int
    blob_hash: str
    date_modified: str | None = None
    encoding_format: str | None = None
    file_extension: str | None = None
    metadata: dict[str, Any] | None = None
    is_encrypted: bool = False
    compression: CompressionType | None = None
    user_identity: str | None = None
    node_identity: str | None = None
    blob: bytes | None = None

    def to_record(self) -> dict[str, Any]:
        """Convert to an entity store record."""
        return {
            "id": self.id,
            "date_created": self.date_created,
            "date_modified": self.date_modified,
            "blob_size": self.blob_size,
            "blob_hash": self.blob_hash,
            "encoding_format": self.encoding_format,
            "file_extension": self.file_extension,
            "metadata": self.metadata,
            "is_encrypted": self.is_encrypted,
            "compression": self.compression.value if self.compression else None,
            "user_identity": self.user_identity,
            "node_identity": self.node_identity,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "BlobStorageEntry":
        """Create from an entity store record."""
        compression = record.get("compression")
        return cls(
            id=record["id"],
            date_created=record["date_created"],
            date_modified=record.get("date_modified"),
            blob_size=int(record["blob_size"]),
            blob_hash=record["blob_hash"],
            encoding_format=record.get("encoding_format"),
            file_extension=record.get("file_extension"),
            metadata=record.get("metadata"),
            is_encrypted=bool(record.get("is_encrypted")),
            compression=CompressionType(compression) if compression else None,
            user_identity=record.get("user_identity"),
            node_identity=record.get("node_identity"),
        )

    @property
    def context(self) -> list[Any]:
        """JSON-LD context: the blob storage roots followed by the metadata's."""
        return merge_contexts([CONTEXT_ROOT, CONTEXT_ROOT_COMMON], contexts_of(self.metadata))

    def to_json(self) -> dict[str, Any]:
        """Plain JSON rendering with camelCase keys; None values omitted."""
        data: dict[str, Any] = {"type": TYPE_ENTRY}
        record = self.to_record()
        for name, json_name in _JSON_NAMES.items():
            if record[name] is not None:
                data[json_name] = record[name]
        if self.blob is not None:
            data["blob"] = base64.b64encode(self.blob).decode("ascii")
        return data

    def to_json_ld(self) -> dict[str, Any]:
        """JSON-LD rendering including @context."""
        return {"@context": self.context, **self.to_json()}

    @staticmethod
    def json_schema() -> dict[str, Any]:
        """JSON schema of the rendered entry."""
        return {
            "$schema": "https://json-schema.org/draft/2020-12/schema",
            "$id": f"{CONTEXT_ROOT}{TYPE_ENTRY}",
            "title": TYPE_ENTRY,
            "description": "Metadata describing a stored blob.",
            "type": "object",
            "properties": {
                "@context": {
                    "anyOf": [
                        {"type": "string", "const": CONTEXT_ROOT},
                        {
                            "type": "array",
                            "prefixItems": [{"type": "string", "const": CONTEXT_ROOT}],
                            "items": {"anyOf": [{"type": "string"}, {"type": "object"}]},
                        },
                    ]
                },
                "type": {"type": "string", "const": TYPE_ENTRY},
                "id": {"type": "string", "description": "The id of the blob."},
                "dateCreated": {"type": "string", "format": "date-time"},
                "dateModified": {"type": "string", "format": "date-time"},
                "blobSize": {"type": "integer", "minimum": 0},
                "blobHash": {"type": "string", "pattern": "^sha256:"},
                "encodingFormat": {"type": "string"},
                "fileExtension": {"type": "string"},
                "metadata": {"type": "object"},
                "isEncrypted": {"type": "boolean"},
                "compression": {"type": "string", "enum": [c.value for c in CompressionType]},
                "blob": {"type": "string", "contentEncoding": "base64"},
            },
            "required": ["type", "id", "dateCreated", "blobSize", "blobHash", "isEncrypted"],
            "additionalProperties": False,
        }


@dataclass
class BlobStorageEntryList:
    """One page of entries returned by query."""

    entries: list[BlobStorageEntry] = field(default_factory=list)
    cursor: str | None = None

    @property
    def context(self) -> list[Any]:
        return merge_contexts(
            [CONTEXT_ROOT, CONTEXT_ROOT_COMMON],
            *(contexts_of(entry.metadata) for entry in self.entries),
        )

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": TYPE_ENTRY_LIST,
            "entries": [entry.to_json() for entry in self.entries],
        }
        if self.cursor is not None:
            data["cursor"] = self.cursor
        return data

    def to_json_ld(self) -> dict[str, Any]:
        return {"@context": self.context, **self.to_json()}


@dataclass(frozen=True)
class CreateOptions:
    """Options for BlobStorageService.create.

    Attributes:
        namespace: Connector to store in, defaults to the service default
        disable_encryption: Store plaintext even when a vault is configured
        compress: Compress the bytes before storing
    """

    namespace: str | None = None
    disable_encryption: bool = False
    compress: CompressionType | None = None


@dataclass(frozen=True)
class GetOptions:
    """Options for BlobStorageService.get."""

    include_content: bool = False
    decompress: bool = True
