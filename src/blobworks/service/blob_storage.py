"""Blob storage service.

Coordinates a set of blob connectors with an entry store:
- content hashing and mime/extension detection on the plaintext
- structural JSON-LD validation of caller metadata
- optional compression and vault encryption of the stored bytes
- namespace-based dispatch to the connector holding a blob
- identity-scoped entries, so tenants only ever see their own metadata

Blob and entry writes are independent. A failure between the two leaves
an orphaned blob (create) or an entry-less blob (remove); neither is
compensated.

Example:
    service = BlobStorageService(
        connectors=ConnectorRegistry([MemoryBlobStorageConnector()]),
        entry_storage=MemoryEntityStorageConnector(build_blob_storage_entry_schema()),
    )
    tenant = TenantContext(node_identity="did:node:1")
    blob_id = await service.create("VGVzdA==", tenant=tenant)
    entry = await service.get(blob_id, GetOptions(include_content=True), tenant=tenant)
"""

from __future__ import annotations

import base64
import binascii
import gzip
import hashlib
import logging
import time
import zlib
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

from blobworks import jsonld, mime, urn
from blobworks.connectors.base import BlobStorageConnector
from blobworks.entity.base import EntityStorageConnector
from blobworks.entity.conditions import Condition
from blobworks.entity.schema import SortDirection
from blobworks.errors import (
    BlobStorageError,
    GeneralError,
    NamespaceMismatchError,
    NotFoundError,
    ValidationError,
)
from blobworks.observability.metrics import record_blob_bytes, record_blob_operation
from blobworks.service.entry import (
    BlobStorageEntry,
    BlobStorageEntryList,
    CompressionType,
    CreateOptions,
    GetOptions,
)
from blobworks.tenancy.context import (
    ANONYMOUS,
    NODE_IDENTITY_PROPERTY,
    USER_IDENTITY_PROPERTY,
    IdentityScope,
    TenantContext,
)
from blobworks.vault.base import VaultConnector, VaultEncryptionType

logger = logging.getLogger(__name__)

# Errors that describe the caller's request and are never wrapped
_PASSTHROUGH = (ValidationError, NotFoundError, NamespaceMismatchError)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def blob_hash(data: bytes) -> str:
    """Integrity hash recorded on entries: sha256:<base64 digest>."""
    return "sha256:" + base64.b64encode(hashlib.sha256(data).digest()).decode("ascii")


def compress(data: bytes, compression: CompressionType) -> bytes:
    if compression is CompressionType.GZIP:
        return gzip.compress(data, mtime=0)
    return zlib.compress(data)


def decompress(data: bytes, compression: CompressionType) -> bytes:
    if compression is CompressionType.GZIP:
        return gzip.decompress(data)
    return zlib.decompress(data)


class BlobStorageService:
    """Service performing blob storage operations against connectors."""

    CLASS_NAME = "BlobStorageService"

    def __init__(
        self,
        connectors: Mapping[str, BlobStorageConnector],
        entry_storage: EntityStorageConnector,
        default_namespace: str | None = None,
        vault: VaultConnector | None = None,
        vault_key_id: str = "blob-storage",
        identity_scope: IdentityScope | None = None,
    ) -> None:
        """Create the service.

        Args:
            connectors: Namespace -> connector mapping
            entry_storage: Store for BlobStorageEntry records
            default_namespace: Connector used when create gets no namespace,
                defaults to the first connector
            vault: Vault for encryption, None stores plaintext
            vault_key_id: Key id within the node's vault keys
            identity_scope: Identities enforced on every operation, defaults
                to node identity only

        Raises:
            GeneralError: If no connectors are given
            ValidationError: If the default namespace has no connector
        """
        if not connectors:
            raise GeneralError(self.CLASS_NAME, "noConnectors")

        self._connectors = connectors
        self._entry_storage = entry_storage
        self._default_namespace = default_namespace or next(iter(connectors))
        if self._default_namespace not in connectors:
            raise ValidationError(
                self.CLASS_NAME,
                "defaultNamespace",
                {"namespace": self._default_namespace, "available": list(connectors)},
            )
        self._vault = vault
        self._vault_key_id = vault_key_id
        self._identity_scope = identity_scope or IdentityScope(
            include_user_identity=False, include_node_identity=True
        )

    @property
    def default_namespace(self) -> str:
        return self._default_namespace

    @property
    def identity_scope(self) -> IdentityScope:
        return self._identity_scope

    @property
    def encryption_enabled(self) -> bool:
        return self._vault is not None and bool(self._vault_key_id)

    @contextmanager
    def _observe(self, operation: str, namespace: str | None = None) -> Iterator[dict[str, Any]]:
        """Record operation metrics; callers may set state["namespace"]."""
        state: dict[str, Any] = {"namespace": namespace}
        start = time.perf_counter()
        outcome = "success"
        try:
            yield state
        except BlobStorageError as exc:
            outcome = type(exc).__name__
            raise
        finally:
            duration = time.perf_counter() - start
            namespace = state["namespace"]
            if namespace is not None and namespace not in self._connectors:
                namespace = "unknown"
            record_blob_operation(operation, namespace, outcome, duration)

    def _connector(self, namespace: str) -> BlobStorageConnector:
        connector = self._connectors.get(namespace)
        if connector is None:
            raise GeneralError(
                self.CLASS_NAME,
                "connectorNotFound",
                {"namespace": namespace, "available": list(self._connectors)},
            )
        return connector

    def _scope_conditions(self, tenant: TenantContext) -> list[Condition]:
        return [Condition(prop, value) for prop, value in self._identity_scope.conditions(tenant)]

    def _key_reference(self, node_identity: str | None) -> str:
        if not node_identity:
            raise ValidationError(self.CLASS_NAME, "stringValue", {"property": "nodeIdentity"})
        return f"{node_identity}/{self._vault_key_id}"

    async def _get_scoped_entry(self, id: str, tenant: TenantContext) -> BlobStorageEntry:
        record = await self._entry_storage.get(id, self._scope_conditions(tenant))
        if record is None:
            raise NotFoundError(self.CLASS_NAME, "entryNotFound", id)
        return BlobStorageEntry.from_record(record)

    @staticmethod
    def _strip_identity(entry: BlobStorageEntry) -> BlobStorageEntry:
        entry.user_identity = None
        entry.node_identity = None
        return entry

    async def create(
        self,
        blob: str,
        encoding_format: str | None = None,
        file_extension: str | None = None,
        metadata: dict[str, Any] | None = None,
        options: CreateOptions | None = None,
        *,
        tenant: TenantContext = ANONYMOUS,
    ) -> str:
        """Create a blob with its metadata entry.

        Args:
            blob: The blob content, base64 encoded
            encoding_format: Mime type, detected from the content if omitted
            file_extension: Extension, derived from the mime type if omitted
            metadata: JSON-LD node annotating the blob
            options: Connector namespace, encryption and compression options
            tenant: Caller identity

        Returns:
            The blob id in blob:<namespace>:<content-id> form

        Raises:
            ValidationError: Bad base64, invalid metadata or missing identity
            GeneralError: If storing the blob or entry fails
        """
        options = options or CreateOptions()
        namespace = options.namespace or self._default_namespace

        with self._observe("create", namespace):
            if not isinstance(blob, str) or not blob:
                raise ValidationError(self.CLASS_NAME, "stringBase64", {"property": "blob"})
            try:
                data = base64.b64decode(blob, validate=True)
            except (binascii.Error, ValueError) as exc:
                raise ValidationError(
                    self.CLASS_NAME, "stringBase64", {"property": "blob"}, exc
                ) from exc
            self._identity_scope.require(tenant, self.CLASS_NAME)

            encrypt = not options.disable_encryption and self.encryption_enabled
            key_reference = self._key_reference(tenant.node_identity) if encrypt else None

            try:
                if not encoding_format:
                    encoding_format = mime.detect(data)
                if not file_extension and encoding_format:
                    file_extension = mime.default_extension(encoding_format)

                if metadata is not None:
                    jsonld.validate_node(metadata, self.CLASS_NAME)

                store_bytes = data
                if options.compress is not None:
                    store_bytes = compress(store_bytes, options.compress)

                if key_reference is not None and self._vault is not None:
                    store_bytes = await self._vault.encrypt(
                        key_reference, VaultEncryptionType.CHACHA20_POLY1305, store_bytes
                    )

                connector = self._connector(namespace)
                blob_id = await connector.set(store_bytes)

                entry = BlobStorageEntry(
                    id=blob_id,
                    date_created=_now(),
                    blob_size=len(data),
                    blob_hash=blob_hash(data),
                    encoding_format=encoding_format,
                    file_extension=file_extension,
                    metadata=metadata,
                    is_encrypted=key_reference is not None,
                    compression=options.compress,
                    **self._identity_scope.tags(tenant),
                )
                await self._entry_storage.set(entry.to_record())
            except _PASSTHROUGH:
                raise
            except Exception as exc:
                logger.error(f"Failed to create blob in '{namespace}': {exc}")
                raise GeneralError(
                    self.CLASS_NAME, "createFailed", {"namespace": namespace}, exc
                ) from exc

            record_blob_bytes("in", namespace, len(data))
            logger.info(
                f"Blob created: {blob_id} ({len(data)} bytes, "
                f"encrypted={entry.is_encrypted}, compression={options.compress})"
            )
            return blob_id

    async def get(
        self,
        id: str,
        options: GetOptions | None = None,
        *,
        tenant: TenantContext = ANONYMOUS,
    ) -> BlobStorageEntry:
        """Get a blob's entry and optionally its content.

        An entry owned by another tenant is reported as not found.

        Raises:
            ValidationError: If id is not a blob URN or an identity is missing
            NotFoundError: If the entry, or the requested content, is absent
            GeneralError: If reading the blob fails
        """
        options = options or GetOptions()

        with self._observe("get") as state:
            parsed = urn.BlobUrn.parse(id, source=self.CLASS_NAME)
            state["namespace"] = parsed.namespace
            self._identity_scope.require(tenant, self.CLASS_NAME)

            try:
                entry = await self._get_scoped_entry(id, tenant)

                if options.include_content:
                    content = await self._connector(parsed.namespace).get(id)
                    if content is None:
                        raise NotFoundError(self.CLASS_NAME, "blobNotFound", id)

                    if entry.is_encrypted:
                        if self._vault is None:
                            raise GeneralError(self.CLASS_NAME, "vaultNotConfigured", {"id": id})
                        key_reference = self._key_reference(
                            entry.node_identity or tenant.node_identity
                        )
                        content = await self._vault.decrypt(
                            key_reference, VaultEncryptionType.CHACHA20_POLY1305, content
                        )

                    if entry.compression is not None and options.decompress:
                        content = decompress(content, entry.compression)

                    entry.blob = content
                    record_blob_bytes("out", parsed.namespace, len(content))
            except _PASSTHROUGH:
                raise
            except Exception as exc:
                logger.error(f"Failed to get blob {id}: {exc}")
                raise GeneralError(self.CLASS_NAME, "getFailed", {"id": id}, exc) from exc

            return self._strip_identity(entry)

    async def update(
        self,
        id: str,
        encoding_format: str | None = None,
        file_extension: str | None = None,
        metadata: dict[str, Any] | None = None,
        *,
        tenant: TenantContext = ANONYMOUS,
    ) -> None:
        """Update an entry's metadata fields.

        Omitted fields keep their value. Content, size, hash, encryption and
        compression never change.

        Raises:
            ValidationError: Invalid id, metadata or missing identity
            NotFoundError: If the caller has no entry for id
        """
        with self._observe("update") as state:
            parsed = urn.BlobUrn.parse(id, source=self.CLASS_NAME)
            state["namespace"] = parsed.namespace
            self._identity_scope.require(tenant, self.CLASS_NAME)

            try:
                entry = await self._get_scoped_entry(id, tenant)

                if metadata is not None:
                    jsonld.validate_node(metadata, self.CLASS_NAME)

                entry.encoding_format = encoding_format or entry.encoding_format
                entry.file_extension = file_extension or entry.file_extension
                entry.metadata = metadata if metadata is not None else entry.metadata
                entry.date_modified = _now()

                await self._entry_storage.set(entry.to_record())
            except _PASSTHROUGH:
                raise
            except Exception as exc:
                logger.error(f"Failed to update blob {id}: {exc}")
                raise GeneralError(self.CLASS_NAME, "updateFailed", {"id": id}, exc) from exc

            logger.info(f"Blob entry updated: {id}")

    async def remove(self, id: str, *, tenant: TenantContext = ANONYMOUS) -> None:
        """Remove the caller's entry, then the blob once no entry references it.

        The entry is removed first. The blob is kept while entries of other
        tenants still reference the same id. A blob that is already absent
        is tolerated; any other connector failure is raised even though
        the entry is gone.

        Raises:
            ValidationError: If id is not a blob URN or an identity is missing
            NotFoundError: If the caller has no entry for id
            GeneralError: If removing the entry or blob fails
        """
        with self._observe("remove") as state:
            parsed = urn.BlobUrn.parse(id, source=self.CLASS_NAME)
            state["namespace"] = parsed.namespace
            self._identity_scope.require(tenant, self.CLASS_NAME)

            try:
                connector = self._connector(parsed.namespace)
                entry = await self._get_scoped_entry(id, tenant)

                await self._entry_storage.remove(
                    id,
                    [
                        Condition(USER_IDENTITY_PROPERTY, entry.user_identity),
                        Condition(NODE_IDENTITY_PROPERTY, entry.node_identity),
                    ],
                )

                remaining = await self._entry_storage.query([Condition("id", id)], page_size=1)
                if remaining.entities:
                    logger.info(f"Blob entry removed, blob still referenced: {id}")
                    return

                if not await connector.remove(id):
                    logger.warning(f"Blob already absent from '{parsed.namespace}': {id}")
            except _PASSTHROUGH:
                raise
            except Exception as exc:
                logger.error(f"Failed to remove blob {id}: {exc}")
                raise GeneralError(self.CLASS_NAME, "removeFailed", {"id": id}, exc) from exc

            logger.info(f"Blob removed: {id}")

    async def query(
        self,
        conditions: list[Condition] | None = None,
        order_by: str | None = None,
        order_by_direction: SortDirection | None = None,
        cursor: str | None = None,
        page_size: int | None = None,
        *,
        tenant: TenantContext = ANONYMOUS,
    ) -> BlobStorageEntryList:
        """Query the caller's entries.

        Args:
            conditions: Filters AND-ed with the caller's identity filters
            order_by: Entry property to sort by, defaults to date_created
            order_by_direction: Sort direction, defaults to descending
            cursor: Cursor from a previous page
            page_size: Maximum entries per page
            tenant: Caller identity

        Returns:
            The page of entries with identities stripped, and the next cursor

        Raises:
            ValidationError: Missing identity, bad cursor or unsupported condition
        """
        with self._observe("query"):
            self._identity_scope.require(tenant, self.CLASS_NAME)

            sort = [
                (order_by or "date_created", order_by_direction or SortDirection.DESCENDING)
            ]
            try:
                result = await self._entry_storage.query(
                    self._scope_conditions(tenant) + list(conditions or []),
                    sort=sort,
                    cursor=cursor,
                    page_size=page_size,
                )
            except _PASSTHROUGH:
                raise
            except Exception as exc:
                logger.error(f"Failed to query blob entries: {exc}")
                raise GeneralError(self.CLASS_NAME, "queryFailed", None, exc) from exc

            entries = [
                self._strip_identity(BlobStorageEntry.from_record(record))
                for record in result.entities
            ]
            return BlobStorageEntryList(entries=entries, cursor=result.cursor)
