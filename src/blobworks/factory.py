"""Assemble the blob storage service from settings.

Builds, once per process:
- the connector registry for every enabled namespace
- the entry store (memory or SQL)
- the vault, when encryption is enabled
- the BlobStorageService wiring them together
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from blobworks.config import Settings
from blobworks.connectors.registry import ConnectorRegistry, build_registry
from blobworks.entity.base import EntityStorageConnector
from blobworks.entity.memory import MemoryEntityStorageConnector
from blobworks.errors import ValidationError
from blobworks.service.blob_storage import BlobStorageService
from blobworks.service.entry import ENTRY_TABLE_NAME, build_blob_storage_entry_schema
from blobworks.tenancy.context import IdentityScope
from blobworks.vault.base import VaultConnector
from blobworks.vault.memory import MemoryVaultConnector

logger = logging.getLogger(__name__)


@dataclass
class ServiceComponents:
    """The service and the collaborators it owns."""

    registry: ConnectorRegistry
    entry_storage: EntityStorageConnector
    service: BlobStorageService
    vault: VaultConnector | None = None

    async def bootstrap(self) -> dict[str, bool]:
        """Prepare the entry store and every connector.

        Returns:
            Readiness per component ("entries" plus one key per namespace)
        """
        results = {"entries": await self.entry_storage.bootstrap()}
        results.update(await self.registry.bootstrap())
        return results

    async def close(self) -> None:
        await self.registry.close()
        await self.entry_storage.close()


def build_entry_storage(settings: Settings) -> EntityStorageConnector:
    """Create the entry store selected by settings.

    Raises:
        ValidationError: If the storage type is unknown
    """
    schema = build_blob_storage_entry_schema()
    storage_type = settings.entity_storage_type.lower()
    if storage_type == "memory":
        return MemoryEntityStorageConnector(schema)
    if storage_type == "sql":
        from blobworks.entity.sql import SqlEntityStorageConnector
        from blobworks.persistence.db import create_engine

        return SqlEntityStorageConnector(
            schema,
            create_engine(settings.database_url),
            table_name=ENTRY_TABLE_NAME,
        )
    raise ValidationError(
        "ServiceFactory",
        "unsupportedEntityStorage",
        {"type": settings.entity_storage_type, "supported": ["memory", "sql"]},
    )


def build_vault(settings: Settings) -> VaultConnector | None:
    if not settings.enable_encryption:
        return None
    if not settings.vault_master_key:
        logger.warning(
            "Encryption enabled without VAULT_MASTER_KEY; "
            "a random key is used and encrypted blobs will not survive a restart"
        )
        return MemoryVaultConnector()
    return MemoryVaultConnector(settings.vault_master_key.encode("utf-8"))


def build_components(settings: Settings) -> ServiceComponents:
    """Build the service and its collaborators from settings."""
    registry = build_registry(settings)
    entry_storage = build_entry_storage(settings)
    vault = build_vault(settings)

    service = BlobStorageService(
        connectors=registry,
        entry_storage=entry_storage,
        default_namespace=settings.default_namespace,
        vault=vault,
        vault_key_id=settings.vault_key_id,
        identity_scope=IdentityScope(
            include_user_identity=settings.include_user_identity,
            include_node_identity=settings.include_node_identity,
        ),
    )
    logger.info(
        f"Blob storage service built: connectors={list(registry)}, "
        f"default={service.default_namespace}, entries={settings.entity_storage_type}, "
        f"encryption={vault is not None}"
    )
    return ServiceComponents(
        registry=registry, entry_storage=entry_storage, service=service, vault=vault
    )
