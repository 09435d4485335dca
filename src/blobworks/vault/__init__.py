"""Vault connectors used to encrypt blobs at rest."""

from blobworks.vault.base import VaultConnector, VaultEncryptionType
from blobworks.vault.memory import MemoryVaultConnector

__all__ = [
    "MemoryVaultConnector",
    "VaultConnector",
    "VaultEncryptionType",
]
