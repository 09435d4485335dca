"""Vault connector interface.

A vault owns named symmetric keys and performs encryption with them; key
material never leaves the vault. Key names are references such as
"{node_identity}/{key_id}".
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum


class VaultEncryptionType(str, Enum):
    """AEAD algorithms supported by vault connectors."""

    CHACHA20_POLY1305 = "ChaCha20Poly1305"


class VaultConnector(ABC):
    """Abstract base class for vaults."""

    @abstractmethod
    async def encrypt(
        self, key_name: str, encryption_type: VaultEncryptionType, data: bytes
    ) -> bytes:
        """Encrypt data with the named key.

        Returns:
            Ciphertext including whatever nonce the algorithm needs
        """
        ...

    @abstractmethod
    async def decrypt(
        self, key_name: str, encryption_type: VaultEncryptionType, data: bytes
    ) -> bytes:
        """Decrypt data produced by encrypt with the same key."""
        ...
