"""In-memory vault using ChaCha20-Poly1305.

Keys are derived on demand from a master secret and the key name with
HKDF-SHA256, so the same master secret always yields the same key for a
given "{node_identity}/{key_id}" reference. Ciphertext layout is
nonce (12 bytes) || ciphertext+tag.
"""

from __future__ import annotations

import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from blobworks.errors import GeneralError, ValidationError
from blobworks.vault.base import VaultConnector, VaultEncryptionType

NONCE_SIZE = 12


class MemoryVaultConnector(VaultConnector):
    """Vault holding derived keys in process memory."""

    def __init__(self, master_key: bytes | None = None) -> None:
        self._master_key = master_key or ChaCha20Poly1305.generate_key()
        self._keys: dict[str, bytes] = {}

    def _key(self, key_name: str) -> bytes:
        if not key_name:
            raise ValidationError(type(self).__name__, "stringValue", {"property": "keyName"})
        key = self._keys.get(key_name)
        if key is None:
            key = HKDF(
                algorithm=hashes.SHA256(),
                length=32,
                salt=None,
                info=key_name.encode("utf-8"),
            ).derive(self._master_key)
            self._keys[key_name] = key
        return key

    def _check_type(self, encryption_type: VaultEncryptionType) -> None:
        if encryption_type is not VaultEncryptionType.CHACHA20_POLY1305:
            raise ValidationError(
                type(self).__name__, "unsupportedEncryption", {"type": str(encryption_type)}
            )

    async def encrypt(
        self, key_name: str, encryption_type: VaultEncryptionType, data: bytes
    ) -> bytes:
        self._check_type(encryption_type)
        nonce = os.urandom(NONCE_SIZE)
        return nonce + ChaCha20Poly1305(self._key(key_name)).encrypt(nonce, data, None)

    async def decrypt(
        self, key_name: str, encryption_type: VaultEncryptionType, data: bytes
    ) -> bytes:
        self._check_type(encryption_type)
        if len(data) < NONCE_SIZE:
            raise GeneralError(type(self).__name__, "decryptFailed", {"keyName": key_name})
        nonce, ciphertext = data[:NONCE_SIZE], data[NONCE_SIZE:]
        try:
            return ChaCha20Poly1305(self._key(key_name)).decrypt(nonce, ciphertext, None)
        except InvalidTag as exc:
            raise GeneralError(
                type(self).__name__, "decryptFailed", {"keyName": key_name}, exc
            ) from exc
