"""Tests for the ChaCha20-Poly1305 memory vault."""

import pytest

from blobworks.errors import GeneralError, ValidationError
from blobworks.vault import MemoryVaultConnector, VaultEncryptionType
from blobworks.vault.memory import NONCE_SIZE

CHACHA = VaultEncryptionType.CHACHA20_POLY1305


class TestMemoryVaultConnector:
    """Tests for MemoryVaultConnector."""

    @pytest.mark.asyncio
    async def test_encrypt_decrypt(self) -> None:
        """Ciphertext carries a nonce and tag and decrypts to the plaintext."""
        vault = MemoryVaultConnector(b"master")

        ciphertext = await vault.encrypt("node-1/blob-storage", CHACHA, b"Test")

        assert ciphertext != b"Test"
        assert len(ciphertext) == NONCE_SIZE + 4 + 16
        assert await vault.decrypt("node-1/blob-storage", CHACHA, ciphertext) == b"Test"

    @pytest.mark.asyncio
    async def test_random_nonce(self) -> None:
        vault = MemoryVaultConnector(b"master")

        first = await vault.encrypt("k", CHACHA, b"same")
        second = await vault.encrypt("k", CHACHA, b"same")

        assert first != second

    @pytest.mark.asyncio
    async def test_keys_derived_from_master(self) -> None:
        """Two vaults with one master key share keys; key names are isolated."""
        ciphertext = await MemoryVaultConnector(b"master").encrypt("node-1/k", CHACHA, b"data")

        assert await MemoryVaultConnector(b"master").decrypt("node-1/k", CHACHA, ciphertext) == (
            b"data"
        )
        with pytest.raises(GeneralError) as exc_info:
            await MemoryVaultConnector(b"master").decrypt("node-2/k", CHACHA, ciphertext)
        assert exc_info.value.message == "decryptFailed"

    @pytest.mark.asyncio
    async def test_tampered_ciphertext(self) -> None:
        vault = MemoryVaultConnector()
        ciphertext = bytearray(await vault.encrypt("k", CHACHA, b"data"))
        ciphertext[-1] ^= 0x01

        with pytest.raises(GeneralError):
            await vault.decrypt("k", CHACHA, bytes(ciphertext))

    @pytest.mark.asyncio
    async def test_short_ciphertext(self) -> None:
        with pytest.raises(GeneralError):
            await MemoryVaultConnector().decrypt("k", CHACHA, b"short")

    @pytest.mark.asyncio
    async def test_empty_key_name(self) -> None:
        with pytest.raises(ValidationError):
            await MemoryVaultConnector().encrypt("", CHACHA, b"data")

    @pytest.mark.asyncio
    async def test_unsupported_type(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await MemoryVaultConnector().encrypt("k", "AES", b"data")  # type: ignore[arg-type]
        assert exc_info.value.message == "unsupportedEncryption"
