"""IPFS blob storage connector.

Talks to a Kubo-compatible HTTP RPC API (or a pinning service exposing it):
- POST {api_url}/add?pin=true    store and pin, returns the CID
- POST {api_url}/cat?arg={cid}   fetch content
- POST {api_url}/pin/rm?arg={cid} unpin

Ids use the CID returned by the API rather than a SHA-256 hex digest.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from blobworks.connectors.base import BlobStorageConnector
from blobworks.errors import GeneralError, guard_string_value

logger = logging.getLogger(__name__)

_NOT_FOUND_MARKERS = ("not pinned", "not found", "no link named", "invalid path")


class IpfsBlobStorageConnector(BlobStorageConnector):
    """IPFS HTTP API blob storage backend."""

    NAMESPACE = "ipfs"

    def __init__(
        self,
        api_url: str,
        bearer_token: str | None = None,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize IPFS storage.

        Args:
            api_url: Base URL of the RPC API, e.g. http://localhost:5001/api/v0
            bearer_token: Optional token sent as Authorization: Bearer
            timeout: Request timeout in seconds
            client: Pre-built httpx client (mainly for tests)
        """
        self.api_url = guard_string_value(self.class_name, "apiUrl", api_url).rstrip("/")
        self.bearer_token = bearer_token
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.bearer_token:
            headers["Authorization"] = f"Bearer {self.bearer_token}"
        return headers

    @staticmethod
    def _is_not_found(response: httpx.Response) -> bool:
        if response.status_code == 404:
            return True
        if response.status_code == 500:
            text = response.text.lower()
            return any(marker in text for marker in _NOT_FOUND_MARKERS)
        return False

    async def set(self, blob: bytes) -> str:
        content = self._require_bytes(blob)

        try:
            response = await self._get_client().post(
                f"{self.api_url}/add",
                params={"pin": "true"},
                files={"file": ("blob", content, "application/octet-stream")},
                headers=self._headers(),
            )
            response.raise_for_status()
            result: dict[str, Any] = response.json()
        except Exception as exc:
            raise GeneralError(self.class_name, "setBlobFailed", cause=exc) from exc

        cid = result.get("Hash")
        if not cid:
            raise GeneralError(self.class_name, "setBlobFailed", {"response": result})

        logger.debug(f"Added blob {cid} to IPFS ({len(content)} bytes)")
        return self._build_id(cid)

    async def get(self, id: str) -> bytes | None:
        cid = self._content_id(id)

        try:
            response = await self._get_client().post(
                f"{self.api_url}/cat",
                params={"arg": cid},
                headers=self._headers(),
            )
        except httpx.HTTPError as exc:
            raise GeneralError(self.class_name, "getBlobFailed", {"id": id}, exc) from exc

        if response.is_success:
            return response.content
        if self._is_not_found(response):
            return None
        raise GeneralError(
            self.class_name,
            "getBlobFailed",
            {"id": id, "status": response.status_code, "message": response.text},
        )

    async def remove(self, id: str) -> bool:
        cid = self._content_id(id)

        try:
            response = await self._get_client().post(
                f"{self.api_url}/pin/rm",
                params={"arg": cid},
                headers=self._headers(),
            )
        except httpx.HTTPError as exc:
            raise GeneralError(self.class_name, "removeBlobFailed", {"id": id}, exc) from exc

        if response.is_success:
            return True
        if self._is_not_found(response):
            return False
        raise GeneralError(
            self.class_name,
            "removeBlobFailed",
            {"id": id, "status": response.status_code, "message": response.text},
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
