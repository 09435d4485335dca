"""Async REST client for the blobworks API.

Covers every blob storage endpoint and maps error responses back onto the
domain error taxonomy:
- 400 -> ValidationError
- 404 -> NotFoundError
- anything else -> GeneralError

Usage:
    async with BlobStorageClient("http://localhost:8080", node_identity="did:node:1") as client:
        blob_id = await client.create(base64.b64encode(b"Test").decode())
        content = await client.get_content(blob_id)
"""

from __future__ import annotations

import json
import logging
from types import TracebackType
from typing import Any
from urllib.parse import quote

import httpx

from blobworks.entity.conditions import Condition
from blobworks.entity.schema import SortDirection
from blobworks.errors import BlobStorageError, GeneralError, NotFoundError, ValidationError
from blobworks.jsonld import JSON_LD_MEDIA_TYPE
from blobworks.service.entry import CompressionType
from blobworks.tenancy.context import NODE_IDENTITY_HEADER, USER_IDENTITY_HEADER

logger = logging.getLogger(__name__)


class BlobStorageClient:
    """Client for the blob storage REST endpoints."""

    CLASS_NAME = "BlobStorageClient"

    def __init__(
        self,
        base_url: str,
        base_route: str = "/blob",
        user_identity: str | None = None,
        node_identity: str | None = None,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Create the client.

        Args:
            base_url: Server URL, e.g. http://localhost:8080
            base_route: Route the blob endpoints are mounted under
            user_identity: Sent as X-User-Identity
            node_identity: Sent as X-Node-Identity
            timeout: Request timeout in seconds
            client: Preconfigured httpx client (e.g. with a mock transport)
        """
        headers: dict[str, str] = {}
        if user_identity:
            headers[USER_IDENTITY_HEADER] = user_identity
        if node_identity:
            headers[NODE_IDENTITY_HEADER] = node_identity

        self._route = base_route.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._headers = headers

    async def __aenter__(self) -> "BlobStorageClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _url(self, id: str | None = None, suffix: str = "") -> str:
        if id is None:
            return self._route or "/"
        return f"{self._route}/{quote(id, safe=':')}{suffix}"

    def _raise_for_status(self, response: httpx.Response, id: str | None = None) -> None:
        if response.is_success:
            return

        text = response.reason_phrase
        try:
            messages = response.json().get("messages") or []
            if messages:
                text = messages[0].get("text", text)
        except (ValueError, AttributeError):
            pass

        properties: dict[str, Any] = {"status": response.status_code, "text": text}
        error: BlobStorageError
        if response.status_code == 400:
            error = ValidationError(self.CLASS_NAME, "badRequest", properties)
        elif response.status_code == 404:
            error = NotFoundError(self.CLASS_NAME, "notFound", id or "")
        else:
            error = GeneralError(self.CLASS_NAME, "requestFailed", properties)
        logger.debug(f"Request failed: {response.request.method} {response.request.url}: {text}")
        raise error

    async def _request(
        self,
        method: str,
        url: str,
        id: str | None = None,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method, url, headers={**self._headers, **(headers or {})}, **kwargs
            )
        except httpx.HTTPError as exc:
            raise GeneralError(self.CLASS_NAME, "requestFailed", {"url": url}, exc) from exc
        self._raise_for_status(response, id)
        return response

    async def create(
        self,
        blob: str,
        encoding_format: str | None = None,
        file_extension: str | None = None,
        metadata: dict[str, Any] | None = None,
        namespace: str | None = None,
        disable_encryption: bool = False,
        compress: CompressionType | None = None,
    ) -> str:
        """Create a blob.

        Returns:
            The blob id from the Location header
        """
        body: dict[str, Any] = {"blob": blob}
        if encoding_format:
            body["encodingFormat"] = encoding_format
        if file_extension:
            body["fileExtension"] = file_extension
        if metadata is not None:
            body["metadata"] = metadata
        if namespace:
            body["namespace"] = namespace
        if disable_encryption:
            body["disableEncryption"] = True
        if compress is not None:
            body["compress"] = compress.value

        response = await self._request("POST", self._url(), json=body)
        return response.headers["location"]

    async def get(
        self,
        id: str,
        include_content: bool = False,
        decompress: bool = True,
        json_ld: bool = True,
    ) -> dict[str, Any]:
        """Get a blob's entry, as JSON-LD unless json_ld is False."""
        params = {
            "includeContent": str(include_content).lower(),
            "decompress": str(decompress).lower(),
        }
        headers = {"Accept": JSON_LD_MEDIA_TYPE if json_ld else "application/json"}
        response = await self._request("GET", self._url(id), id, headers=headers, params=params)
        data: dict[str, Any] = response.json()
        return data

    async def get_content(
        self,
        id: str,
        download: bool = False,
        filename: str | None = None,
        decompress: bool = True,
    ) -> bytes:
        params: dict[str, str] = {
            "download": str(download).lower(),
            "decompress": str(decompress).lower(),
        }
        if filename:
            params["filename"] = filename
        response = await self._request("GET", self._url(id, "/content"), id, params=params)
        return response.content

    async def update(
        self,
        id: str,
        encoding_format: str | None = None,
        file_extension: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        body: dict[str, Any] = {}
        if encoding_format:
            body["encodingFormat"] = encoding_format
        if file_extension:
            body["fileExtension"] = file_extension
        if metadata is not None:
            body["metadata"] = metadata
        await self._request("PUT", self._url(id), id, json=body)

    async def remove(self, id: str) -> None:
        await self._request("DELETE", self._url(id), id)

    async def query(
        self,
        conditions: list[Condition] | None = None,
        order_by: str | None = None,
        order_by_direction: SortDirection | None = None,
        cursor: str | None = None,
        page_size: int | None = None,
        json_ld: bool = True,
    ) -> dict[str, Any]:
        """Query entries.

        Args:
            conditions: Filters; property names may be camelCase or snake_case
            order_by: Property to sort by
            order_by_direction: Sort direction
            cursor: Cursor returned by a previous page
            page_size: Maximum entries per page
            json_ld: Ask for a JSON-LD body

        Returns:
            The entry list body, including "cursor" when more pages exist
        """
        params: dict[str, str] = {}
        if conditions:
            params["conditions"] = json.dumps(
                [
                    {"property": c.property, "value": c.value, "comparison": c.comparison.value}
                    for c in conditions
                ]
            )
        if order_by:
            params["orderBy"] = order_by
        if order_by_direction is not None:
            params["orderByDirection"] = order_by_direction.value
        if cursor:
            params["cursor"] = cursor
        if page_size is not None:
            params["pageSize"] = str(page_size)

        headers = {"Accept": JSON_LD_MEDIA_TYPE if json_ld else "application/json"}
        response = await self._request("GET", self._url(), headers=headers, params=params)
        data: dict[str, Any] = response.json()
        return data
