"""Tests for the async REST client against the ASGI application."""

from __future__ import annotations

import base64
from collections.abc import AsyncIterator

import httpx
import pytest
import pytest_asyncio

from blobworks.api.app import create_app
from blobworks.client import BlobStorageClient
from blobworks.config import Settings
from blobworks.entity import ComparisonOperator, Condition
from blobworks.errors import GeneralError, NotFoundError, ValidationError
from blobworks.factory import build_components
from blobworks.service import CompressionType


@pytest_asyncio.fixture
async def client() -> AsyncIterator[BlobStorageClient]:
    settings = Settings(enable_metrics=False)
    app = create_app(settings, build_components(settings))
    http_client = httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://testserver"
    )
    async with BlobStorageClient(
        "http://testserver", node_identity="did:node:1", client=http_client
    ) as blob_client:
        yield blob_client
    await http_client.aclose()


class TestBlobStorageClient:
    """End-to-end client calls."""

    @pytest.mark.asyncio
    async def test_create_get_content(self, client: BlobStorageClient) -> None:
        blob_id = await client.create(base64.b64encode(b"Test").decode())

        entry = await client.get(blob_id, include_content=True)
        plain = await client.get(blob_id, json_ld=False)

        assert entry["@context"][0] == "https://schema.twindev.org/blob-storage/"
        assert entry["blob"] == "VGVzdA=="
        assert "@context" not in plain
        assert await client.get_content(blob_id) == b"Test"

    @pytest.mark.asyncio
    async def test_compressed_roundtrip(self, client: BlobStorageClient) -> None:
        data = b"client " * 50
        blob_id = await client.create(
            base64.b64encode(data).decode(), compress=CompressionType.DEFLATE
        )

        assert await client.get_content(blob_id) == data
        assert await client.get_content(blob_id, decompress=False) != data

    @pytest.mark.asyncio
    async def test_update_and_query(self, client: BlobStorageClient) -> None:
        blob_id = await client.create(base64.b64encode(b"Test").decode())
        await client.create(base64.b64encode(b"Longer").decode())

        await client.update(blob_id, metadata={"@type": "Note", "name": "n"})
        result = await client.query(
            conditions=[Condition("blobSize", 5, ComparisonOperator.LESS_THAN)], page_size=10
        )

        assert result["type"] == "BlobStorageEntryList"
        assert [e["id"] for e in result["entries"]] == [blob_id]
        assert result["entries"][0]["metadata"] == {"@type": "Note", "name": "n"}

    @pytest.mark.asyncio
    async def test_remove(self, client: BlobStorageClient) -> None:
        blob_id = await client.create(base64.b64encode(b"Test").decode())

        await client.remove(blob_id)

        with pytest.raises(NotFoundError) as exc_info:
            await client.get(blob_id)
        assert exc_info.value.id == blob_id

    @pytest.mark.asyncio
    async def test_bad_request(self, client: BlobStorageClient) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await client.create("***")
        assert exc_info.value.properties["status"] == 400


@pytest.mark.asyncio
async def test_client_maps_server_errors() -> None:
    """5xx responses and transport failures become GeneralError."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "DELETE":
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(
            500, json={"messages": [{"code": "GeneralError", "text": "Svc: getFailed"}]}
        )

    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="http://blob.local"
    )
    client = BlobStorageClient("http://blob.local", user_identity="alice", client=http_client)

    with pytest.raises(GeneralError) as exc_info:
        await client.get("blob:memory:abc")
    assert exc_info.value.properties["text"] == "Svc: getFailed"

    with pytest.raises(GeneralError) as exc_info:
        await client.remove("blob:memory:abc")
    assert isinstance(exc_info.value.cause, httpx.ConnectError)

    await http_client.aclose()
