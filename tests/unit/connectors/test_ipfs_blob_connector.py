"""Unit tests for the IPFS blob connector."""

from __future__ import annotations

import httpx
import pytest

from blobworks.connectors.ipfs import IpfsBlobStorageConnector
from blobworks.errors import GeneralError

CID = "QmTestCid123"


def _make_handler(pinned: dict[str, bytes]):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer token"
        path = request.url.path
        if path.endswith("/add"):
            pinned[CID] = b"stored"
            return httpx.Response(200, json={"Name": "blob", "Hash": CID, "Size": "6"})
        arg = request.url.params.get("arg")
        if path.endswith("/cat"):
            if arg in pinned:
                return httpx.Response(200, content=pinned[arg])
            return httpx.Response(500, text="block was not found locally (offline)")
        if path.endswith("/pin/rm"):
            if pinned.pop(arg, None) is not None:
                return httpx.Response(200, json={"Pins": [arg]})
            return httpx.Response(500, json={"Message": "not pinned or pinned indirectly"})
        return httpx.Response(418)

    return handler


@pytest.mark.asyncio
async def test_ipfs_connector_roundtrip() -> None:
    """Add, cat and unpin through the RPC API."""
    pinned: dict[str, bytes] = {}
    client = httpx.AsyncClient(transport=httpx.MockTransport(_make_handler(pinned)))
    connector = IpfsBlobStorageConnector(
        "http://ipfs.local:5001/api/v0/", bearer_token="token", client=client
    )

    blob_id = await connector.set(b"stored")

    assert blob_id == f"blob:ipfs:{CID}"
    assert await connector.get(blob_id) == b"stored"
    assert await connector.remove(blob_id) is True
    assert await connector.get(blob_id) is None
    assert await connector.remove(blob_id) is False

    await connector.close()


@pytest.mark.asyncio
async def test_ipfs_connector_unexpected_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    connector = IpfsBlobStorageConnector("http://ipfs.local:5001/api/v0", client=client)

    with pytest.raises(GeneralError) as exc_info:
        await connector.get(f"blob:ipfs:{CID}")
    assert exc_info.value.properties["status"] == 503

    with pytest.raises(GeneralError):
        await connector.set(b"x")
