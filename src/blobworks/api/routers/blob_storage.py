"""Blob storage endpoints.

Mounted under the configured base route (default /blob):
- POST   /              create a blob, 201 with Location: <id>
- GET    /{id}          get the entry, optionally with base64 content
- GET    /{id}/content  get the raw content with Content-Disposition
- PUT    /{id}          update the entry's metadata, 204
- DELETE /{id}          remove the entry (and blob), 204
- GET    /              query entries with cursor pagination

Sending Accept: application/ld+json returns JSON-LD bodies.
"""

from __future__ import annotations

import json
from typing import Annotated, Any
from urllib.parse import quote

from fastapi import APIRouter, Query, Response
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from blobworks.api.deps import JsonLdDep, ServiceDep, TenantDep
from blobworks.api.errors import BadRequestError
from blobworks.entity.conditions import MAX_PAGE_SIZE, Condition
from blobworks.entity.schema import SortDirection
from blobworks.jsonld import JSON_LD_MEDIA_TYPE
from blobworks.service.entry import CompressionType, CreateOptions, GetOptions, record_property

router = APIRouter(tags=["blob-storage"])


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class BlobStorageCreateRequest(_CamelModel):
    """Body of POST /."""

    blob: str
    encoding_format: str | None = None
    file_extension: str | None = None
    metadata: dict[str, Any] | None = None
    namespace: str | None = None
    disable_encryption: bool = False
    compress: CompressionType | None = None


class BlobStorageUpdateRequest(_CamelModel):
    """Body of PUT /{id}."""

    encoding_format: str | None = None
    file_extension: str | None = None
    metadata: dict[str, Any] | None = None


def _render(body: dict[str, Any], json_ld: bool) -> ORJSONResponse:
    return ORJSONResponse(
        content=body,
        media_type=JSON_LD_MEDIA_TYPE if json_ld else "application/json",
    )


def _content_disposition(disposition: str, filename: str) -> str:
    """Content-Disposition with an ASCII filename and, if needed, an RFC 5987 filename*."""
    fallback = "".join(c if " " <= c <= "~" and c not in '"\\' else "_" for c in filename)
    header = f'{disposition}; filename="{fallback}"'
    if fallback != filename:
        header += f"; filename*=UTF-8''{quote(filename, safe='')}"
    return header


def _parse_conditions(raw: str | None) -> list[Condition]:
    """Parse the conditions query parameter, a JSON list of conditions."""
    if not raw:
        return []
    try:
        items = json.loads(raw)
    except ValueError as exc:
        raise BadRequestError("conditions must be a JSON array") from exc
    if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
        raise BadRequestError("conditions must be a JSON array of objects")

    conditions = []
    for item in items:
        condition = Condition.from_dict(item)
        conditions.append(
            Condition(record_property(condition.property), condition.value, condition.comparison)
        )
    return conditions


@router.post("", status_code=201)
async def create_blob(
    body: BlobStorageCreateRequest,
    service: ServiceDep,
    tenant: TenantDep,
) -> Response:
    """Create a blob and its entry."""
    blob_id = await service.create(
        body.blob,
        encoding_format=body.encoding_format,
        file_extension=body.file_extension,
        metadata=body.metadata,
        options=CreateOptions(
            namespace=body.namespace,
            disable_encryption=body.disable_encryption,
            compress=body.compress,
        ),
        tenant=tenant,
    )
    return Response(status_code=201, headers={"Location": blob_id})


@router.get("")
async def query_blobs(
    service: ServiceDep,
    tenant: TenantDep,
    json_ld: JsonLdDep,
    conditions: Annotated[str | None, Query(description="JSON array of conditions")] = None,
    order_by: Annotated[str | None, Query(alias="orderBy")] = None,
    order_by_direction: Annotated[SortDirection | None, Query(alias="orderByDirection")] = None,
    cursor: Annotated[str | None, Query()] = None,
    page_size: Annotated[int | None, Query(alias="pageSize", ge=1, le=MAX_PAGE_SIZE)] = None,
) -> ORJSONResponse:
    """Query the caller's entries."""
    result = await service.query(
        _parse_conditions(conditions),
        order_by=record_property(order_by) if order_by else None,
        order_by_direction=order_by_direction,
        cursor=cursor,
        page_size=page_size,
        tenant=tenant,
    )
    return _render(result.to_json_ld() if json_ld else result.to_json(), json_ld)


@router.get("/{id}")
async def get_blob(
    id: str,
    service: ServiceDep,
    tenant: TenantDep,
    json_ld: JsonLdDep,
    include_content: Annotated[bool, Query(alias="includeContent")] = False,
    decompress: Annotated[bool, Query()] = True,
) -> ORJSONResponse:
    """Get a blob's entry."""
    entry = await service.get(
        id,
        GetOptions(include_content=include_content, decompress=decompress),
        tenant=tenant,
    )
    return _render(entry.to_json_ld() if json_ld else entry.to_json(), json_ld)


@router.get("/{id}/content")
async def get_blob_content(
    id: str,
    service: ServiceDep,
    tenant: TenantDep,
    download: Annotated[bool, Query()] = False,
    filename: Annotated[str | None, Query()] = None,
    decompress: Annotated[bool, Query()] = True,
) -> Response:
    """Get a blob's raw content."""
    entry = await service.get(
        id,
        GetOptions(include_content=True, decompress=decompress),
        tenant=tenant,
    )

    media_type = entry.encoding_format or "application/octet-stream"
    if entry.compression is not None and not decompress:
        media_type = "application/octet-stream"

    if not filename:
        filename = f"file.{entry.file_extension}" if entry.file_extension else "file"
    disposition = "attachment" if download else "inline"

    return Response(
        content=entry.blob or b"",
        media_type=media_type,
        headers={"Content-Disposition": _content_disposition(disposition, filename)},
    )


@router.put("/{id}", status_code=204)
async def update_blob(
    id: str,
    body: BlobStorageUpdateRequest,
    service: ServiceDep,
    tenant: TenantDep,
) -> Response:
    """Update a blob's entry."""
    await service.update(
        id,
        encoding_format=body.encoding_format,
        file_extension=body.file_extension,
        metadata=body.metadata,
        tenant=tenant,
    )
    return Response(status_code=204)


@router.delete("/{id}", status_code=204)
async def remove_blob(id: str, service: ServiceDep, tenant: TenantDep) -> Response:
    """Remove a blob's entry, and the blob once unreferenced."""
    await service.remove(id, tenant=tenant)
    return Response(status_code=204)
