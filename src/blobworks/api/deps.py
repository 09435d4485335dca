"""Shared FastAPI dependencies for blobworks routers.

Provides:
- the BlobStorageService held by the application
- the caller's TenantContext, read from identity headers
- JSON / JSON-LD content negotiation
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, Request

from blobworks.config import Settings
from blobworks.jsonld import JSON_LD_MEDIA_TYPE
from blobworks.service.blob_storage import BlobStorageService
from blobworks.tenancy.context import NODE_IDENTITY_HEADER, USER_IDENTITY_HEADER, TenantContext


def get_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def get_service(request: Request) -> BlobStorageService:
    """The service built at startup (or injected by create_app)."""
    service: BlobStorageService = request.app.state.blob_storage_service
    return service


def get_tenant(
    settings: Annotated[Settings, Depends(get_settings)],
    x_user_identity: Annotated[str | None, Header()] = None,
    x_node_identity: Annotated[str | None, Header()] = None,
) -> TenantContext:
    """Caller identity; the node identity defaults to this node's."""
    return TenantContext(
        user_identity=x_user_identity or None,
        node_identity=x_node_identity or settings.node_identity,
    )


def wants_json_ld(request: Request) -> bool:
    """Whether the Accept header asks for JSON-LD."""
    return JSON_LD_MEDIA_TYPE in request.headers.get("accept", "")


ServiceDep = Annotated[BlobStorageService, Depends(get_service)]
TenantDep = Annotated[TenantContext, Depends(get_tenant)]
JsonLdDep = Annotated[bool, Depends(wants_json_ld)]
