"""Identity scoping for blob storage.

Example:
    from blobworks.tenancy import IdentityScope, TenantContext

    scope = IdentityScope(include_user_identity=True, include_node_identity=False)
    scope.require(TenantContext(user_identity="alice"), source="BlobStorageService")
"""

from blobworks.tenancy.context import (
    ANONYMOUS,
    NODE_IDENTITY_HEADER,
    NODE_IDENTITY_PROPERTY,
    USER_IDENTITY_HEADER,
    USER_IDENTITY_PROPERTY,
    IdentityScope,
    TenantContext,
)

__all__ = [
    "ANONYMOUS",
    "IdentityScope",
    "NODE_IDENTITY_HEADER",
    "NODE_IDENTITY_PROPERTY",
    "TenantContext",
    "USER_IDENTITY_HEADER",
    "USER_IDENTITY_PROPERTY",
]
