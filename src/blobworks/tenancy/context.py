"""Identity scoping for blob storage entries.

Provides explicit multi-tenant isolation at the metadata layer:
- TenantContext: the caller's user and node identity for one operation
- IdentityScope: which identities a service enforces, decided at construction

The underlying blob connectors have no notion of tenancy; only the entry
store is partitioned.

Example:
    scope = IdentityScope(include_user_identity=True, include_node_identity=True)
    tenant = TenantContext(user_identity="did:user:1", node_identity="did:node:1")

    scope.require(tenant, source="BlobStorageService")
    conditions = scope.conditions(tenant)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from blobworks.errors import ValidationError

USER_IDENTITY_PROPERTY = "user_identity"
NODE_IDENTITY_PROPERTY = "node_identity"

USER_IDENTITY_HEADER = "X-User-Identity"
NODE_IDENTITY_HEADER = "X-Node-Identity"


@dataclass(frozen=True)
class TenantContext:
    """Caller identity for a single operation.

    Attributes:
        user_identity: Identity of the user performing the operation
        node_identity: Identity of the node the operation runs on, also the
            owner of the vault keys used for encryption
    """

    user_identity: str | None = None
    node_identity: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "user_identity": self.user_identity,
            "node_identity": self.node_identity,
        }


ANONYMOUS = TenantContext()


@dataclass(frozen=True)
class IdentityScope:
    """Which identities are enforced when tagging and filtering entries."""

    include_user_identity: bool = True
    include_node_identity: bool = True

    @property
    def enabled(self) -> bool:
        return self.include_user_identity or self.include_node_identity

    def require(self, tenant: TenantContext, source: str) -> None:
        """Check that every enforced identity is present.

        Raises:
            ValidationError: If an enforced identity is missing or empty
        """
        if self.include_user_identity and not tenant.user_identity:
            raise ValidationError(source, "stringValue", {"property": "userIdentity"})
        if self.include_node_identity and not tenant.node_identity:
            raise ValidationError(source, "stringValue", {"property": "nodeIdentity"})

    def tags(self, tenant: TenantContext) -> dict[str, str | None]:
        """Identity fields to record on a new entry."""
        return {
            USER_IDENTITY_PROPERTY: tenant.user_identity if self.include_user_identity else None,
            NODE_IDENTITY_PROPERTY: tenant.node_identity if self.include_node_identity else None,
        }

    def conditions(self, tenant: TenantContext) -> list[tuple[str, str]]:
        """Equality filters (property, value) for the enforced identities."""
        result: list[tuple[str, str]] = []
        if self.include_user_identity and tenant.user_identity:
            result.append((USER_IDENTITY_PROPERTY, tenant.user_identity))
        if self.include_node_identity and tenant.node_identity:
            result.append((NODE_IDENTITY_PROPERTY, tenant.node_identity))
        return result
