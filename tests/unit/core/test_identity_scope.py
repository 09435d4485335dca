"""Tests for identity scoping of blob storage entries."""

import pytest

from blobworks.errors import ValidationError
from blobworks.tenancy import ANONYMOUS, IdentityScope, TenantContext


class TestTenantContext:
    """Tests for TenantContext."""

    def test_anonymous_has_no_identities(self) -> None:
        assert ANONYMOUS.user_identity is None
        assert ANONYMOUS.node_identity is None

    def test_to_dict(self) -> None:
        """TenantContext converts to dictionary."""
        tenant = TenantContext(user_identity="alice", node_identity="node-1")

        assert tenant.to_dict() == {"user_identity": "alice", "node_identity": "node-1"}


class TestIdentityScope:
    """Tests for IdentityScope."""

    def test_require_passes_with_identities(self) -> None:
        scope = IdentityScope(include_user_identity=True, include_node_identity=True)
        scope.require(TenantContext(user_identity="alice", node_identity="node-1"), "Svc")

    def test_require_missing_user_identity(self) -> None:
        """Missing user identity is a validation error when enforced."""
        scope = IdentityScope(include_user_identity=True, include_node_identity=False)

        with pytest.raises(ValidationError) as exc_info:
            scope.require(TenantContext(node_identity="node-1"), "Svc")

        assert exc_info.value.properties == {"property": "userIdentity"}

    def test_require_missing_node_identity(self) -> None:
        scope = IdentityScope(include_user_identity=False, include_node_identity=True)

        with pytest.raises(ValidationError) as exc_info:
            scope.require(TenantContext(user_identity="alice", node_identity=""), "Svc")

        assert exc_info.value.properties == {"property": "nodeIdentity"}

    def test_disabled_scope_accepts_anonymous(self) -> None:
        """A scope enforcing nothing accepts any caller."""
        scope = IdentityScope(include_user_identity=False, include_node_identity=False)

        scope.require(ANONYMOUS, "Svc")
        assert scope.enabled is False
        assert scope.conditions(ANONYMOUS) == []

    def test_tags_only_enforced_identities(self) -> None:
        """Identities not enforced are recorded as None."""
        scope = IdentityScope(include_user_identity=False, include_node_identity=True)
        tenant = TenantContext(user_identity="alice", node_identity="node-1")

        assert scope.tags(tenant) == {"user_identity": None, "node_identity": "node-1"}

    def test_conditions(self) -> None:
        scope = IdentityScope()
        tenant = TenantContext(user_identity="alice", node_identity="node-1")

        assert scope.conditions(tenant) == [
            ("user_identity", "alice"),
            ("node_identity", "node-1"),
        ]
