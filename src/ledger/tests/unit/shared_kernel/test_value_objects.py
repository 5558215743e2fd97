"""Unit tests for shared kernel value objects."""

import pytest

from shared_kernel.datasource.types import WriteOperation
from shared_kernel.exceptions import ValidationError
from shared_kernel.observability_context import ObservationContext
from shared_kernel.scope import GLOBAL_BUCKET, ScopeKey
from shared_kernel.tenant_context import TenantContext, TenantState


class TestScopeKey:
    """Tests for ScopeKey."""

    def test_defaults_to_global_bucket(self):
        scope = ScopeKey(tenant_id="hh-1")
        assert scope.bucket == GLOBAL_BUCKET
        assert scope.is_global

    def test_unbucketed_keeps_tenant(self):
        scope = ScopeKey(tenant_id="hh-1", bucket="2026-10-19")
        assert scope.unbucketed() == ScopeKey(tenant_id="hh-1")

    def test_equal_buckets_of_different_tenants_differ(self):
        assert ScopeKey("hh-1", "2026-10-19") != ScopeKey("hh-2", "2026-10-19")

    @pytest.mark.parametrize(
        "tenant_id,bucket",
        [("", "*"), ("   ", "*"), ("hh-1", ""), ("hh:1", "*"), ("hh-1", "2026:10")],
    )
    def test_rejects_invalid_parts(self, tenant_id, bucket):
        """Empty parts and the key separator are rejected as typed errors."""
        with pytest.raises(ValidationError):
            ScopeKey(tenant_id=tenant_id, bucket=bucket)


class TestTenantContext:
    """Tests for TenantContext states."""

    def test_resolved_requires_tenant_id(self):
        with pytest.raises(ValueError):
            TenantContext(state=TenantState.RESOLVED)

    def test_unresolved_states_cannot_carry_tenant_id(self):
        with pytest.raises(ValueError):
            TenantContext(state=TenantState.RESOLVING, tenant_id="hh-1")

    def test_factories(self):
        assert TenantContext.unresolved().state is TenantState.UNRESOLVED
        assert TenantContext.resolving("user-1").identity_id == "user-1"
        assert TenantContext.failed("user-1").state is TenantState.FAILED

        resolved = TenantContext.resolved("hh-1", identity_id="user-1")
        assert resolved.is_resolved
        assert resolved.tenant_id == "hh-1"


class TestWriteOperation:
    def test_delete_is_the_only_operation_without_payload(self):
        assert [op for op in WriteOperation if not op.carries_payload] == [
            WriteOperation.DELETE
        ]

    def test_accepts_string_values(self):
        assert WriteOperation("upsert") is WriteOperation.UPSERT


class TestObservationContext:
    def test_as_dict_omits_unset_fields(self):
        context = ObservationContext(tenant_id="hh-1").with_extra(source="rpc")

        assert context.as_dict() == {"tenant_id": "hh-1", "source": "rpc"}

    def test_with_tenant_returns_new_context(self):
        original = ObservationContext(user_id="user-1")
        updated = original.with_tenant("hh-1")

        assert original.tenant_id is None
        assert updated.as_dict() == {"user_id": "user-1", "tenant_id": "hh-1"}
