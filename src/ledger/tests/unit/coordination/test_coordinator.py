"""Unit tests for HouseholdCoordinator."""

from unittest.mock import AsyncMock, Mock

import pytest

from caching.application.layered_cache import LayeredCache
from coordination.coordinator import TRANSIENT_KEYS, HouseholdCoordinator
from coordination.observability import DefaultCoordinatorProbe
from household.infrastructure.collections import CATEGORIES, PURCHASES
from infrastructure.identity.static_provider import StaticIdentityProvider
from infrastructure.remote.in_memory_source import InMemoryRemoteSource
from infrastructure.storage.in_memory_store import InMemoryPersistentStore
from scoping.application.scope_resolver import ACTIVE_BUCKET_KEY, ScopeKeyResolver
from shared_kernel.exceptions import (
    NotAuthenticatedError,
    StorageUnavailableError,
    TenantMismatchError,
)
from shared_kernel.identity.protocols import Identity
from shared_kernel.scope import ScopeKey
from tenancy.application.tenant_resolver import TenantResolver


def _two_household_remote() -> InMemoryRemoteSource:
    """Remote where user-1 and user-2 belong to different households."""
    return InMemoryRemoteSource(
        tables={
            "members": [
                {"user_id": "user-1", "household_id": "hh-1"},
                {"user_id": "user-2", "household_id": "hh-2"},
            ],
            "household_categories": [
                {"id": "c1", "household_id": "hh-1", "name": "Ours", "sort_order": 0},
                {"id": "c2", "household_id": "hh-2", "name": "Theirs", "sort_order": 0},
            ],
        }
    )


def _coordinator(remote, identity, store, clock, **kwargs) -> HouseholdCoordinator:
    return HouseholdCoordinator(
        tenants=TenantResolver(remote, identity),
        scopes=ScopeKeyResolver(store, clock=clock),
        cache=LayeredCache(remote, store, clock=clock),
        store=store,
        **kwargs,
    )


class FlakyStore(InMemoryPersistentStore):
    """Store whose removals of one key fail."""

    def __init__(self, failing_key: str, initial=None):
        super().__init__(initial)
        self._failing_key = failing_key

    async def remove(self, key: str) -> None:
        if key == self._failing_key:
            raise StorageUnavailableError(f"cannot remove {key}")
        await super().remove(key)


class TestScopes:
    """Tests for scope resolution through the coordinator."""

    @pytest.mark.asyncio
    async def test_scope_combines_tenant_and_active_week(self, coordinator):
        assert await coordinator.scope() == ScopeKey(tenant_id="hh-1", bucket="2026-10-19")

    @pytest.mark.asyncio
    async def test_scope_with_explicit_week(self, coordinator):
        scope = await coordinator.scope("2026-11-04")
        assert scope.bucket == "2026-11-02"

    @pytest.mark.asyncio
    async def test_reads_without_identity_raise(self, remote, store, clock):
        coordinator = _coordinator(remote, StaticIdentityProvider(), store, clock)

        with pytest.raises(NotAuthenticatedError):
            await coordinator.read(CATEGORIES)

    @pytest.mark.asyncio
    async def test_read_defaults_to_current_scope(self, coordinator, remote):
        await coordinator.read(PURCHASES)

        read = remote.calls_for("read", "purchases")[0]
        assert read.filters == {"household_id": "hh-1", "week_start": "2026-10-19"}

    @pytest.mark.asyncio
    async def test_peek_needs_a_resolved_tenant(self, coordinator):
        assert coordinator.peek(CATEGORIES) is None

        await coordinator.read(CATEGORIES)

        assert len(coordinator.peek(CATEGORIES)) == 6


class TestTenantSwitching:
    """Tests that a tenant switch never serves the previous tenant's data."""

    @pytest.mark.asyncio
    async def test_identity_switch_serves_new_tenant(self, identity, store, clock):
        coordinator = _coordinator(_two_household_remote(), identity, store, clock)
        ours = await coordinator.read(CATEGORIES)

        identity.sign_in(Identity(id="user-2"))
        theirs = await coordinator.read(CATEGORIES)

        assert [row["name"] for row in ours] == ["Ours"]
        assert [row["name"] for row in theirs] == ["Theirs"]
        assert coordinator.cache.peek(CATEGORIES, ScopeKey("hh-1")) is None

    @pytest.mark.asyncio
    async def test_invalidate_tenant_then_read_uses_new_membership(self, identity, store, clock):
        remote = _two_household_remote()
        coordinator = _coordinator(remote, identity, store, clock)
        await coordinator.read(CATEGORIES)

        remote.tables["members"][0]["household_id"] = "hh-2"
        coordinator.invalidate_tenant()

        assert [row["name"] for row in await coordinator.read(CATEGORIES)] == ["Theirs"]
        assert await coordinator.resolve_tenant() == "hh-2"


class TestSignOut:
    """Tests for sign-out cleanup."""

    @pytest.mark.asyncio
    async def test_sign_out_clears_session_state(self, coordinator, store):
        store.data.update({"pending_invite": "abc", "trackingScope": "week"})
        await coordinator.read(CATEGORIES)

        await coordinator.sign_out()

        assert not any(key in store.data for key in TRANSIENT_KEYS)
        assert ACTIVE_BUCKET_KEY in store.data
        assert coordinator.tenants.tenant_id is None
        assert coordinator.cache.peek(CATEGORIES, ScopeKey("hh-1")) is None

    @pytest.mark.asyncio
    async def test_failed_key_removal_is_reported(self, remote, identity, clock):
        store = FlakyStore("trackingScope", {"pending_invite": "abc", "trackingScope": "week"})
        probe = Mock(spec=DefaultCoordinatorProbe)
        coordinator = _coordinator(remote, identity, store, clock, probe=probe)
        await coordinator.resolve_tenant()

        await coordinator.sign_out()

        probe.transient_key_clear_failed.assert_called_once()
        probe.signed_out.assert_called_once_with(tenant_id="hh-1", cleared_keys=["pending_invite"])
        assert "trackingScope" in store.data

    @pytest.mark.asyncio
    async def test_write_with_scope_from_before_sign_out_is_refused(
        self, coordinator, identity, remote
    ):
        scope = await coordinator.scope()
        await coordinator.sign_out()
        identity.sign_out()

        with pytest.raises(NotAuthenticatedError):
            await coordinator.write(CATEGORIES, ScopeKey("hh-1"), "insert", {"name": "Ghost"})
        with pytest.raises(NotAuthenticatedError):
            await coordinator.read(PURCHASES, scope)

        assert remote.calls_for("write") == []


class TestScopeOwnership:
    """Tests that caller-supplied scopes must belong to the resolved tenant."""

    @pytest.mark.asyncio
    async def test_write_with_other_household_scope_is_refused(self, identity, store, clock):
        remote = _two_household_remote()
        probe = Mock(spec=DefaultCoordinatorProbe)
        coordinator = _coordinator(remote, identity, store, clock, probe=probe)
        stale = await coordinator.scope()

        identity.sign_in(Identity(id="user-2"))

        with pytest.raises(TenantMismatchError) as exc_info:
            await coordinator.write(CATEGORIES, stale, "insert", {"name": "Ghost"})

        assert exc_info.value.scope_tenant_id == "hh-1"
        assert exc_info.value.tenant_id == "hh-2"
        assert [row["name"] for row in remote.rows("household_categories")] == ["Ours", "Theirs"]
        probe.foreign_scope_rejected.assert_called_once_with(
            scope_tenant_id="hh-1", tenant_id="hh-2"
        )

    @pytest.mark.asyncio
    async def test_read_with_other_household_scope_is_refused(self, identity, store, clock):
        coordinator = _coordinator(_two_household_remote(), identity, store, clock)
        await coordinator.resolve_tenant()

        with pytest.raises(TenantMismatchError):
            await coordinator.read(CATEGORIES, ScopeKey("hh-2"))

    @pytest.mark.asyncio
    async def test_scope_of_signed_in_household_is_accepted(self, coordinator):
        scope = await coordinator.scope("2026-11-04")

        assert await coordinator.read(PURCHASES, scope) == []


class TestClose:
    @pytest.mark.asyncio
    async def test_aclose_runs_closers_in_order(self, remote, identity, store, clock):
        order = []
        first = AsyncMock(side_effect=lambda: order.append("client"))
        second = AsyncMock(side_effect=lambda: order.append("engine"))
        coordinator = _coordinator(remote, identity, store, clock, closers=(first, second))

        await coordinator.aclose()

        assert order == ["client", "engine"]

    @pytest.mark.asyncio
    async def test_aclose_detaches_from_identity_changes(self, identity, store, clock):
        remote = _two_household_remote()
        coordinator = _coordinator(remote, identity, store, clock)
        await coordinator.resolve_tenant()

        await coordinator.aclose()
        identity.sign_out()

        assert coordinator.tenants.tenant_id == "hh-1"
