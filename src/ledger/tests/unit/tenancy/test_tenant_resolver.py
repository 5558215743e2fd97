"""Unit tests for TenantResolver."""

import asyncio
import itertools
from unittest.mock import Mock

import pytest

from infrastructure.identity.static_provider import StaticIdentityProvider
from infrastructure.remote.in_memory_source import InMemoryRemoteSource
from shared_kernel.exceptions import (
    NotAuthenticatedError,
    RemoteUnavailableError,
    TenantNotFoundError,
)
from shared_kernel.identity.protocols import Identity
from shared_kernel.tenant_context import TenantState
from tenancy.application.observability import DefaultTenantResolverProbe
from tenancy.application.tenant_resolver import (
    MEMBERSHIP_COLLECTION,
    TENANT_LOOKUP_RPC,
    TenantResolver,
)


def _membership_only_remote() -> InMemoryRemoteSource:
    """Remote without the lookup RPC, so every lookup uses the members table."""
    return InMemoryRemoteSource(
        tables={
            MEMBERSHIP_COLLECTION: [
                {"user_id": "user-1", "household_id": "hh-1"},
                {"user_id": "user-2", "household_id": "hh-2"},
            ]
        }
    )


class TestResolution:
    """Tests for the two-step lookup."""

    @pytest.mark.asyncio
    async def test_resolves_through_rpc(self, tenants, remote):
        """Should take the tenant id from the privileged lookup."""
        assert await tenants.resolve() == "hh-1"
        assert tenants.context.state is TenantState.RESOLVED
        assert tenants.context.identity_id == "user-1"
        assert remote.calls_for("read", MEMBERSHIP_COLLECTION) == []

    @pytest.mark.asyncio
    async def test_resolved_id_is_cached(self, tenants, remote):
        """A second call should not hit the remote tier again."""
        await tenants.resolve()
        await tenants.resolve()

        assert len(remote.calls_for("rpc")) == 1

    @pytest.mark.asyncio
    async def test_accepts_set_returning_rpc_result(self, identity):
        remote = InMemoryRemoteSource(
            rpc_handlers={TENANT_LOOKUP_RPC: lambda _args: [{"household_id": "hh-9"}]}
        )
        resolver = TenantResolver(remote, identity)

        assert await resolver.resolve() == "hh-9"

    @pytest.mark.asyncio
    async def test_falls_back_to_membership_when_rpc_fails(self, tenants, remote):
        """An RPC outage should not prevent resolution."""
        remote.set_failure("rpc")

        assert await tenants.resolve() == "hh-1"
        assert len(remote.calls_for("read", MEMBERSHIP_COLLECTION)) == 1

    @pytest.mark.asyncio
    async def test_falls_back_to_membership_when_rpc_returns_nothing(self, tenants, remote):
        remote.register_rpc(TENANT_LOOKUP_RPC, lambda _args: None)

        assert await tenants.resolve() == "hh-1"
        membership_read = remote.calls_for("read", MEMBERSHIP_COLLECTION)[0]
        assert membership_read.filters == {"user_id": "user-1"}

    @pytest.mark.asyncio
    async def test_raises_not_authenticated_without_identity(self, remote):
        """Should fail before any remote call when nobody is signed in."""
        resolver = TenantResolver(remote, StaticIdentityProvider())

        with pytest.raises(NotAuthenticatedError):
            await resolver.resolve()

        assert remote.calls == []
        assert resolver.context.state is TenantState.FAILED

    @pytest.mark.asyncio
    async def test_raises_tenant_not_found_without_membership(self, identity):
        resolver = TenantResolver(InMemoryRemoteSource(), identity)

        with pytest.raises(TenantNotFoundError) as exc_info:
            await resolver.resolve()

        assert exc_info.value.user_id == "user-1"
        assert resolver.tenant_id is None

    @pytest.mark.asyncio
    async def test_tenant_id_with_key_separator_is_not_a_household(self, identity):
        remote = InMemoryRemoteSource(
            tables={MEMBERSHIP_COLLECTION: [{"user_id": "user-1", "household_id": "hh:1"}]},
            rpc_handlers={TENANT_LOOKUP_RPC: lambda _args: "hh:1"},
        )
        resolver = TenantResolver(remote, identity)

        with pytest.raises(TenantNotFoundError):
            await resolver.resolve()

    @pytest.mark.asyncio
    async def test_membership_outage_propagates(self, identity):
        remote = _membership_only_remote()
        remote.set_failure("read", MEMBERSHIP_COLLECTION)
        resolver = TenantResolver(remote, identity)

        with pytest.raises(RemoteUnavailableError):
            await resolver.resolve()

        assert resolver.context.state is TenantState.FAILED
        assert resolver.context.identity_id == "user-1"

    @pytest.mark.asyncio
    async def test_failed_resolution_can_be_retried(self, identity):
        """A failure should not be cached; the next call starts a new cycle."""
        remote = _membership_only_remote()
        remote.set_failure("read", MEMBERSHIP_COLLECTION)
        resolver = TenantResolver(remote, identity)

        with pytest.raises(RemoteUnavailableError):
            await resolver.resolve()

        remote.clear_failures()
        assert await resolver.resolve() == "hh-1"


class TestConcurrentResolution:
    """Tests for coalescing of concurrent callers."""

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_lookup(self, tenants, remote):
        """N concurrent callers should cost exactly one remote lookup."""
        results = await asyncio.gather(*(tenants.resolve() for _ in range(10)))

        assert results == ["hh-1"] * 10
        assert len(remote.calls_for("rpc")) == 1
        assert remote.calls_for("read") == []

    @pytest.mark.asyncio
    async def test_concurrent_callers_observe_the_same_failure(self, identity):
        remote = InMemoryRemoteSource()
        resolver = TenantResolver(remote, identity)

        results = await asyncio.gather(
            *(resolver.resolve() for _ in range(5)), return_exceptions=True
        )

        assert all(isinstance(result, TenantNotFoundError) for result in results)
        assert all(result is results[0] for result in results)
        assert len(remote.calls_for("rpc")) == 1
        assert len(remote.calls_for("read", MEMBERSHIP_COLLECTION)) == 1

    @pytest.mark.asyncio
    async def test_joining_callers_are_reported(self, remote, identity):
        probe = Mock(spec=DefaultTenantResolverProbe)
        resolver = TenantResolver(remote, identity, probe=probe)

        await asyncio.gather(*(resolver.resolve() for _ in range(3)))

        assert probe.resolution_joined.call_count == 2
        probe.tenant_resolved.assert_called_once_with(
            tenant_id="hh-1", user_id="user-1", source="rpc"
        )

    @pytest.mark.asyncio
    async def test_cancelled_caller_does_not_cancel_shared_lookup(self, tenants):
        first = asyncio.create_task(tenants.resolve())
        second = asyncio.create_task(tenants.resolve())
        await asyncio.sleep(0)

        first.cancel()

        assert await second == "hh-1"
        with pytest.raises(asyncio.CancelledError):
            await first


class TestInvalidation:
    """Tests for invalidation and identity changes."""

    @pytest.mark.asyncio
    async def test_invalidate_resets_context_and_notifies_listeners(self, tenants, remote):
        previous_ids = []
        tenants.on_invalidate(previous_ids.append)
        await tenants.resolve()

        tenants.invalidate()

        assert tenants.context.state is TenantState.UNRESOLVED
        assert tenants.tenant_id is None
        assert previous_ids == ["hh-1"]

        await tenants.resolve()
        assert len(remote.calls_for("rpc")) == 2

    @pytest.mark.asyncio
    async def test_unsubscribed_listener_is_not_called(self, tenants):
        previous_ids = []
        unsubscribe = tenants.on_invalidate(previous_ids.append)
        unsubscribe()

        tenants.invalidate()

        assert previous_ids == []

    @pytest.mark.asyncio
    async def test_sign_out_invalidates(self, tenants, identity):
        previous_ids = []
        tenants.on_invalidate(previous_ids.append)
        await tenants.resolve()

        identity.sign_out()

        assert tenants.tenant_id is None
        assert previous_ids == ["hh-1"]

    @pytest.mark.asyncio
    async def test_identity_switch_resolves_the_new_tenant(self, identity):
        resolver = TenantResolver(_membership_only_remote(), identity)
        assert await resolver.resolve() == "hh-1"

        identity.sign_in(Identity(id="user-2"))

        assert resolver.tenant_id is None
        assert await resolver.resolve() == "hh-2"

    @pytest.mark.asyncio
    async def test_lookup_finishing_after_invalidation_is_discarded(self, identity):
        """A lookup from before invalidate() must never install its result."""
        counter = itertools.count(1)
        remote = InMemoryRemoteSource(
            rpc_handlers={TENANT_LOOKUP_RPC: lambda _args: f"hh-{next(counter)}"}
        )
        probe = Mock(spec=DefaultTenantResolverProbe)
        resolver = TenantResolver(remote, identity, probe=probe)

        pending = asyncio.create_task(resolver.resolve())
        await asyncio.sleep(0)
        resolver.invalidate()

        assert await pending == "hh-2"
        assert resolver.tenant_id == "hh-2"
        assert len(remote.calls_for("rpc")) == 2
        probe.stale_resolution_discarded.assert_called_once_with(tenant_id="hh-1")

    @pytest.mark.asyncio
    async def test_listener_errors_are_reported_not_raised(self, remote, identity):
        probe = Mock(spec=DefaultTenantResolverProbe)
        resolver = TenantResolver(remote, identity, probe=probe)
        calls = []

        def broken(_previous):
            raise RuntimeError("listener broke")

        resolver.on_invalidate(broken)
        resolver.on_invalidate(calls.append)

        resolver.invalidate()

        probe.invalidation_listener_failed.assert_called_once()
        assert calls == [None]

    @pytest.mark.asyncio
    async def test_close_stops_following_identity_changes(self, tenants, identity):
        await tenants.resolve()

        tenants.close()
        identity.sign_out()

        assert tenants.tenant_id == "hh-1"
