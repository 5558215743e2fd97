"""Unit test fixtures with in-memory collaborators."""

from datetime import UTC, datetime, timedelta

import pytest

from caching.application.layered_cache import LayeredCache
from coordination.coordinator import HouseholdCoordinator
from infrastructure.identity.static_provider import StaticIdentityProvider
from infrastructure.remote.in_memory_source import InMemoryRemoteSource
from infrastructure.storage.in_memory_store import InMemoryPersistentStore
from scoping.application.scope_resolver import ScopeKeyResolver
from shared_kernel.identity.protocols import Identity
from tenancy.application.tenant_resolver import TENANT_LOOKUP_RPC, TenantResolver

TENANT_ID = "hh-1"
USER_ID = "user-1"
CURRENT_WEEK = "2026-10-19"


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    """Clock standing on a Wednesday, in the week of CURRENT_WEEK."""
    return FakeClock(datetime(2026, 10, 21, 9, 30, tzinfo=UTC))


@pytest.fixture
def identity():
    """Provide a signed-in identity."""
    return StaticIdentityProvider(Identity(id=USER_ID, access_token="token-1"))


@pytest.fixture
def remote():
    """Remote source where user-1 belongs to hh-1."""
    return InMemoryRemoteSource(
        tables={"members": [{"user_id": USER_ID, "household_id": TENANT_ID}]},
        rpc_handlers={TENANT_LOOKUP_RPC: lambda _args: TENANT_ID},
    )


@pytest.fixture
def store():
    """Provide an empty durable store."""
    return InMemoryPersistentStore()


@pytest.fixture
def cache(remote, store, clock):
    return LayeredCache(remote, store, staleness=timedelta(minutes=5), clock=clock)


@pytest.fixture
def tenants(remote, identity):
    return TenantResolver(remote, identity)


@pytest.fixture
def scopes(store, clock):
    return ScopeKeyResolver(store, clock=clock)


@pytest.fixture
def coordinator(tenants, scopes, cache, store):
    """Coordinator wired entirely to in-memory adapters."""
    return HouseholdCoordinator(tenants=tenants, scopes=scopes, cache=cache, store=store)
