"""Household coordinator.

The single entry point domain accessors use: it resolves the tenant, the
active week bucket and hands (tenant, bucket, collection) reads and writes
to the layered cache. One coordinator is created per session and passed
to every accessor, so tests can build isolated instances.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping, Sequence
from datetime import date
from typing import Any

from caching.application.layered_cache import LayeredCache
from caching.domain.collection import CollectionSpec
from coordination.observability import CoordinatorProbe, DefaultCoordinatorProbe
from scoping.application.scope_resolver import ScopeKeyResolver
from shared_kernel.datasource.types import WriteOperation
from shared_kernel.exceptions import StorageUnavailableError, TenantMismatchError
from shared_kernel.scope import ScopeKey
from shared_kernel.storage.protocols import PersistentStore
from tenancy.application.tenant_resolver import TenantResolver

# Session-only keys cleared on sign-out; durable per-user data is kept
TRANSIENT_KEYS = ("pending_invite", "trackingScope")


class HouseholdCoordinator:
    """Facade over tenant resolution, scoping and the layered cache."""

    def __init__(
        self,
        tenants: TenantResolver,
        scopes: ScopeKeyResolver,
        cache: LayeredCache,
        store: PersistentStore,
        *,
        probe: CoordinatorProbe | None = None,
        transient_keys: Sequence[str] = TRANSIENT_KEYS,
        closers: Sequence[Callable[[], Awaitable[Any]]] = (),
    ):
        """Wire the collaborators together.

        Args:
            tenants: Tenant resolver; its invalidations drop cache entries
            scopes: Scope key resolver for week buckets
            cache: Layered cache serving all collections
            store: Durable store holding the transient session keys
            probe: Optional domain probe for observability
            transient_keys: Keys removed from the store on sign-out
            closers: Resource finalizers run by aclose(), in order
        """
        self._tenants = tenants
        self._scopes = scopes
        self._cache = cache
        self._store = store
        self._probe = probe or DefaultCoordinatorProbe()
        self._transient_keys = tuple(transient_keys)
        self._closers = list(closers)
        self._unsubscribe = tenants.on_invalidate(cache.on_tenant_invalidated)

    @property
    def cache(self) -> LayeredCache:
        return self._cache

    @property
    def scopes(self) -> ScopeKeyResolver:
        return self._scopes

    @property
    def tenants(self) -> TenantResolver:
        return self._tenants

    @property
    def store(self) -> PersistentStore:
        return self._store

    async def resolve_tenant(self) -> str:
        return await self._tenants.resolve()

    async def current_bucket(self, explicit: str | date | None = None) -> str:
        return await self._scopes.current_bucket(explicit)

    async def scope(self, explicit: str | date | None = None) -> ScopeKey:
        """Resolve the tenant, then the bucket, into a scope key.

        Raises:
            NotAuthenticatedError: If nobody is signed in
            TenantNotFoundError: If the identity has no household
            ValidationError: If explicit bucket input is malformed
        """
        tenant_id = await self._tenants.resolve()
        return await self._scopes.scope_for(tenant_id, explicit)

    async def read(self, spec: CollectionSpec, scope: ScopeKey | None = None) -> Any:
        scope = await self._checked_scope(scope)
        return await self._cache.read(spec, scope)

    async def write(
        self,
        spec: CollectionSpec,
        scope: ScopeKey | None,
        operation: WriteOperation | str,
        payload: Any = None,
        *,
        match: Mapping[str, Any] | None = None,
    ) -> Any | None:
        scope = await self._checked_scope(scope)
        return await self._cache.write(spec, scope, operation, payload, match=match)

    async def _checked_scope(self, scope: ScopeKey | None) -> ScopeKey:
        """Resolve the tenant and hold a caller's scope key against it.

        Raises:
            NotAuthenticatedError: If nobody is signed in
            TenantNotFoundError: If the identity has no household
            TenantMismatchError: If the scope names another tenant
        """
        tenant_id = await self._tenants.resolve()
        if scope is None:
            return await self._scopes.scope_for(tenant_id)
        if scope.tenant_id != tenant_id:
            self._probe.foreign_scope_rejected(
                scope_tenant_id=scope.tenant_id, tenant_id=tenant_id
            )
            raise TenantMismatchError(
                f"Scope belongs to household '{scope.tenant_id}', "
                f"not the signed-in household '{tenant_id}'",
                scope_tenant_id=scope.tenant_id,
                tenant_id=tenant_id,
            )
        return scope

    async def legacy_value(
        self, key: str, parser: Callable[[Any], Any] | None = None
    ) -> Any | None:
        return await self._cache.legacy_value(key, parser)

    def peek(self, spec: CollectionSpec, scope: ScopeKey | None = None) -> Any | None:
        """Memory-tier value for the resolved tenant, without any I/O.

        Returns None when nothing is cached or no tenant is resolved yet.
        """
        if scope is None:
            tenant_id = self._tenants.tenant_id
            if tenant_id is None:
                return None
            scope = ScopeKey(tenant_id=tenant_id)
        return self._cache.peek(spec, scope)

    def invalidate_tenant(self, reason: str = "explicit") -> None:
        """Forget the tenant; its memory-tier entries are dropped with it."""
        self._tenants.invalidate(reason=reason)

    async def sign_out(self) -> None:
        """Clear the session: tenant, memory tier and transient keys."""
        tenant_id = self._tenants.tenant_id
        self.invalidate_tenant(reason="signed_out")

        cleared = []
        for key in self._transient_keys:
            try:
                await self._store.remove(key)
            except StorageUnavailableError as e:
                self._probe.transient_key_clear_failed(key=key, error=e)
            else:
                cleared.append(key)
        self._probe.signed_out(tenant_id=tenant_id, cleared_keys=cleared)

    async def aclose(self) -> None:
        """Stop background work and release owned resources."""
        self._unsubscribe()
        self._tenants.close()
        await self._cache.aclose()
        for close in self._closers:
            await close()
        self._probe.coordinator_closed()
