"""Tenant resolver for the tenancy bounded context.

Discovers the household id of the signed-in identity and caches it for
the session. Concurrent callers share one resolution task, so a burst of
domain reads costs a single remote lookup.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from shared_kernel.datasource.protocols import RemoteSource
from shared_kernel.exceptions import (
    NotAuthenticatedError,
    RemoteUnavailableError,
    TenantNotFoundError,
)
from shared_kernel.identity.protocols import Identity, IdentityProvider
from shared_kernel.tenant_context import TenantContext
from tenancy.application.observability import (
    DefaultTenantResolverProbe,
    TenantResolverProbe,
)

TENANT_LOOKUP_RPC = "get_my_household_id"
MEMBERSHIP_COLLECTION = "members"
TENANT_COLUMN = "household_id"

InvalidationListener = Callable[[str | None], None]


def _coerce_tenant_id(value: Any) -> str | None:
    """Extract a tenant id from an RPC or membership result.

    PostgREST returns scalars for scalar functions, but set-returning
    functions come back as a list of rows.
    """
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, dict):
        value = value.get(TENANT_COLUMN, value.get(TENANT_LOOKUP_RPC))
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    # : separates the parts of every cache key
    if not text or ":" in text:
        return None
    return text


class TenantResolver:
    """Resolves and caches the current tenant id.

    State machine:
        UNRESOLVED -> RESOLVING -> RESOLVED
        RESOLVING -> FAILED on error (retryable like UNRESOLVED)
        RESOLVED -> UNRESOLVED on invalidate()

    A resolution cycle runs in one shared asyncio task. Each call to
    invalidate() starts a new generation; a task from an older generation
    never installs its result and hands its waiters over to a fresh cycle.
    """

    def __init__(
        self,
        remote: RemoteSource,
        identity: IdentityProvider,
        probe: TenantResolverProbe | None = None,
    ):
        """Initialize the resolver and subscribe to identity changes.

        Args:
            remote: Remote data service used for the lookups
            identity: Provider of the signed-in identity
            probe: Optional domain probe for observability
        """
        self._remote = remote
        self._identity = identity
        self._probe = probe or DefaultTenantResolverProbe()
        self._context = TenantContext.unresolved()
        self._inflight: asyncio.Task[str] | None = None
        self._generation = 0
        self._listeners: list[InvalidationListener] = []
        self._unsubscribe = identity.on_change(self._on_identity_change)

    @property
    def context(self) -> TenantContext:
        return self._context

    @property
    def tenant_id(self) -> str | None:
        return self._context.tenant_id

    def on_invalidate(self, listener: InvalidationListener) -> Callable[[], None]:
        """Register a callback receiving the previous tenant id on invalidation."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def resolve(self) -> str:
        """Return the tenant id, resolving it at most once per cycle.

        Raises:
            NotAuthenticatedError: If nobody is signed in
            TenantNotFoundError: If the identity has no tenant
            RemoteUnavailableError: If the fallback lookup cannot reach the
                remote data service
        """
        if self._context.is_resolved:
            return self._context.tenant_id  # type: ignore[return-value]

        if self._inflight is None:
            self._context = TenantContext.resolving()
            self._inflight = asyncio.create_task(self._run_cycle(self._generation))
        else:
            self._probe.resolution_joined()

        # Shielded so one cancelled caller does not cancel the shared lookup
        return await asyncio.shield(self._inflight)

    def invalidate(self, reason: str = "explicit") -> None:
        """Clear the tenant context and notify invalidation listeners."""
        previous = self._context.tenant_id
        self._generation += 1
        self._inflight = None
        self._context = TenantContext.unresolved()
        self._probe.tenant_invalidated(tenant_id=previous, reason=reason)

        for listener in list(self._listeners):
            try:
                listener(previous)
            except Exception as e:
                self._probe.invalidation_listener_failed(error=e)

    def close(self) -> None:
        """Stop listening for identity changes."""
        self._unsubscribe()

    async def _run_cycle(self, generation: int) -> str:
        try:
            identity = await self._identity.current_identity()
            if identity is None:
                self._probe.not_authenticated()
                raise NotAuthenticatedError("No signed-in identity")

            if generation == self._generation:
                self._context = TenantContext.resolving(identity.id)
            self._probe.resolution_started(user_id=identity.id)

            tenant_id, source = await self._lookup(identity)
        except Exception as e:
            if generation != self._generation:
                self._probe.stale_resolution_discarded(tenant_id=None)
                return await self.resolve()
            self._inflight = None
            self._context = TenantContext.failed(self._context.identity_id)
            self._probe.resolution_failed(error=e)
            raise

        if generation != self._generation:
            self._probe.stale_resolution_discarded(tenant_id=tenant_id)
            return await self.resolve()

        self._inflight = None
        self._context = TenantContext.resolved(tenant_id, identity_id=identity.id)
        self._probe.tenant_resolved(tenant_id=tenant_id, user_id=identity.id, source=source)
        return tenant_id

    async def _lookup(self, identity: Identity) -> tuple[str, str]:
        """Two-step lookup: privileged RPC, then the membership table."""
        try:
            result = await self._remote.rpc(TENANT_LOOKUP_RPC)
        except RemoteUnavailableError as e:
            self._probe.rpc_lookup_failed(user_id=identity.id, error=e)
        else:
            tenant_id = _coerce_tenant_id(result)
            if tenant_id:
                return tenant_id, "rpc"

        rows = await self._remote.read(
            MEMBERSHIP_COLLECTION,
            {"user_id": identity.id},
            columns=TENANT_COLUMN,
            limit=1,
        )
        tenant_id = _coerce_tenant_id(rows[0] if rows else None)
        if not tenant_id:
            self._probe.tenant_not_found(user_id=identity.id)
            raise TenantNotFoundError(
                f"No household found for user '{identity.id}'",
                user_id=identity.id,
            )
        return tenant_id, "membership"

    def _on_identity_change(self, identity: Identity | None) -> None:
        if identity is None:
            self.invalidate(reason="signed_out")
            return

        known = self._context.identity_id
        if known is not None and known != identity.id:
            self.invalidate(reason="identity_changed")
