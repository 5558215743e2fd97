"""Domain probe for tenant resolution.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events of the tenant resolution cycle: lookups, their
fallbacks, coalesced waiters and invalidations.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantResolverProbe(Protocol):
    """Domain probe for tenant resolution."""

    def resolution_started(self, user_id: str | None) -> None:
        """Record that a new resolution cycle started."""
        ...

    def resolution_joined(self) -> None:
        """Record that a caller joined an in-flight resolution."""
        ...

    def tenant_resolved(self, tenant_id: str, user_id: str, source: str) -> None:
        """Record that the tenant id was resolved."""
        ...

    def rpc_lookup_failed(self, user_id: str, error: Exception) -> None:
        """Record that the privileged lookup failed and the fallback is used."""
        ...

    def tenant_not_found(self, user_id: str) -> None:
        """Record that the identity has no tenant."""
        ...

    def not_authenticated(self) -> None:
        """Record that resolution was attempted without an identity."""
        ...

    def resolution_failed(self, error: Exception) -> None:
        """Record that a resolution cycle failed."""
        ...

    def stale_resolution_discarded(self, tenant_id: str | None) -> None:
        """Record that a cycle finished after invalidation and was discarded."""
        ...

    def tenant_invalidated(self, tenant_id: str | None, reason: str) -> None:
        """Record that the tenant context was cleared."""
        ...

    def invalidation_listener_failed(self, error: Exception) -> None:
        """Record that an invalidation listener raised."""
        ...

    def with_context(self, context: ObservationContext) -> TenantResolverProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantResolverProbe:
    """Default implementation of TenantResolverProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultTenantResolverProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantResolverProbe(logger=self._logger, context=context)

    def resolution_started(self, user_id: str | None) -> None:
        self._logger.debug(
            "tenant_resolution_started",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def resolution_joined(self) -> None:
        self._logger.debug("tenant_resolution_joined", **self._get_context_kwargs())

    def tenant_resolved(self, tenant_id: str, user_id: str, source: str) -> None:
        self._logger.info(
            "tenant_resolved",
            tenant_id=tenant_id,
            user_id=user_id,
            source=source,
            **self._get_context_kwargs(),
        )

    def rpc_lookup_failed(self, user_id: str, error: Exception) -> None:
        self._logger.warning(
            "tenant_rpc_lookup_failed",
            user_id=user_id,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def tenant_not_found(self, user_id: str) -> None:
        self._logger.warning(
            "tenant_not_found",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def not_authenticated(self) -> None:
        self._logger.info("tenant_resolution_not_authenticated", **self._get_context_kwargs())

    def resolution_failed(self, error: Exception) -> None:
        self._logger.warning(
            "tenant_resolution_failed",
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def stale_resolution_discarded(self, tenant_id: str | None) -> None:
        self._logger.info(
            "tenant_resolution_discarded",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenant_invalidated(self, tenant_id: str | None, reason: str) -> None:
        self._logger.info(
            "tenant_invalidated",
            tenant_id=tenant_id,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def invalidation_listener_failed(self, error: Exception) -> None:
        self._logger.error(
            "tenant_invalidation_listener_failed",
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
