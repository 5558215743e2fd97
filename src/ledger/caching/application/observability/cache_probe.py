"""Domain probe for the layered cache.

Captures which tier served a read, background revalidation, the read-path
fallback chain and write-through outcomes.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext
    from shared_kernel.scope import ScopeKey


class LayeredCacheProbe(Protocol):
    """Domain probe for layered cache operations."""

    def cache_hit(self, collection: str, scope: ScopeKey, tier: str, stale: bool) -> None:
        """Record that a read was served from a local tier."""
        ...

    def cache_miss(self, collection: str, scope: ScopeKey) -> None:
        """Record that a read had to block on the remote tier."""
        ...

    def refresh_scheduled(self, collection: str, scope: ScopeKey) -> None:
        """Record that a background revalidation was started."""
        ...

    def refresh_completed(self, collection: str, scope: ScopeKey) -> None:
        """Record that a background revalidation stored a fresh value."""
        ...

    def refresh_failed(self, collection: str, scope: ScopeKey, error: Exception) -> None:
        """Record that a background revalidation failed."""
        ...

    def remote_read_failed(self, collection: str, scope: ScopeKey, error: Exception) -> None:
        """Record that a blocking remote read failed."""
        ...

    def fallback_served(self, collection: str, scope: ScopeKey, source: str) -> None:
        """Record that an uncached last-resort value was returned."""
        ...

    def write_completed(self, collection: str, scope: ScopeKey, operation: str) -> None:
        """Record that a mutation reached the remote tier."""
        ...

    def write_failed(
        self, collection: str, scope: ScopeKey, operation: str, error: Exception
    ) -> None:
        """Record that a mutation was rejected by the remote tier."""
        ...

    def post_write_refresh_failed(
        self, collection: str, scope: ScopeKey, error: Exception
    ) -> None:
        """Record that the re-read after a successful write failed."""
        ...

    def invalidated(
        self,
        tenant_id: str | None,
        bucket: str | None,
        collection: str | None,
        dropped: int,
    ) -> None:
        """Record that memory entries were dropped."""
        ...

    def with_context(self, context: ObservationContext) -> LayeredCacheProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultLayeredCacheProbe:
    """Default implementation of LayeredCacheProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultLayeredCacheProbe:
        """Create a new probe with observation context bound."""
        return DefaultLayeredCacheProbe(logger=self._logger, context=context)

    def cache_hit(self, collection: str, scope: ScopeKey, tier: str, stale: bool) -> None:
        self._logger.debug(
            "cache_hit",
            collection=collection,
            tenant_id=scope.tenant_id,
            bucket=scope.bucket,
            tier=tier,
            stale=stale,
            **self._get_context_kwargs(),
        )

    def cache_miss(self, collection: str, scope: ScopeKey) -> None:
        self._logger.debug(
            "cache_miss",
            collection=collection,
            tenant_id=scope.tenant_id,
            bucket=scope.bucket,
            **self._get_context_kwargs(),
        )

    def refresh_scheduled(self, collection: str, scope: ScopeKey) -> None:
        self._logger.debug(
            "cache_refresh_scheduled",
            collection=collection,
            tenant_id=scope.tenant_id,
            bucket=scope.bucket,
            **self._get_context_kwargs(),
        )

    def refresh_completed(self, collection: str, scope: ScopeKey) -> None:
        self._logger.debug(
            "cache_refresh_completed",
            collection=collection,
            tenant_id=scope.tenant_id,
            bucket=scope.bucket,
            **self._get_context_kwargs(),
        )

    def refresh_failed(self, collection: str, scope: ScopeKey, error: Exception) -> None:
        self._logger.warning(
            "cache_refresh_failed",
            collection=collection,
            tenant_id=scope.tenant_id,
            bucket=scope.bucket,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def remote_read_failed(self, collection: str, scope: ScopeKey, error: Exception) -> None:
        self._logger.warning(
            "cache_remote_read_failed",
            collection=collection,
            tenant_id=scope.tenant_id,
            bucket=scope.bucket,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def fallback_served(self, collection: str, scope: ScopeKey, source: str) -> None:
        self._logger.info(
            "cache_fallback_served",
            collection=collection,
            tenant_id=scope.tenant_id,
            bucket=scope.bucket,
            source=source,
            **self._get_context_kwargs(),
        )

    def write_completed(self, collection: str, scope: ScopeKey, operation: str) -> None:
        self._logger.info(
            "cache_write_completed",
            collection=collection,
            tenant_id=scope.tenant_id,
            bucket=scope.bucket,
            operation=operation,
            **self._get_context_kwargs(),
        )

    def write_failed(
        self, collection: str, scope: ScopeKey, operation: str, error: Exception
    ) -> None:
        self._logger.error(
            "cache_write_failed",
            collection=collection,
            tenant_id=scope.tenant_id,
            bucket=scope.bucket,
            operation=operation,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def post_write_refresh_failed(
        self, collection: str, scope: ScopeKey, error: Exception
    ) -> None:
        self._logger.warning(
            "cache_post_write_refresh_failed",
            collection=collection,
            tenant_id=scope.tenant_id,
            bucket=scope.bucket,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def invalidated(
        self,
        tenant_id: str | None,
        bucket: str | None,
        collection: str | None,
        dropped: int,
    ) -> None:
        self._logger.info(
            "cache_invalidated",
            tenant_id=tenant_id,
            bucket=bucket,
            collection=collection,
            dropped=dropped,
            **self._get_context_kwargs(),
        )
