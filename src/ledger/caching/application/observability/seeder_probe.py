"""Domain probe for the migration seeder."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext
    from shared_kernel.scope import ScopeKey


class MigrationSeederProbe(Protocol):
    """Domain probe for one-time seeding of tenant collections."""

    def seeding_skipped(self, collection: str, scope: ScopeKey, reason: str) -> None:
        """Record that seeding did not run (already seeded or in progress)."""
        ...

    def collection_seeded(
        self, collection: str, scope: ScopeKey, source: str, row_count: int
    ) -> None:
        """Record that legacy data or defaults were written under the tenant."""
        ...

    def nothing_to_seed(self, collection: str, scope: ScopeKey) -> None:
        """Record that an empty collection was marked seeded without writes."""
        ...

    def seeding_failed(self, collection: str, scope: ScopeKey, error: Exception) -> None:
        """Record that the seed write or its re-read failed."""
        ...

    def with_context(self, context: ObservationContext) -> MigrationSeederProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultMigrationSeederProbe:
    """Default implementation of MigrationSeederProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultMigrationSeederProbe:
        return DefaultMigrationSeederProbe(logger=self._logger, context=context)

    def seeding_skipped(self, collection: str, scope: ScopeKey, reason: str) -> None:
        self._logger.debug(
            "seeding_skipped",
            collection=collection,
            tenant_id=scope.tenant_id,
            bucket=scope.bucket,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def collection_seeded(
        self, collection: str, scope: ScopeKey, source: str, row_count: int
    ) -> None:
        self._logger.info(
            "collection_seeded",
            collection=collection,
            tenant_id=scope.tenant_id,
            bucket=scope.bucket,
            source=source,
            row_count=row_count,
            **self._get_context_kwargs(),
        )

    def nothing_to_seed(self, collection: str, scope: ScopeKey) -> None:
        self._logger.debug(
            "nothing_to_seed",
            collection=collection,
            tenant_id=scope.tenant_id,
            bucket=scope.bucket,
            **self._get_context_kwargs(),
        )

    def seeding_failed(self, collection: str, scope: ScopeKey, error: Exception) -> None:
        self._logger.warning(
            "seeding_failed",
            collection=collection,
            tenant_id=scope.tenant_id,
            bucket=scope.bucket,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
