"""Domain probe for the household coordinator."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class CoordinatorProbe(Protocol):
    """Domain probe for session-level coordinator events."""

    def signed_out(self, tenant_id: str | None, cleared_keys: list[str]) -> None:
        """Record that the session state was cleared on sign-out."""
        ...

    def transient_key_clear_failed(self, key: str, error: Exception) -> None:
        """Record that a transient key could not be removed."""
        ...

    def foreign_scope_rejected(self, scope_tenant_id: str, tenant_id: str) -> None:
        """Record that a scope for another tenant was refused."""
        ...

    def coordinator_closed(self) -> None:
        """Record that the coordinator released its resources."""
        ...

    def with_context(self, context: ObservationContext) -> CoordinatorProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultCoordinatorProbe:
    """Default implementation of CoordinatorProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultCoordinatorProbe:
        return DefaultCoordinatorProbe(logger=self._logger, context=context)

    def signed_out(self, tenant_id: str | None, cleared_keys: list[str]) -> None:
        self._logger.info(
            "session_signed_out",
            tenant_id=tenant_id,
            cleared_keys=cleared_keys,
            **self._get_context_kwargs(),
        )

    def transient_key_clear_failed(self, key: str, error: Exception) -> None:
        self._logger.warning(
            "transient_key_clear_failed",
            key=key,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def foreign_scope_rejected(self, scope_tenant_id: str, tenant_id: str) -> None:
        self._logger.warning(
            "foreign_scope_rejected",
            scope_tenant_id=scope_tenant_id,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def coordinator_closed(self) -> None:
        self._logger.info("coordinator_closed", **self._get_context_kwargs())
