"""Domain probe for remote data service calls.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events of the HTTP adapter in front of the remote
data service.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class RemoteSourceProbe(Protocol):
    """Domain probe for remote data service calls."""

    def request_completed(
        self, method: str, collection: str, status_code: int, row_count: int
    ) -> None:
        """Record that a request succeeded."""
        ...

    def request_failed(
        self,
        method: str,
        collection: str,
        reason: str,
        status_code: int | None = None,
    ) -> None:
        """Record that a request failed."""
        ...

    def with_context(self, context: ObservationContext) -> RemoteSourceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultRemoteSourceProbe:
    """Default implementation of RemoteSourceProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultRemoteSourceProbe:
        """Create a new probe with observation context bound."""
        return DefaultRemoteSourceProbe(logger=self._logger, context=context)

    def request_completed(
        self, method: str, collection: str, status_code: int, row_count: int
    ) -> None:
        self._logger.debug(
            "remote_request_completed",
            method=method,
            collection=collection,
            status_code=status_code,
            row_count=row_count,
            **self._get_context_kwargs(),
        )

    def request_failed(
        self,
        method: str,
        collection: str,
        reason: str,
        status_code: int | None = None,
    ) -> None:
        self._logger.warning(
            "remote_request_failed",
            method=method,
            collection=collection,
            reason=reason,
            status_code=status_code,
            **self._get_context_kwargs(),
        )
