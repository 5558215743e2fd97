"""Domain probe for scope key resolution."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ScopeResolverProbe(Protocol):
    """Domain probe for scope key resolution."""

    def bucket_pinned(self, bucket: str, source: str) -> None:
        """Record that the active bucket was pinned."""
        ...

    def bucket_advanced(self, previous: str, bucket: str) -> None:
        """Record that an auto-pinned bucket followed the calendar forward."""
        ...

    def invalid_bucket(self, raw_value: str) -> None:
        """Record that a bucket value was not an ISO date."""
        ...

    def pin_unavailable(self, bucket: str, error: Exception) -> None:
        """Record that the pin could not be read or written."""
        ...

    def with_context(self, context: ObservationContext) -> ScopeResolverProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultScopeResolverProbe:
    """Default implementation of ScopeResolverProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultScopeResolverProbe:
        """Create a new probe with observation context bound."""
        return DefaultScopeResolverProbe(logger=self._logger, context=context)

    def bucket_pinned(self, bucket: str, source: str) -> None:
        self._logger.info(
            "scope_bucket_pinned",
            bucket=bucket,
            source=source,
            **self._get_context_kwargs(),
        )

    def bucket_advanced(self, previous: str, bucket: str) -> None:
        self._logger.info(
            "scope_bucket_advanced",
            previous=previous,
            bucket=bucket,
            **self._get_context_kwargs(),
        )

    def invalid_bucket(self, raw_value: str) -> None:
        self._logger.warning(
            "scope_bucket_invalid",
            raw_value=raw_value,
            **self._get_context_kwargs(),
        )

    def pin_unavailable(self, bucket: str, error: Exception) -> None:
        self._logger.warning(
            "scope_bucket_pin_unavailable",
            bucket=bucket,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
