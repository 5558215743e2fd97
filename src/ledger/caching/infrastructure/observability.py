"""Domain probe for the cache's durable-store access.

Reads from the durable store never fail a cache read: unreadable or
corrupt entries are reported here and treated as misses.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class CacheStorageProbe(Protocol):
    """Domain probe for persistent-tier and legacy-record access."""

    def persistent_read_failed(self, key: str, error: Exception) -> None:
        """Record that a persistent entry could not be read."""
        ...

    def corrupt_entry(self, key: str, error: Exception) -> None:
        """Record that a persistent entry did not decode."""
        ...

    def persistent_write_failed(self, key: str, error: Exception) -> None:
        """Record that a persistent entry could not be written or removed."""
        ...

    def legacy_record_unreadable(self, key: str, error: Exception) -> None:
        """Record that a legacy record could not be read or decoded."""
        ...

    def with_context(self, context: ObservationContext) -> CacheStorageProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultCacheStorageProbe:
    """Default implementation of CacheStorageProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultCacheStorageProbe:
        return DefaultCacheStorageProbe(logger=self._logger, context=context)

    def persistent_read_failed(self, key: str, error: Exception) -> None:
        self._logger.warning(
            "persistent_read_failed",
            key=key,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def corrupt_entry(self, key: str, error: Exception) -> None:
        self._logger.warning(
            "persistent_entry_corrupt",
            key=key,
            error=str(error),
            **self._get_context_kwargs(),
        )

    def persistent_write_failed(self, key: str, error: Exception) -> None:
        self._logger.warning(
            "persistent_write_failed",
            key=key,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def legacy_record_unreadable(self, key: str, error: Exception) -> None:
        self._logger.warning(
            "legacy_record_unreadable",
            key=key,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
