"""Remote data service protocol.

Defines the interface for the authoritative relational data service,
allowing for swappable implementations (PostgREST over HTTP, in-memory
double for tests).
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from shared_kernel.datasource.types import Row, WriteOperation


@runtime_checkable
class RemoteSource(Protocol):
    """Protocol for the remote (authoritative) data tier.

    Every failure, whether network, timeout or a rejected statement, is
    reported as RemoteUnavailableError.
    """

    async def read(
        self,
        collection: str,
        filters: Mapping[str, Any],
        *,
        columns: str = "*",
        order: Sequence[str] = (),
        limit: int | None = None,
    ) -> list[Row]:
        """Read rows matching equality filters.

        Args:
            collection: Table name (e.g. "household_categories")
            filters: Column equality filters (e.g. {"household_id": "hh-1"})
            columns: Comma-separated column selection
            order: Columns to order by; a leading "-" sorts descending
            limit: Maximum number of rows to return

        Returns:
            Matching rows (possibly empty)

        Raises:
            RemoteUnavailableError: If the read fails
        """
        ...

    async def write(
        self,
        collection: str,
        operation: WriteOperation,
        payload: Row | list[Row] | None = None,
        *,
        filters: Mapping[str, Any] | None = None,
        on_conflict: str | None = None,
    ) -> list[Row]:
        """Apply a mutation.

        Args:
            collection: Table name
            operation: insert, update, upsert or delete
            payload: Row(s) to insert/upsert, or column values to update
            filters: Equality filters selecting rows for update/delete
            on_conflict: Comma-separated conflict target for upsert

        Returns:
            Affected rows as reported by the service

        Raises:
            RemoteUnavailableError: If the mutation fails
        """
        ...

    async def rpc(self, name: str, args: Mapping[str, Any] | None = None) -> Any:
        """Call a privileged remote procedure.

        Raises:
            RemoteUnavailableError: If the call fails or times out
        """
        ...
