"""In-memory implementation of the RemoteSource port.

Used by unit tests and offline demos. It keeps tables as lists of rows,
records every call so tests can count round trips, and can be told to fail
reads, writes or RPCs with RemoteUnavailableError.
"""

from __future__ import annotations

import asyncio
import copy
import uuid
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from shared_kernel.datasource.types import Row, WriteOperation
from shared_kernel.exceptions import RemoteUnavailableError


@dataclass(frozen=True)
class RemoteCall:
    """A call observed by the in-memory source."""

    kind: str
    collection: str
    operation: str | None = None
    filters: dict[str, Any] = field(default_factory=dict)
    payload: Any = None


def _matches(row: Row, filters: Mapping[str, Any]) -> bool:
    return all(row.get(column) == value for column, value in filters.items())


def _sort_key(column: str) -> Callable[[Row], tuple[bool, Any]]:
    # None sorts last, like PostgreSQL's default NULLS LAST for ascending order
    return lambda row: (row.get(column) is None, row.get(column))


class InMemoryRemoteSource:
    """Remote data tier held in process memory."""

    def __init__(
        self,
        tables: Mapping[str, list[Row]] | None = None,
        rpc_handlers: Mapping[str, Callable[[Mapping[str, Any]], Any]] | None = None,
        *,
        latency: float = 0.0,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self.tables: dict[str, list[Row]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self.calls: list[RemoteCall] = []
        self.latency = latency
        self._rpc_handlers = dict(rpc_handlers or {})
        self._failures: dict[tuple[str, str | None], RemoteUnavailableError] = {}
        self._id_factory = id_factory or (lambda: str(uuid.uuid4()))

    def register_rpc(
        self, name: str, handler: Callable[[Mapping[str, Any]], Any]
    ) -> None:
        self._rpc_handlers[name] = handler

    def set_failure(
        self,
        kind: str,
        collection: str | None = None,
        error: RemoteUnavailableError | None = None,
    ) -> None:
        """Make calls of ``kind`` ("read", "write", "rpc") fail.

        A collection narrows the failure to one table (or RPC name).
        """
        self._failures[(kind, collection)] = error or RemoteUnavailableError(
            f"simulated {kind} failure",
            collection=collection,
            operation=kind,
        )

    def clear_failures(self) -> None:
        self._failures.clear()

    def calls_for(self, kind: str, collection: str | None = None) -> list[RemoteCall]:
        return [
            call
            for call in self.calls
            if call.kind == kind and (collection is None or call.collection == collection)
        ]

    def rows(self, collection: str) -> list[Row]:
        return copy.deepcopy(self.tables.get(collection, []))

    async def read(
        self,
        collection: str,
        filters: Mapping[str, Any],
        *,
        columns: str = "*",
        order: Sequence[str] = (),
        limit: int | None = None,
    ) -> list[Row]:
        self.calls.append(RemoteCall("read", collection, filters=dict(filters)))
        await self._suspend()
        self._raise_if_failing("read", collection)

        rows = [row for row in self.tables.get(collection, []) if _matches(row, filters)]
        for column in reversed(list(order)):
            descending = column.startswith("-")
            rows.sort(key=_sort_key(column.lstrip("-")), reverse=descending)
        if limit is not None:
            rows = rows[:limit]

        if columns.strip() != "*":
            selected = [c.strip() for c in columns.split(",") if c.strip()]
            rows = [{c: row.get(c) for c in selected} for row in rows]

        return copy.deepcopy(rows)

    async def write(
        self,
        collection: str,
        operation: WriteOperation,
        payload: Row | list[Row] | None = None,
        *,
        filters: Mapping[str, Any] | None = None,
        on_conflict: str | None = None,
    ) -> list[Row]:
        self.calls.append(
            RemoteCall(
                "write",
                collection,
                operation=str(operation),
                filters=dict(filters or {}),
                payload=copy.deepcopy(payload),
            )
        )
        await self._suspend()
        self._raise_if_failing("write", collection)

        table = self.tables.setdefault(collection, [])
        rows = [payload] if isinstance(payload, dict) else list(payload or [])

        if operation is WriteOperation.INSERT:
            affected = [self._insert(table, row) for row in rows]
        elif operation is WriteOperation.UPSERT:
            conflict = [c.strip() for c in (on_conflict or "id").split(",")]
            affected = [self._upsert(table, row, conflict) for row in rows]
        elif operation is WriteOperation.UPDATE:
            values = payload if isinstance(payload, dict) else {}
            affected = [row for row in table if _matches(row, filters or {})]
            for row in affected:
                row.update(values)
        else:
            affected = [row for row in table if _matches(row, filters or {})]
            table[:] = [row for row in table if not _matches(row, filters or {})]

        return copy.deepcopy(affected)

    async def rpc(self, name: str, args: Mapping[str, Any] | None = None) -> Any:
        self.calls.append(RemoteCall("rpc", name, payload=dict(args or {})))
        await self._suspend()
        self._raise_if_failing("rpc", name)

        handler = self._rpc_handlers.get(name)
        if handler is None:
            raise RemoteUnavailableError(
                f"Unknown remote procedure: {name}", collection=name, operation="rpc"
            )
        return handler(dict(args or {}))

    def _insert(self, table: list[Row], row: Row) -> Row:
        stored = dict(row)
        stored.setdefault("id", self._id_factory())
        table.append(stored)
        return stored

    def _upsert(self, table: list[Row], row: Row, conflict: list[str]) -> Row:
        if all(column in row for column in conflict):
            for existing in table:
                if all(existing.get(c) == row[c] for c in conflict):
                    existing.update(row)
                    return existing
        return self._insert(table, row)

    def _raise_if_failing(self, kind: str, collection: str) -> None:
        error = self._failures.get((kind, collection)) or self._failures.get((kind, None))
        if error is not None:
            raise error

    async def _suspend(self) -> None:
        # Always yield so concurrent callers interleave like real I/O
        await asyncio.sleep(self.latency)
