"""Collection specification.

A CollectionSpec is the static description of one tenant-scoped domain
collection: which remote table backs it, how rows map to the cached value,
what its built-in defaults are and where its pre-tenant (legacy) data
lives. The layered cache and the migration seeder are generic over it.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from shared_kernel.datasource.protocols import RemoteSource
from shared_kernel.datasource.types import Row, WriteOperation
from shared_kernel.exceptions import ValidationError
from shared_kernel.scope import ScopeKey

Validator = Callable[[WriteOperation, Any], None]


def rows_as_value(rows: list[Row]) -> Any:
    return rows


def value_as_rows(value: Any) -> list[Row]:
    if value is None:
        return []
    if isinstance(value, dict):
        return [dict(value)]
    return [dict(row) for row in value]


def is_empty_value(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, dict, str)):
        return not value
    return False


def no_default() -> Any:
    return []


@dataclass(frozen=True)
class CollectionSpec:
    """Static description of a tenant-scoped collection.

    Attributes:
        name: Collection name used in cache keys and markers
        table: Remote table backing the collection
        columns: Column selection for remote reads
        order: Remote read ordering ("-col" sorts descending)
        bucketed: Whether instances are partitioned by week bucket
        tenant_column: Column holding the tenant id
        bucket_column: Column holding the bucket, for bucketed collections
        default: Factory for the built-in default value
        seeds_defaults: Whether the seeder writes defaults when no legacy
            record exists
        migrates_legacy: Whether pre-tenant data is imported by the seeder
        legacy_keys: Durable-store keys of legacy data, given the bucket
        legacy_parser: Turns a decoded legacy record into a value
        from_rows: Maps remote rows to the cached value
        to_rows: Maps a value to rows for seeding
        is_empty: Whether a value counts as an empty collection
        on_conflict: Conflict target; seeding upserts when set
        validator: Checks a write payload before any remote call
    """

    name: str
    table: str
    columns: str = "*"
    order: tuple[str, ...] = ()
    bucketed: bool = False
    tenant_column: str = "household_id"
    bucket_column: str = "week_start"
    default: Callable[[], Any] = no_default
    seeds_defaults: bool = False
    migrates_legacy: bool = False
    legacy_keys: Callable[[str], Sequence[str]] | None = None
    legacy_parser: Callable[[Any], Any] | None = None
    from_rows: Callable[[list[Row]], Any] = rows_as_value
    to_rows: Callable[[Any], list[Row]] = value_as_rows
    is_empty: Callable[[Any], bool] = is_empty_value
    on_conflict: str | None = None
    validator: Validator | None = None

    def normalize(self, scope: ScopeKey) -> ScopeKey:
        """Return the scope this collection is stored under.

        Raises:
            ValidationError: If a bucketed collection gets the global bucket
        """
        if not self.bucketed:
            return scope.unbucketed()
        if scope.is_global:
            raise ValidationError(
                f"Collection '{self.name}' requires a week bucket", field="bucket"
            )
        return scope

    def filters(self, scope: ScopeKey) -> dict[str, Any]:
        filters: dict[str, Any] = {self.tenant_column: scope.tenant_id}
        if self.bucketed:
            filters[self.bucket_column] = scope.bucket
        return filters

    def stamp(self, scope: ScopeKey, rows: list[Row]) -> list[Row]:
        """Attach the tenant (and bucket) columns to outgoing rows."""
        return [{**row, **self.filters(scope)} for row in rows]

    def validate(self, operation: WriteOperation, payload: Any) -> None:
        """Check a write payload before anything is sent.

        Raises:
            ValidationError: If the payload is missing, is not a row (or
                list of rows), or fails the collection's own validator
        """
        if operation.carries_payload:
            if payload is None:
                raise ValidationError(
                    f"{operation} on '{self.name}' requires a payload", field="payload"
                )
            rows = [payload] if isinstance(payload, dict) else payload
            if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
                raise ValidationError(
                    f"{operation} on '{self.name}' expects a row or a list of rows",
                    field="payload",
                )
            if operation is WriteOperation.UPDATE and not isinstance(payload, dict):
                raise ValidationError(
                    f"update on '{self.name}' expects a single row of values",
                    field="payload",
                )
        if self.validator is not None:
            self.validator(operation, payload)

    @property
    def seed_operation(self) -> WriteOperation:
        return WriteOperation.UPSERT if self.on_conflict else WriteOperation.INSERT

    async def fetch(self, remote: RemoteSource, scope: ScopeKey) -> Any:
        rows = await remote.read(
            self.table,
            self.filters(scope),
            columns=self.columns,
            order=self.order,
        )
        return self.from_rows(rows)

    async def store(
        self,
        remote: RemoteSource,
        scope: ScopeKey,
        operation: WriteOperation,
        payload: Any = None,
        match: Mapping[str, Any] | None = None,
    ) -> list[Row]:
        """Apply a mutation to the remote table within the scope.

        Inserts and upserts get the tenant columns stamped on every row;
        updates and deletes are always filtered by them, so a write can
        never reach another tenant's rows.
        """
        if operation in (WriteOperation.INSERT, WriteOperation.UPSERT):
            rows = self.stamp(scope, value_as_rows(payload))
            return await remote.write(
                self.table,
                operation,
                rows,
                on_conflict=self.on_conflict if operation is WriteOperation.UPSERT else None,
            )

        filters = {**dict(match or {}), **self.filters(scope)}
        return await remote.write(
            self.table,
            operation,
            payload if operation is WriteOperation.UPDATE else None,
            filters=filters,
        )

    async def seed(self, remote: RemoteSource, scope: ScopeKey, value: Any) -> list[Row]:
        rows = self.stamp(scope, self.to_rows(value))
        return await remote.write(
            self.table,
            self.seed_operation,
            rows,
            on_conflict=self.on_conflict,
        )
