"""Scope key resolver.

Derives the time bucket (ISO week-start date) for an operation, either
from explicit caller input or from the active week pinned in the durable
store, and combines it with a tenant id into a ScopeKey.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime

from scoping.application.observability import (
    DefaultScopeResolverProbe,
    ScopeResolverProbe,
)
from scoping.domain.week import monday_iso, parse_iso_date
from shared_kernel.exceptions import StorageUnavailableError, ValidationError
from shared_kernel.scope import ScopeKey
from shared_kernel.storage.protocols import PersistentStore

ACTIVE_BUCKET_KEY = "activeWeekISO"
PIN_SOURCE_KEY = "activeWeekSource"

PIN_AUTO = "auto"
PIN_EXPLICIT = "explicit"


class ScopeKeyResolver:
    """Resolves the active time bucket.

    A bucket computed from the wall clock is pinned with source "auto" and
    follows the calendar: once the clock enters a later week it is moved
    forward. A bucket chosen through ``set_active_bucket`` is pinned with
    source "explicit" and stays until changed. A pin written without a
    source (by earlier single-user versions) counts as explicit.
    """

    def __init__(
        self,
        store: PersistentStore,
        clock: Callable[[], datetime] = datetime.now,
        probe: ScopeResolverProbe | None = None,
    ):
        self._store = store
        self._clock = clock
        self._probe = probe or DefaultScopeResolverProbe()

    def normalize(self, value: str | date) -> str:
        """Snap a date (or ISO date string) to its week-start bucket.

        Raises:
            ValidationError: If a string is not a calendar date
        """
        if isinstance(value, (date, datetime)):
            return monday_iso(value)
        try:
            return monday_iso(parse_iso_date(value))
        except ValueError as e:
            self._probe.invalid_bucket(raw_value=value)
            raise ValidationError(
                f"Bucket must be an ISO date (YYYY-MM-DD), got: '{value}'",
                field="bucket",
            ) from e

    def wall_clock_bucket(self) -> str:
        return monday_iso(self._clock())

    async def current_bucket(self, explicit: str | date | None = None) -> str:
        """Return the bucket for an operation.

        Explicit input is normalized and returned without touching the pin.
        An empty string counts as no input.

        Raises:
            ValidationError: If explicit input is malformed
        """
        if isinstance(explicit, str) and not explicit.strip():
            explicit = None
        if explicit is not None:
            return self.normalize(explicit)

        try:
            pinned = await self._store.get(ACTIVE_BUCKET_KEY)
            source = await self._store.get(PIN_SOURCE_KEY)
        except StorageUnavailableError as e:
            bucket = self.wall_clock_bucket()
            self._probe.pin_unavailable(bucket=bucket, error=e)
            return bucket

        current = self.wall_clock_bucket()
        if pinned:
            try:
                bucket = monday_iso(parse_iso_date(pinned))
            except ValueError:
                self._probe.invalid_bucket(raw_value=pinned)
            else:
                if source == PIN_AUTO and bucket < current:
                    await self._pin(current, PIN_AUTO)
                    self._probe.bucket_advanced(previous=bucket, bucket=current)
                    return current
                return bucket

        await self._pin(current, PIN_AUTO)
        self._probe.bucket_pinned(bucket=current, source=PIN_AUTO)
        return current

    async def set_active_bucket(self, value: str | date) -> str:
        """Pin a bucket chosen by the user.

        Raises:
            ValidationError: If the value is malformed
        """
        bucket = self.normalize(value)
        await self._pin(bucket, PIN_EXPLICIT)
        self._probe.bucket_pinned(bucket=bucket, source=PIN_EXPLICIT)
        return bucket

    async def reset_active_bucket(self) -> str:
        """Re-pin the bucket to the wall-clock week."""
        bucket = self.wall_clock_bucket()
        await self._pin(bucket, PIN_AUTO)
        self._probe.bucket_pinned(bucket=bucket, source=PIN_AUTO)
        return bucket

    async def scope_for(
        self, tenant_id: str, explicit: str | date | None = None
    ) -> ScopeKey:
        return ScopeKey(tenant_id=tenant_id, bucket=await self.current_bucket(explicit))

    async def _pin(self, bucket: str, source: str) -> None:
        try:
            await self._store.set(ACTIVE_BUCKET_KEY, bucket)
            await self._store.set(PIN_SOURCE_KEY, source)
        except StorageUnavailableError as e:
            self._probe.pin_unavailable(bucket=bucket, error=e)
