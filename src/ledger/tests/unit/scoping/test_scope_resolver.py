"""Unit tests for ScopeKeyResolver."""

from datetime import date
from unittest.mock import Mock

import pytest

from infrastructure.storage.in_memory_store import InMemoryPersistentStore
from scoping.application.observability import DefaultScopeResolverProbe
from scoping.application.scope_resolver import (
    ACTIVE_BUCKET_KEY,
    PIN_AUTO,
    PIN_EXPLICIT,
    PIN_SOURCE_KEY,
    ScopeKeyResolver,
)
from shared_kernel.exceptions import StorageUnavailableError, ValidationError
from shared_kernel.scope import ScopeKey


class UnavailableStore:
    """Durable store that fails every call."""

    async def get(self, key):
        raise StorageUnavailableError(f"cannot read {key}")

    async def set(self, key, value):
        raise StorageUnavailableError(f"cannot write {key}")

    async def remove(self, key):
        raise StorageUnavailableError(f"cannot remove {key}")


class TestExplicitBuckets:
    """Tests for caller-supplied buckets."""

    @pytest.mark.asyncio
    async def test_explicit_date_string_is_snapped_to_monday(self, scopes, store):
        assert await scopes.current_bucket("2026-10-22") == "2026-10-19"
        assert ACTIVE_BUCKET_KEY not in store.data

    @pytest.mark.asyncio
    async def test_explicit_date_object(self, scopes):
        assert await scopes.current_bucket(date(2026, 11, 1)) == "2026-10-26"

    @pytest.mark.asyncio
    async def test_malformed_bucket_raises_validation_error(self, scopes):
        with pytest.raises(ValidationError) as exc_info:
            await scopes.current_bucket("next week")

        assert exc_info.value.field == "bucket"

    @pytest.mark.asyncio
    async def test_blank_string_counts_as_no_input(self, scopes):
        assert await scopes.current_bucket("  ") == "2026-10-19"

    @pytest.mark.asyncio
    async def test_scope_for_combines_tenant_and_bucket(self, scopes):
        scope = await scopes.scope_for("hh-1", "2026-10-25")
        assert scope == ScopeKey(tenant_id="hh-1", bucket="2026-10-19")


class TestActiveBucketPin:
    """Tests for the pinned active week."""

    @pytest.mark.asyncio
    async def test_first_call_pins_wall_clock_week(self, scopes, store):
        assert await scopes.current_bucket() == "2026-10-19"
        assert store.data[ACTIVE_BUCKET_KEY] == "2026-10-19"
        assert store.data[PIN_SOURCE_KEY] == PIN_AUTO

    @pytest.mark.asyncio
    async def test_pin_is_reused(self, scopes, store):
        await scopes.current_bucket()
        writes = len(store.writes)

        assert await scopes.current_bucket() == "2026-10-19"
        assert len(store.writes) == writes

    @pytest.mark.asyncio
    async def test_auto_pin_follows_the_calendar(self, scopes, store, clock):
        await scopes.current_bucket()
        clock.advance(days=7)

        assert await scopes.current_bucket() == "2026-10-26"
        assert store.data[ACTIVE_BUCKET_KEY] == "2026-10-26"

    @pytest.mark.asyncio
    async def test_explicit_pin_is_kept_when_the_week_changes(self, scopes, store, clock):
        assert await scopes.set_active_bucket("2026-10-07") == "2026-10-05"
        clock.advance(days=14)

        assert await scopes.current_bucket() == "2026-10-05"
        assert store.data[PIN_SOURCE_KEY] == PIN_EXPLICIT

    @pytest.mark.asyncio
    async def test_pin_without_source_counts_as_explicit(self, clock):
        store = InMemoryPersistentStore({ACTIVE_BUCKET_KEY: "2026-09-28"})
        resolver = ScopeKeyResolver(store, clock=clock)

        assert await resolver.current_bucket() == "2026-09-28"

    @pytest.mark.asyncio
    async def test_invalid_pin_is_replaced(self, clock):
        store = InMemoryPersistentStore({ACTIVE_BUCKET_KEY: "garbage"})
        probe = Mock(spec=DefaultScopeResolverProbe)
        resolver = ScopeKeyResolver(store, clock=clock, probe=probe)

        assert await resolver.current_bucket() == "2026-10-19"
        assert store.data[ACTIVE_BUCKET_KEY] == "2026-10-19"
        probe.invalid_bucket.assert_called_once_with(raw_value="garbage")

    @pytest.mark.asyncio
    async def test_reset_returns_to_wall_clock_week(self, scopes, store):
        await scopes.set_active_bucket("2026-10-05")

        assert await scopes.reset_active_bucket() == "2026-10-19"
        assert store.data[PIN_SOURCE_KEY] == PIN_AUTO

    @pytest.mark.asyncio
    async def test_set_active_bucket_validates(self, scopes):
        with pytest.raises(ValidationError):
            await scopes.set_active_bucket("2026-02-30")

    @pytest.mark.asyncio
    async def test_unavailable_store_falls_back_to_wall_clock(self, clock):
        probe = Mock(spec=DefaultScopeResolverProbe)
        resolver = ScopeKeyResolver(UnavailableStore(), clock=clock, probe=probe)

        assert await resolver.current_bucket() == "2026-10-19"
        probe.pin_unavailable.assert_called_once()
