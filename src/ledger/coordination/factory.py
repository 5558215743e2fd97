"""Composition of a production coordinator.

Builds the httpx client, the SQLAlchemy engine and every adapter from
settings, and hands their finalizers to the coordinator so ``aclose()``
releases them.
"""

from __future__ import annotations

from datetime import timedelta

import httpx

from caching.application.layered_cache import LayeredCache
from coordination.coordinator import HouseholdCoordinator
from infrastructure.identity.session_provider import SessionIdentityProvider
from infrastructure.identity.token_validator import TokenValidator
from infrastructure.logging import configure_logging
from infrastructure.remote.postgrest_source import PostgrestRemoteSource
from infrastructure.settings import Settings, get_settings
from infrastructure.storage.engines import (
    create_schema,
    create_session_factory,
    create_store_engine,
)
from infrastructure.storage.sqlalchemy_store import SqlAlchemyPersistentStore
from scoping.application.scope_resolver import ScopeKeyResolver
from shared_kernel.identity.protocols import IdentityProvider
from tenancy.application.tenant_resolver import TenantResolver


def create_identity_provider(settings: Settings) -> SessionIdentityProvider:
    identity_settings = settings.identity
    validator = TokenValidator(
        issuer_url=identity_settings.issuer_url,
        audience=identity_settings.audience,
        algorithms=identity_settings.algorithms,
        jwks_cache_ttl=timedelta(hours=identity_settings.jwks_cache_ttl_hours),
    )
    return SessionIdentityProvider(validator)


async def build_coordinator(
    settings: Settings | None = None,
    identity: IdentityProvider | None = None,
) -> HouseholdCoordinator:
    """Build a coordinator wired to the production adapters.

    Args:
        settings: Application settings (defaults to the cached settings)
        identity: Identity provider; a SessionIdentityProvider validating
            tokens against the configured issuer is created when omitted

    Returns:
        A ready coordinator; the caller must ``await coordinator.aclose()``
    """
    settings = settings or get_settings()
    configure_logging(debug=settings.debug)
    identity = identity or create_identity_provider(settings)

    remote_settings = settings.remote
    client = httpx.AsyncClient(base_url=remote_settings.url)
    remote = PostgrestRemoteSource(
        client,
        api_key=remote_settings.api_key.get_secret_value(),
        identity=identity,
        timeout_seconds=remote_settings.timeout_seconds,
        rpc_timeout_seconds=remote_settings.rpc_timeout_seconds,
    )

    engine = create_store_engine(settings.store)
    await create_schema(engine)
    store = SqlAlchemyPersistentStore(create_session_factory(engine))

    return HouseholdCoordinator(
        tenants=TenantResolver(remote, identity),
        scopes=ScopeKeyResolver(store),
        cache=LayeredCache(remote, store, staleness=settings.cache.staleness),
        store=store,
        closers=(client.aclose, engine.dispose),
    )
