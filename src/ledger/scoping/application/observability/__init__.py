"""Observability for scope key resolution."""

from scoping.application.observability.scope_resolver_probe import (
    DefaultScopeResolverProbe,
    ScopeResolverProbe,
)

__all__ = [
    "DefaultScopeResolverProbe",
    "ScopeResolverProbe",
]
