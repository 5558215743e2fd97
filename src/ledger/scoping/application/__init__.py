"""Application layer for scope keys."""

from scoping.application.scope_resolver import ScopeKeyResolver

__all__ = ["ScopeKeyResolver"]
