"""Application layer for the layered cache."""

from caching.application.layered_cache import DEFAULT_STALENESS, LayeredCache
from caching.application.migration_seeder import MigrationSeeder, SeedOutcome

__all__ = [
    "DEFAULT_STALENESS",
    "LayeredCache",
    "MigrationSeeder",
    "SeedOutcome",
]
