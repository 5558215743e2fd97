"""Observability for the layered cache and migration seeder."""

from caching.application.observability.cache_probe import (
    DefaultLayeredCacheProbe,
    LayeredCacheProbe,
)
from caching.application.observability.seeder_probe import (
    DefaultMigrationSeederProbe,
    MigrationSeederProbe,
)

__all__ = [
    "DefaultLayeredCacheProbe",
    "DefaultMigrationSeederProbe",
    "LayeredCacheProbe",
    "MigrationSeederProbe",
]
