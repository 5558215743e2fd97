"""Coordination layer: the facade domain accessors build on."""

from coordination.coordinator import TRANSIENT_KEYS, HouseholdCoordinator
from coordination.factory import build_coordinator, create_identity_provider
from coordination.observability import CoordinatorProbe, DefaultCoordinatorProbe

__all__ = [
    "TRANSIENT_KEYS",
    "CoordinatorProbe",
    "DefaultCoordinatorProbe",
    "HouseholdCoordinator",
    "build_coordinator",
    "create_identity_provider",
]
