"""Persistent store protocol.

A flat, string-to-string durable store that survives process restarts.
The coordinator namespaces its keys itself; implementations must not
interpret them.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class PersistentStore(Protocol):
    """Protocol for durable string key-value stores."""

    async def get(self, key: str) -> str | None:
        """Return the stored string, or None if the key is absent."""
        ...

    async def set(self, key: str, value: str) -> None:
        """Store a string, replacing any previous value."""
        ...

    async def remove(self, key: str) -> None:
        """Remove a key. Removing an absent key is not an error."""
        ...
