"""In-memory implementation of the PersistentStore port.

Nothing survives the process, so it only stands in for the durable store in
tests and in sessions that opt out of local persistence.
"""

from __future__ import annotations

from collections.abc import Mapping

from shared_kernel.storage.protocols import PersistentStore


class InMemoryPersistentStore(PersistentStore):
    """Dictionary-backed string store."""

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})
        self.writes: list[str] = []

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.writes.append(key)
        self.data[key] = value

    async def remove(self, key: str) -> None:
        self.data.pop(key, None)
