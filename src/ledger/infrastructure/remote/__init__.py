"""Remote data service adapters."""

from infrastructure.remote.in_memory_source import InMemoryRemoteSource, RemoteCall
from infrastructure.remote.postgrest_source import PostgrestRemoteSource

__all__ = [
    "InMemoryRemoteSource",
    "PostgrestRemoteSource",
    "RemoteCall",
]
