"""Remote data service port shared by all bounded contexts."""

from shared_kernel.datasource.protocols import RemoteSource
from shared_kernel.datasource.types import WriteOperation

__all__ = [
    "RemoteSource",
    "WriteOperation",
]
