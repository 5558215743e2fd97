"""Types used by the remote data service port."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

Row = dict[str, Any]


class WriteOperation(StrEnum):
    """Mutations supported by the remote data service."""

    INSERT = "insert"
    UPDATE = "update"
    UPSERT = "upsert"
    DELETE = "delete"

    @property
    def carries_payload(self) -> bool:
        """Whether the operation sends rows (as opposed to only filters)."""
        return self is not WriteOperation.DELETE
