"""SQLAlchemy models backing the durable key-value store."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utc_now() -> datetime:
    """Generate UTC timestamp for database defaults.

    Uses a named function instead of lambda for SQLAlchemy 2.0 compatibility.
    """
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for the store's ORM models."""

    pass


class KeyValueModel(Base):
    """One durable string entry.

    Keys are namespaced by the coordinator (tenant, bucket, collection);
    the store itself treats them as opaque.
    """

    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String(512), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utc_now,
        onupdate=_utc_now,
    )

    def __repr__(self) -> str:
        return f"<KeyValueModel(key={self.key})>"
