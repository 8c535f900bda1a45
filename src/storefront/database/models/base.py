"""
Declarative base and shared column helpers for all models.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (all columns store naive UTC)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TimestampMixin:
    """dt_created / dt_updated columns maintained by the ORM."""
    dt_created = Column(DateTime, default=utcnow, nullable=False)
    dt_updated = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class SoftDeleteMixin:
    """Nullable deletion timestamp; rows with dt_deleted set are hidden."""
    dt_deleted = Column(DateTime, nullable=True, index=True)

    @property
    def is_deleted(self) -> bool:
        return self.dt_deleted is not None

    def soft_delete(self) -> None:
        self.dt_deleted = utcnow()
