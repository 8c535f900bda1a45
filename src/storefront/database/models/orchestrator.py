"""
Orchestrator model - external application registered for user sync.
"""

import uuid

from sqlalchemy import Column, String, Uuid

from .base import Base, TimestampMixin, SoftDeleteMixin

RESERVED_APP_NAME = "app_auth"


class Orchestrator(TimestampMixin, SoftDeleteMixin, Base):
    """
    Registered external application.

    The app authenticates to us, and we to it, with the static
    ``app_token``. User snapshots are pushed to ``app_url``.
    """

    __tablename__ = "orchestrators"

    # Primary Key
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    app_name = Column(String(100), nullable=False, index=True)
    app_url = Column(String(500), nullable=False)
    app_token = Column(Uuid, nullable=False, unique=True, default=uuid.uuid4)

    def __repr__(self):
        return f"<Orchestrator(id={self.id}, app_name='{self.app_name}')>"

    @property
    def event_sync_url(self) -> str:
        return f"{self.app_url.rstrip('/')}/v1/event-sync/"
