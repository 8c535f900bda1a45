"""
User model - credentials and identity of an account.
"""

import uuid

from sqlalchemy import Column, String, Uuid, Index
from sqlalchemy.orm import relationship

from .base import Base, TimestampMixin, SoftDeleteMixin


class User(TimestampMixin, SoftDeleteMixin, Base):
    """
    Registered user.

    Users created through the identity provider have an empty password
    and can only log in through that provider.
    """

    __tablename__ = "users"

    # Primary Key
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Identity
    username = Column(String(150), nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)

    # Authentication
    password = Column(String(255), nullable=False, default="")

    # Relationships
    profile = relationship("Profile", back_populates="user", uselist=False, lazy="joined")
    tokens = relationship("UserToken", back_populates="user", lazy="dynamic")

    __table_args__ = (
        Index("ix_users_email_deleted", "email", "dt_deleted"),
    )

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}')>"

    def to_dict(self, include_profile: bool = True) -> dict:
        """Public representation (never includes the password hash)."""
        data = {
            "id": str(self.id),
            "username": self.username,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
        }
        if include_profile:
            data["profile"] = self.profile.to_dict() if self.profile else None
        return data
