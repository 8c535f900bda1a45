"""
Profile model - personal data and access level, 1:1 with User.
"""

import enum
import uuid

from sqlalchemy import Column, String, Boolean, Date, Text, Uuid, ForeignKey
from sqlalchemy.orm import relationship

from .base import Base, TimestampMixin


class AccessLevel(str, enum.Enum):
    """Access levels granted to users."""
    USER = "user"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class Profile(TimestampMixin, Base):
    """User profile with confirmation flags and access level."""

    __tablename__ = "profiles"

    # Primary Key
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)

    # Personal data
    bio = Column(Text, nullable=True)
    birth_date = Column(Date, nullable=True)
    phone = Column(String(20), nullable=True)
    document = Column(String(20), nullable=True)
    profession = Column(String(100), nullable=True)
    avatar = Column(String(500), nullable=True)

    # Flags
    confirm_email = Column(Boolean, default=False, nullable=False)
    unsubscribe = Column(Boolean, default=False, nullable=False)
    access_level = Column(String(50), default=AccessLevel.USER.value, nullable=False)

    # Relationships
    user = relationship("User", back_populates="profile")

    def __repr__(self):
        return f"<Profile(user_id={self.user_id}, access_level='{self.access_level}')>"

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "bio": self.bio,
            "birth_date": self.birth_date.isoformat() if self.birth_date else None,
            "phone": self.phone,
            "document": self.document,
            "profession": self.profession,
            "avatar": self.avatar,
            "confirm_email": self.confirm_email,
            "unsubscribe": self.unsubscribe,
            "access_level": self.access_level,
            "dt_created": self.dt_created.isoformat() if self.dt_created else None,
            "dt_updated": self.dt_updated.isoformat() if self.dt_updated else None,
        }
