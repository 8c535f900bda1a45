"""
UserToken model - single-use, time-limited codes.

Issued for email confirmation and password reset. A code is valid
while it is unconsumed and not past expires_at.
"""

import enum
import uuid
from datetime import timedelta

from sqlalchemy import Column, String, Boolean, DateTime, Uuid, ForeignKey, Index
from sqlalchemy.orm import relationship

from .base import Base, utcnow

TOKEN_TTL = timedelta(hours=1)


class TokenType(str, enum.Enum):
    CONFIRM_EMAIL = "confirm_email"
    RESET_PASSWORD = "reset_password"


def _new_code() -> str:
    return str(uuid.uuid4())


def _expiry():
    return utcnow() + TOKEN_TTL


class UserToken(Base):
    """Confirmation or reset code belonging to a user."""

    __tablename__ = "user_tokens"

    # Primary Key
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    code = Column(String(64), unique=True, nullable=False, default=_new_code)
    token_type = Column(String(32), nullable=False)
    expires_at = Column(DateTime, nullable=False, default=_expiry)
    consumed = Column(Boolean, default=False, nullable=False)

    # Timestamps
    dt_created = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="tokens")

    __table_args__ = (
        Index("ix_user_tokens_code_type", "code", "token_type"),
    )

    def __repr__(self):
        return f"<UserToken(user_id={self.user_id}, type='{self.token_type}', consumed={self.consumed})>"
