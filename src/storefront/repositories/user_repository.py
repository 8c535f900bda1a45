"""
User, profile and user token queries.
"""

from typing import Iterator, List, Optional, Tuple
import uuid

from sqlalchemy import desc
from sqlalchemy.orm import Session

from storefront.database.models import User, Profile, UserToken, utcnow


class UserRepository:
    """Access to non-deleted users and their profiles."""

    def __init__(self, db: Session):
        self.db = db

    def _active(self):
        return self.db.query(User).filter(User.dt_deleted.is_(None))

    def find_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        return self._active().filter(User.id == user_id).first()

    def find_by_email(self, email: str) -> Optional[User]:
        return self._active().filter(User.email == email).first()

    def email_taken(self, email: str) -> bool:
        """True if any user, deleted or not, holds the email (it is unique)."""
        return self.db.query(User.id).filter(User.email == email).first() is not None

    def list_paginated(self, limit: int, offset: int) -> Tuple[List[User], int]:
        query = self._active()
        total = query.count()
        users = query.order_by(desc(User.dt_created), desc(User.id)).offset(offset).limit(limit).all()
        return users, total

    def iter_batches(self, batch_size: int = 1000) -> Iterator[List[User]]:
        """Yield all non-deleted users, oldest first, in fixed-size batches."""
        offset = 0
        while True:
            batch = (
                self._active()
                .order_by(User.dt_created, User.id)
                .offset(offset)
                .limit(batch_size)
                .all()
            )
            if not batch:
                return
            yield batch
            offset += len(batch)

    def create_with_profile(self, user: User, profile: Profile) -> User:
        self.db.add(user)
        self.db.flush()
        profile.user_id = user.id
        self.db.add(profile)
        self.db.flush()
        self.db.refresh(user)
        return user

    def soft_delete(self, user: User) -> None:
        user.soft_delete()
        self.db.flush()


class UserTokenRepository:
    """Single-use confirmation and reset codes."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, user_id: uuid.UUID, token_type: str) -> UserToken:
        token = UserToken(user_id=user_id, token_type=token_type)
        self.db.add(token)
        self.db.flush()
        return token

    def find_valid(self, code: str, token_type: str) -> Optional[UserToken]:
        """Newest unconsumed, unexpired token with this code and type."""
        return (
            self.db.query(UserToken)
            .filter(
                UserToken.code == code,
                UserToken.token_type == token_type,
                UserToken.consumed.is_(False),
                UserToken.expires_at > utcnow(),
            )
            .order_by(desc(UserToken.dt_created))
            .first()
        )

    def consume(self, token: UserToken) -> None:
        token.consumed = True
        self.db.flush()
