"""Repository for site users."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from asian_drama_board.models import User

logger = logging.getLogger(__name__)


class UserRepository:
    """
    Repository for site users.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_by_username(self, username: str) -> User | None:
        """Get user by username."""
        return self.db.query(User).filter(User.username == username).first()

    def get_or_create(self, username: str) -> User:
        """
        Get a user by username, creating it on first use.

        Args:
            username: Username to look up

        Returns:
            User object
        """
        user = self.get_by_username(username)
        if user:
            return user

        user = User(username=username)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Created by a concurrent request
            self.db.rollback()
            existing = self.get_by_username(username)
            if existing is None:
                raise
            return existing
        self.db.refresh(user)

        logger.info(f"Created user '{username}' (id={user.id})")
        return user

    # noinspection PyTypeChecker
    def get_all_users(self) -> list[User]:
        """Get all users."""
        return self.db.query(User).order_by(User.id).all()

    def count_users(self) -> int:
        """Count users."""
        return self.db.query(User).count()
