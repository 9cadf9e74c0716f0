import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lnacademy.core.exceptions import NotFoundError, ResourceInUseError
from lnacademy.models.product import Product
from lnacademy.models.user import User

logger = logging.getLogger(__name__)


class UserRepository:
    """Credential store. Every lookup ignores soft-deleted users."""

    def __init__(self, db: Session):
        self.db = db

    def _active(self):
        return self.db.query(User).filter(User.deleted_at.is_(None))

    def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        return self._active().filter(User.id == user_id).first()

    def get_by_email(self, email: str) -> Optional[User]:
        # Exact match: emails are case-sensitive as stored
        return self._active().filter(User.email == email).first()

    def list_active(self) -> List[User]:
        return self._active().order_by(User.created_at, User.id).all()

    def create(self, user: User) -> User:
        self.db.add(user)
        self.commit()
        # Load server-generated timestamps
        self.db.refresh(user)
        return user

    def update(self, user: User) -> User:
        if self.get_by_id(user.id) is None:
            raise NotFoundError(f"User with ID {user.id} not found")
        self.commit()
        self.db.refresh(user)
        return user

    def soft_delete(self, user_id: uuid.UUID) -> None:
        """
        Hide a user from every lookup.

        Users to products is a restrict relationship: the user is kept while
        any product row still references them, including soft-deleted ones.
        """
        user = self.get_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User with ID {user_id} not found")

        owned = self.db.query(Product.id).filter(Product.creator_id == user_id).count()
        if owned:
            logger.warning(f"Refusing to delete user {user_id}: {owned} product(s) still reference it")
            raise ResourceInUseError(
                f"User {user_id} still owns {owned} product(s) and cannot be deleted"
            )

        user.deleted_at = datetime.now(timezone.utc)
        self.commit()

    def commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError:
            # Rollback prevents the session from staying in a failed state
            self.db.rollback()
            logger.exception("Error saving user changes to database")
            raise
