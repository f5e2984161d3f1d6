"""Data access for user records."""
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .database import Database
from .models import User

logger = logging.getLogger("userservice.dao")


class DaoError(RuntimeError):
    """Raised when the user store cannot complete an operation."""


class DuplicateEmailError(DaoError):
    """Raised when a write would break the unique email constraint."""


class UserNotFoundError(DaoError):
    """Raised when an operation targets a user id that does not exist."""


class UserDao:
    """Create/read/update/delete operations against the ``users`` table.

    Every call runs in its own session, so the returned users are detached and
    can be modified freely before being passed back to :meth:`update`.
    """

    def __init__(self, database: Database) -> None:
        self._database = database

    def create(self, user: User) -> User:
        try:
            with self._database.session() as session:
                session.add(user)
        except IntegrityError as exc:
            raise DuplicateEmailError(f"Email must be unique: {user.email}") from exc
        except (SQLAlchemyError, OverflowError) as exc:
            raise DaoError("Failed to create user") from exc

        logger.info("Created user id=%s", user.id)
        return user

    def find_by_id(self, user_id: int) -> Optional[User]:
        try:
            with self._database.session() as session:
                return session.get(User, user_id)
        except (SQLAlchemyError, OverflowError) as exc:
            raise DaoError(f"Failed to read user by id={user_id}") from exc

    def find_all(self) -> List[User]:
        try:
            with self._database.session() as session:
                return list(session.scalars(select(User).order_by(User.id)))
        except (SQLAlchemyError, OverflowError) as exc:
            raise DaoError("Failed to read all users") from exc

    def update(self, user: User) -> User:
        try:
            with self._database.session() as session:
                merged = session.merge(user)
        except IntegrityError as exc:
            raise DuplicateEmailError(f"Email must be unique: {user.email}") from exc
        except (SQLAlchemyError, OverflowError) as exc:
            raise DaoError(f"Failed to update user id={user.id}") from exc

        logger.info("Updated user id=%s", merged.id)
        return merged

    def delete_by_id(self, user_id: int) -> bool:
        try:
            with self._database.session() as session:
                managed = session.get(User, user_id)
                if managed is not None:
                    session.delete(managed)
        except (SQLAlchemyError, OverflowError) as exc:
            raise DaoError(f"Failed to delete user id={user_id}") from exc

        if managed is None:
            return False
        logger.info("Deleted user id=%s", user_id)
        return True


__all__ = ["DaoError", "DuplicateEmailError", "UserDao", "UserNotFoundError"]
