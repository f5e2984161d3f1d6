"""Validation layer placed in front of :class:`app.dao.UserDao`."""

from __future__ import annotations

import logging
from typing import List, Optional

from .dao import UserDao, UserNotFoundError
from .models import User

logger = logging.getLogger("userservice.service")


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _require_valid_id(user_id: Optional[int]) -> int:
    if not isinstance(user_id, int) or isinstance(user_id, bool) or user_id <= 0:
        raise ValueError("Invalid ID")
    return user_id


def _require_valid_age(age: Optional[int]) -> Optional[int]:
    if age is None:
        return None
    if not isinstance(age, int) or isinstance(age, bool):
        raise ValueError("Age must be a whole number")
    if age < 0:
        raise ValueError("Age must not be negative")
    return age


class UserService:
    """Checks caller input before handing it to the DAO."""

    def __init__(self, user_dao: UserDao) -> None:
        self._dao = user_dao

    def create_user(self, name: Optional[str], email: Optional[str], age: Optional[int] = None) -> User:
        if _is_blank(name) or _is_blank(email):
            raise ValueError("Name and email must not be empty")
        _require_valid_age(age)
        return self._dao.create(User(name.strip(), email.strip(), age))

    def get_user_by_id(self, user_id: Optional[int]) -> Optional[User]:
        return self._dao.find_by_id(_require_valid_id(user_id))

    def get_all_users(self) -> List[User]:
        return self._dao.find_all()

    def update_user(
        self,
        user_id: Optional[int],
        name: Optional[str] = None,
        email: Optional[str] = None,
        age: Optional[int] = None,
    ) -> User:
        """Apply the supplied fields to an existing user.

        Blank strings and ``None`` leave the stored value untouched.
        """
        user_id = _require_valid_id(user_id)
        _require_valid_age(age)

        user = self._dao.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(f"User not found with id: {user_id}")

        if not _is_blank(name):
            user.name = name.strip()
        if not _is_blank(email):
            user.email = email.strip()
        if age is not None:
            user.age = age

        logger.debug("Applying changes to user id=%s", user_id)
        return self._dao.update(user)

    def delete_user(self, user_id: Optional[int]) -> bool:
        return self._dao.delete_by_id(_require_valid_id(user_id))


__all__ = ["UserService"]
