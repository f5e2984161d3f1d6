"""Core modules for the user service console."""

from __future__ import annotations

from .dao import DaoError, DuplicateEmailError, UserDao, UserNotFoundError
from .database import Database, resolve_database_url
from .models import User
from .service import UserService

__all__ = [
    "DaoError",
    "Database",
    "DuplicateEmailError",
    "User",
    "UserDao",
    "UserNotFoundError",
    "UserService",
    "resolve_database_url",
]
