"""ORM mapping for the user records managed by the console."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import declarative_base


def _current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


Base = declarative_base()


class User(Base):
    """Represents a user account stored in the ``users`` table."""

    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("email", name="uk_users_email"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    email = Column(String(150), nullable=False)
    age = Column(Integer, nullable=True)
    # Assigned on insert only; merges carry the loaded value back unchanged.
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_current_timestamp,
    )

    def __init__(self, name: str, email: str, age: Optional[int] = None) -> None:
        self.name = name
        self.email = email
        self.age = age

    def __str__(self) -> str:
        return (
            f"User{{id={self.id}, name='{self.name}', email='{self.email}', "
            f"age={self.age}, createdAt={self.created_at}}}"
        )

    __repr__ = __str__


__all__ = ["Base", "User"]
