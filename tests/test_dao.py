from __future__ import annotations

from pathlib import Path

import pytest

from app.dao import DaoError, DuplicateEmailError, UserDao
from app.database import Database
from app.models import User


@pytest.fixture()
def database(tmp_path: Path) -> Database:
    db = Database(f"sqlite:///{tmp_path / 'users.sqlite3'}")
    db.initialize()
    yield db
    db.close()


@pytest.fixture()
def user_dao(database: Database) -> UserDao:
    return UserDao(database)


def test_create_persists_and_returns_user(user_dao: UserDao) -> None:
    result = user_dao.create(User("John Doe", "john@example.com", 30))

    assert result.id is not None
    assert result.name == "John Doe"
    assert result.email == "john@example.com"
    assert result.age == 30
    assert result.created_at is not None


def test_create_allows_unknown_age(user_dao: UserDao) -> None:
    result = user_dao.create(User("No Age", "noage@example.com"))

    assert result.age is None
    assert user_dao.find_by_id(result.id).age is None


def test_create_duplicate_email_raises(user_dao: UserDao) -> None:
    user_dao.create(User("John", "john@example.com", 30))

    with pytest.raises(DuplicateEmailError) as excinfo:
        user_dao.create(User("Jane", "john@example.com", 25))

    assert "Email must be unique" in str(excinfo.value)
    assert isinstance(excinfo.value, DaoError)
    assert len(user_dao.find_all()) == 1


def test_find_by_id_returns_user(user_dao: UserDao) -> None:
    user = user_dao.create(User("John Doe", "john@example.com", 30))

    result = user_dao.find_by_id(user.id)

    assert result is not None
    assert result.id == user.id
    assert result.name == "John Doe"


def test_find_by_id_missing_returns_none(user_dao: UserDao) -> None:
    assert user_dao.find_by_id(999) is None


def test_find_all_returns_every_user_in_id_order(user_dao: UserDao) -> None:
    user_dao.create(User("John", "john@example.com", 30))
    user_dao.create(User("Jane", "jane@example.com", 25))

    users = user_dao.find_all()

    assert [u.email for u in users] == ["john@example.com", "jane@example.com"]
    assert users[0].id < users[1].id


def test_find_all_empty_database(user_dao: UserDao) -> None:
    assert user_dao.find_all() == []


def test_update_changes_fields(user_dao: UserDao) -> None:
    user = user_dao.create(User("John", "john@example.com", 30))
    created_at = user_dao.find_by_id(user.id).created_at

    user.name = "Jane"
    user.email = "jane@example.com"
    user.age = 31
    updated = user_dao.update(user)

    assert updated.id == user.id
    assert updated.name == "Jane"
    assert updated.email == "jane@example.com"
    assert updated.age == 31

    reloaded = user_dao.find_by_id(user.id)
    assert reloaded.name == "Jane"
    assert reloaded.created_at == created_at


def test_update_duplicate_email_raises(user_dao: UserDao) -> None:
    user_dao.create(User("John", "john@example.com", 30))
    jane = user_dao.create(User("Jane", "jane@example.com", 25))

    jane.email = "john@example.com"

    with pytest.raises(DuplicateEmailError) as excinfo:
        user_dao.update(jane)

    assert "Email must be unique: john@example.com" in str(excinfo.value)
    assert user_dao.find_by_id(jane.id).email == "jane@example.com"


def test_delete_by_id_removes_user(user_dao: UserDao) -> None:
    user = user_dao.create(User("John", "john@example.com", 30))

    assert user_dao.delete_by_id(user.id) is True
    assert user_dao.find_by_id(user.id) is None


def test_delete_by_id_missing_returns_false(user_dao: UserDao) -> None:
    assert user_dao.delete_by_id(999) is False


def test_store_failures_are_wrapped(tmp_path: Path) -> None:
    database = Database(f"sqlite:///{tmp_path / 'empty.sqlite3'}", schema_action="none")
    database.initialize()
    user_dao = UserDao(database)

    try:
        with pytest.raises(DaoError, match="Failed to read all users") as excinfo:
            user_dao.find_all()
        assert excinfo.value.__cause__ is not None

        with pytest.raises(DaoError, match="Failed to read user by id=1"):
            user_dao.find_by_id(1)

        with pytest.raises(DaoError, match="Failed to create user"):
            user_dao.create(User("John", "john@example.com"))

        with pytest.raises(DaoError, match="Failed to delete user id=1"):
            user_dao.delete_by_id(1)

        detached = User("John", "john@example.com")
        detached.id = 1
        with pytest.raises(DaoError, match="Failed to update user id=1"):
            user_dao.update(detached)
    finally:
        database.close()


def test_out_of_range_values_are_wrapped(user_dao: UserDao) -> None:
    too_big = 10**20

    with pytest.raises(DaoError, match=f"Failed to read user by id={too_big}"):
        user_dao.find_by_id(too_big)

    with pytest.raises(DaoError, match=f"Failed to delete user id={too_big}"):
        user_dao.delete_by_id(too_big)

    with pytest.raises(DaoError, match="Failed to create user"):
        user_dao.create(User("John", "john@example.com", too_big))

    assert user_dao.find_all() == []


def test_delete_leaves_other_users(user_dao: UserDao) -> None:
    keep = user_dao.create(User("Keep", "keep@example.com"))

    assert user_dao.delete_by_id(keep.id + 1) is False
    assert [u.id for u in user_dao.find_all()] == [keep.id]
