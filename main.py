"""Command-line interface for the user service."""

from __future__ import annotations
import argparse
import logging
import sys
from typing import Sequence

try:
    import sqlalchemy  # noqa: F401
except ImportError as exc:  # pragma: no cover - exercised in environments missing deps
    raise SystemExit(
        "The 'SQLAlchemy' package is required. Execute `pip install -e .` "
        "from the project root to install dependencies."
    ) from exc

from sqlalchemy.exc import SQLAlchemyError

from app.config import load_service_config, open_database
from app.dao import DaoError, UserDao
from app.service import UserService

logger = logging.getLogger("userservice.main")

# Ids are 64-bit and ages 32-bit signed integers in the store.
_ID_BITS = 64
_AGE_BITS = 32


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="User service console")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the YAML configuration file (default: USER_SERVICE_CONFIG or config/database.yaml)",
    )
    parser.add_argument(
        "--db-url",
        default=None,
        help="SQLAlchemy database URL, overriding the configuration file",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )
    subparsers = parser.add_subparsers(dest="command")
    parser.set_defaults(command="console")

    subparsers.add_parser("console", help="Launch the interactive user console")
    subparsers.add_parser("init-db", help="Create the users table and exit")

    args_list = list(argv) if argv is not None else sys.argv[1:]
    return parser.parse_args(args_list)


def _parse_number(text: str, bits: int) -> int:
    """Parse a signed integer, rejecting values the column cannot hold."""
    value = int(text)
    limit = 1 << (bits - 1)
    if not -limit <= value < limit:
        raise ValueError(f"{text!r} does not fit in {bits} bits")
    return value


def _print_menu() -> None:
    print("\n=== USER SERVICE ===")
    print("1. Create user")
    print("2. Read user by id")
    print("3. Read all users")
    print("4. Update user")
    print("5. Delete user")
    print("0. Exit")


def _run_console(service: UserService) -> None:
    """Drive the CRUD menu until the operator exits or input ends."""

    try:
        while True:
            _print_menu()
            choice = input("Select: ").strip()

            if choice == "1":
                _create_user(service)
            elif choice == "2":
                _read_user(service)
            elif choice == "3":
                _read_all_users(service)
            elif choice == "4":
                _update_user(service)
            elif choice == "5":
                _delete_user(service)
            elif choice == "0":
                print("Bye!")
                return
            else:
                print("Unknown option. Try again.")
    except (EOFError, KeyboardInterrupt):
        print("\nExiting user console.")


def _create_user(service: UserService) -> None:
    name = input("Name: ").strip()
    email = input("Email: ").strip()
    age_text = input("Age (empty if unknown): ").strip()
    try:
        age = _parse_number(age_text, _AGE_BITS) if age_text else None
    except ValueError:
        print("Age must be a number.")
        return

    try:
        created = service.create_user(name, email, age)
    except ValueError as exc:
        print(f"Invalid input: {exc}")
        return
    except DaoError as exc:
        print(f"Create failed: {exc}")
        return

    print(f"Created: {created}")


def _read_user(service: UserService) -> None:
    try:
        user_id = _parse_number(input("ID: ").strip(), _ID_BITS)
    except ValueError:
        print("ID must be a number.")
        return

    try:
        user = service.get_user_by_id(user_id)
    except ValueError as exc:
        print(f"Invalid input: {exc}")
        return
    except DaoError as exc:
        print(f"Read failed: {exc}")
        return

    print(user if user is not None else "Not found")


def _read_all_users(service: UserService) -> None:
    try:
        users = service.get_all_users()
    except DaoError as exc:
        print(f"Read all failed: {exc}")
        return

    if not users:
        print("No users yet.")
        return
    for user in users:
        print(user)


def _update_user(service: UserService) -> None:
    try:
        user_id = _parse_number(input("ID to update: ").strip(), _ID_BITS)
    except ValueError:
        print("Age/ID must be a number.")
        return

    try:
        existing = service.get_user_by_id(user_id)
    except ValueError as exc:
        print(f"Invalid input: {exc}")
        return
    except DaoError as exc:
        print(f"Update failed: {exc}")
        return

    if existing is None:
        print("User not found.")
        return

    name = input(f"New name (enter to keep '{existing.name}'): ").strip()
    email = input(f"New email (enter to keep '{existing.email}'): ").strip()
    age_text = input(f"New age (enter to keep {existing.age}): ").strip()
    try:
        age = _parse_number(age_text, _AGE_BITS) if age_text else None
    except ValueError:
        print("Age/ID must be a number.")
        return

    try:
        updated = service.update_user(user_id, name, email, age)
    except ValueError as exc:
        print(f"Invalid input: {exc}")
        return
    except DaoError as exc:
        print(f"Update failed: {exc}")
        return

    print(f"Updated: {updated}")


def _delete_user(service: UserService) -> None:
    try:
        user_id = _parse_number(input("ID to delete: ").strip(), _ID_BITS)
    except ValueError:
        print("ID must be a number.")
        return

    try:
        deleted = service.delete_user(user_id)
    except ValueError as exc:
        print(f"Invalid input: {exc}")
        return
    except DaoError as exc:
        print(f"Delete failed: {exc}")
        return

    print("Deleted." if deleted else "User not found.")


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    args = _parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    try:
        config = load_service_config(args.config, args.db_url)
        database = open_database(config)
    except (ValueError, OSError, ImportError, SQLAlchemyError):
        logger.exception("Failed to initialise the database")
        return 1

    try:
        if args.command == "init-db":
            print("Database initialisation complete.")
            return 0

        logger.info("User Service started")
        _run_console(UserService(UserDao(database)))
        logger.info("User Service stopped")
    finally:
        database.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
