import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sqlalchemy.exc import SQLAlchemyError

from app.config import load_service_config, open_database
from app.dao import DaoError, UserDao
from app.service import UserService


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a user without the interactive console")
    parser.add_argument("name", help="Display name for the user")
    parser.add_argument("email", help="Unique email address")
    parser.add_argument("--age", type=int, default=None, help="Age in years (omit if unknown)")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the YAML configuration file (default: USER_SERVICE_CONFIG or config/database.yaml)",
    )
    parser.add_argument(
        "--db-url",
        dest="db_url",
        default=None,
        help="SQLAlchemy database URL, overriding the configuration file",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)

    database = None
    try:
        database = open_database(load_service_config(args.config, args.db_url))
        user = UserService(UserDao(database)).create_user(args.name, args.email, args.age)
    except (ValueError, OSError, ImportError, SQLAlchemyError, DaoError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        if database is not None:
            database.close()

    print(f"Created user #{user.id}: {user.name} <{user.email}>")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
