"""SQLAlchemy engine and session lifecycle for the user store."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base

logger = logging.getLogger("userservice.database")

SCHEMA_ACTIONS = ("create", "create-drop", "none")


def _ensure_directory(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def default_database_path() -> Path:
    base_dir = Path(__file__).resolve().parent.parent / "data"
    return (base_dir / "users.sqlite3").resolve(strict=False)


def resolve_database_url(env_value: Optional[str]) -> str:
    """Resolve the connection URL for the application database."""

    if env_value:
        return env_value
    return f"sqlite:///{default_database_path()}"


def _engine_options(url: str) -> dict:
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return {}

    options: dict = {"connect_args": {"check_same_thread": False}}
    database = parsed.database
    if not database or database == ":memory:":
        # Every session must see the same in-memory database.
        options["poolclass"] = StaticPool
    else:
        _ensure_directory(Path(database).expanduser())
    return options


class Database:
    """Owns the engine and hands out transactional sessions."""

    def __init__(self, url: str, *, echo: bool = False, schema_action: str = "create") -> None:
        if schema_action not in SCHEMA_ACTIONS:
            raise ValueError(
                f"Unknown schema action {schema_action!r}; expected one of {', '.join(SCHEMA_ACTIONS)}"
            )
        self._url = url
        self._schema_action = schema_action
        self._engine: Engine = create_engine(url, echo=echo, **_engine_options(url))
        self._session_factory = sessionmaker(
            bind=self._engine,
            autoflush=False,
            expire_on_commit=False,
        )

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def url(self) -> str:
        return self._engine.url.render_as_string(hide_password=True)

    def initialize(self) -> None:
        """Apply the configured schema action."""

        if self._schema_action == "none":
            logger.debug("Schema action 'none'; leaving tables untouched")
            return
        Base.metadata.create_all(bind=self._engine)
        logger.info("Database schema ready at %s", self.url)

    def open_session(self) -> Session:
        return self._session_factory()

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session that commits on success and rolls back on error."""

        db = self.open_session()
        try:
            yield db
            db.commit()
        except Exception:
            try:
                db.rollback()
            except SQLAlchemyError:  # pragma: no cover - keep the original error
                logger.debug("Rollback failed", exc_info=True)
            raise
        finally:
            db.close()

    def close(self) -> None:
        logger.info("Shutting down database engine")
        if self._schema_action == "create-drop":
            Base.metadata.drop_all(bind=self._engine)
        self._engine.dispose()


__all__ = ["Database", "SCHEMA_ACTIONS", "default_database_path", "resolve_database_url"]
