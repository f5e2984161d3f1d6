"""Configuration management for the user service database connection."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml
from sqlalchemy.engine import make_url

from .database import SCHEMA_ACTIONS, Database, resolve_database_url


def _env_bool(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() not in {"0", "false", "no", "off"}


def _resolve_sqlite_path(url: str, base_path: Path | None) -> str:
    parsed = make_url(url)
    database = parsed.database
    if (
        base_path is None
        or parsed.get_backend_name() != "sqlite"
        or not database
        or database == ":memory:"
    ):
        return url
    raw_path = Path(database).expanduser()
    if raw_path.is_absolute():
        return url
    resolved = (base_path / raw_path).resolve(strict=False)
    return parsed.set(database=str(resolved)).render_as_string(hide_password=False)


@dataclass(frozen=True)
class DatabaseConfig:
    """Connection settings for the relational store."""

    url: str
    username: Optional[str] = None
    password: Optional[str] = None
    echo: bool = False
    schema_action: str = "create"

    def __post_init__(self) -> None:
        if self.schema_action not in SCHEMA_ACTIONS:
            raise ValueError(
                f"Invalid schema_action {self.schema_action!r}; expected one of {', '.join(SCHEMA_ACTIONS)}"
            )

    @staticmethod
    def from_dict(data: Mapping[str, object], base_path: Path | None = None) -> "DatabaseConfig":
        """Create a :class:`DatabaseConfig` from raw dictionary data.

        Relative SQLite file paths are resolved against ``base_path`` when given.
        """
        url = data.get("url")
        return DatabaseConfig(
            url=_resolve_sqlite_path(str(url), base_path) if url else resolve_database_url(None),
            username=str(data["username"]) if data.get("username") is not None else None,
            password=str(data["password"]) if data.get("password") is not None else None,
            echo=bool(data.get("echo", False)),
            schema_action=str(data.get("schema_action", "create")),
        )

    def with_env_overrides(self, environ: Optional[Mapping[str, str]] = None) -> "DatabaseConfig":
        env = os.environ if environ is None else environ
        return replace(
            self,
            url=env.get("USER_SERVICE_DB_URL") or self.url,
            username=env.get("USER_SERVICE_DB_USER") or self.username,
            password=env.get("USER_SERVICE_DB_PASSWORD") or self.password,
            echo=_env_bool(env.get("USER_SERVICE_DB_ECHO"), self.echo),
            schema_action=env.get("USER_SERVICE_DB_SCHEMA") or self.schema_action,
        )

    def connection_url(self) -> str:
        """Return the URL with any separately configured credentials applied."""
        parsed = make_url(self.url)
        credentials: Dict[str, str] = {}
        if self.username is not None:
            credentials["username"] = self.username
        if self.password is not None:
            credentials["password"] = self.password
        if credentials:
            parsed = parsed.set(**credentials)
        return parsed.render_as_string(hide_password=False)


def load_database_config(config_path: Path) -> DatabaseConfig:
    """Load database settings from a YAML file, falling back to defaults."""
    if not config_path.exists():
        return DatabaseConfig(url=resolve_database_url(None))

    try:
        with config_path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ValueError(f"Could not read configuration file {config_path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ValueError("Configuration file must contain a mapping")
    section = raw.get("database") or {}
    if not isinstance(section, dict):
        raise ValueError("The 'database' key must hold a mapping of connection settings")
    return DatabaseConfig.from_dict(section, base_path=config_path.parent)


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "database.yaml").resolve(strict=False)
    return candidate


def load_service_config(config_arg: Optional[str] = None, db_url: Optional[str] = None) -> DatabaseConfig:
    """Resolve, load and override the configuration used by the CLI entry points."""
    config_path = resolve_config_path(config_arg or os.getenv("USER_SERVICE_CONFIG"))
    config = load_database_config(config_path).with_env_overrides()
    if db_url:
        config = replace(config, url=db_url)
    return config


def open_database(config: DatabaseConfig) -> Database:
    """Build a :class:`Database` from ``config`` and apply its schema action."""
    database = Database(
        config.connection_url(),
        echo=config.echo,
        schema_action=config.schema_action,
    )
    try:
        database.initialize()
    except Exception:
        database.engine.dispose()
        raise
    return database


__all__ = [
    "DatabaseConfig",
    "load_database_config",
    "load_service_config",
    "open_database",
    "resolve_config_path",
]
