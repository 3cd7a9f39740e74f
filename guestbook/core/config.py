"""
Runtime settings resolved once from the environment.

Store parameters mirror the classic libpq-style variables:
- DB_HOST, DB_PORT, DB_USER, DB_PASS, DB_NAME
- DATABASE_URL (optional) overrides all of the above when set
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


@dataclass(frozen=True)
class Settings:
    db_host: str = "localhost"
    db_port: int = 5432
    db_user: str = "postgres"
    db_password: str = "password"
    db_name: str = "mydb"
    database_url: str = ""

    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
    db_command_timeout_s: float = 30.0

    connect_attempts: int = 5
    connect_backoff_s: float = 2.0

    backend_url: str = "http://localhost:9191"
    host: str = "0.0.0.0"
    port: int = 9191
    log_level: str = "INFO"

    def connect_kwargs(self) -> dict[str, Any]:
        """
        Keyword arguments for `asyncpg.create_pool`.
        """
        kwargs: dict[str, Any] = {
            "min_size": self.db_pool_min_size,
            "max_size": max(self.db_pool_max_size, self.db_pool_min_size),
            "command_timeout": self.db_command_timeout_s,
        }
        if self.database_url:
            kwargs["dsn"] = _sanitize_database_url(self.database_url)
            return kwargs

        kwargs.update(
            host=self.db_host,
            port=self.db_port,
            user=self.db_user,
            password=self.db_password,
            database=self.db_name,
            ssl=False,
        )
        return kwargs

    def describe_store(self) -> str:
        # Never include the credential.
        if self.database_url:
            parts = urlsplit(self.database_url)
            host = parts.hostname or "?"
            port = parts.port or 5432
            user = parts.username or "?"
            return f"{user}@{host}:{port}{parts.path}"
        return f"{self.db_user}@{self.db_host}:{self.db_port}/{self.db_name}"


def load_settings() -> Settings:
    return Settings(
        db_host=_env_str("DB_HOST", "localhost"),
        db_port=_env_int("DB_PORT", 5432),
        db_user=_env_str("DB_USER", "postgres"),
        db_password=os.environ.get("DB_PASS", "password"),
        db_name=_env_str("DB_NAME", "mydb"),
        database_url=os.environ.get("DATABASE_URL", "").strip(),
        db_pool_min_size=_env_int("DB_POOL_MIN_SIZE", 1),
        db_pool_max_size=_env_int("DB_POOL_MAX_SIZE", 10),
        db_command_timeout_s=_env_float("DB_COMMAND_TIMEOUT_S", 30.0),
        connect_attempts=_env_int("DB_CONNECT_ATTEMPTS", 5),
        connect_backoff_s=_env_float("DB_CONNECT_BACKOFF_S", 2.0),
        backend_url=_env_str("BACKEND_URL", "http://localhost:9191"),
        host=_env_str("HOST", "0.0.0.0"),
        port=_env_int("PORT", 9191),
        log_level=_env_str("LOG_LEVEL", "INFO").upper(),
    )
