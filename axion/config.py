"""
Configuration settings for Axion.

Uses Pydantic Settings to load environment variables for the database
connection, logging, and the application base path. Variable names follow the
host framework's `.env` conventions (DB_CONNECTION, DB_DATABASE, ...).
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PORTS = {"mysql": 3306, "pgsql": 5432}

# Used when DB_DATABASE is unset: a file path for sqlite, a database name otherwise.
DEFAULT_DATABASES = {
    "sqlite": "axion/database/database.sqlite",
    "mysql": "axion",
    "pgsql": "axion",
}


class Settings(BaseSettings):
    # Database
    db_connection: str = Field("sqlite", alias="DB_CONNECTION")
    db_database: Optional[str] = Field(None, alias="DB_DATABASE")
    db_host: str = Field("127.0.0.1", alias="DB_HOST")
    db_port: Optional[int] = Field(None, alias="DB_PORT")
    db_username: str = Field("root", alias="DB_USERNAME")
    db_password: str = Field("", alias="DB_PASSWORD")
    db_statement_timeout_ms: int = Field(0, alias="DB_STATEMENT_TIMEOUT_MS")
    db_connect_attempts: int = Field(3, alias="DB_CONNECT_ATTEMPTS")

    # Application
    app_base_path: Path = Field(default_factory=Path.cwd, alias="APP_BASE_PATH")
    app_env: Literal["development", "testing", "production"] = Field(
        "development", alias="APP_ENV"
    )
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def driver(self) -> str:
        return self.db_connection.strip().lower()

    @property
    def resolved_port(self) -> Optional[int]:
        """Explicit DB_PORT, or the driver's well-known port (None for sqlite)."""
        if self.db_port is not None:
            return self.db_port
        return DEFAULT_PORTS.get(self.driver)

    @property
    def database(self) -> str:
        """Explicit DB_DATABASE, or the driver's default database."""
        if self.db_database:
            return self.db_database
        return DEFAULT_DATABASES.get(self.driver, DEFAULT_DATABASES["sqlite"])

    def sqlite_path(self) -> Path:
        """
        Resolve DB_DATABASE against the application base path.

        Absolute paths are returned unchanged.
        """
        path = Path(self.database).expanduser()
        if path.is_absolute():
            return path
        return Path(self.app_base_path) / path


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["DEFAULT_DATABASES", "DEFAULT_PORTS", "Settings", "get_settings"]
