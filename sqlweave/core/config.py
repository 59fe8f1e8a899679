"""
Settings for sqlweave, read from ``SQLWEAVE_*`` environment variables or a ``.env`` file.
"""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SQLWEAVE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Named templates: load_sql("users/active") -> <SQL_PATH>/users/active<SQL_EXTENSION>
    SQL_PATH: Path = Path("sql")
    SQL_EXTENSION: str = ".sql"

    # Adapter autodetection (SQLAlchemy URL, e.g. "postgresql+psycopg://u:p@host/db")
    DATABASE_URL: str | None = None

    # DB-API connection pools
    DB_POOL_SIZE: int = 5
    DB_POOL_MAX_AGE_SEC: float = 600.0
    DB_CONNECT_TIMEOUT: int = 10
    DB_STATEMENT_TIMEOUT: float | None = None

    LOG_SQL: bool = False

    @field_validator("SQL_EXTENSION", mode="before")
    @classmethod
    def _dotted_extension(cls, v: object) -> object:
        if isinstance(v, str) and v and not v.startswith("."):
            return f".{v}"
        return v


settings = Settings()
