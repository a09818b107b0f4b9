"""
Configuration settings for the subquery demo.

Uses Pydantic Settings to load environment variables for the selected query
engine, connection parameters, timeouts, verification tolerance and logging.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Query engine
    dialect: str = Field("sqlite", alias="DEMO_DIALECT")
    sqlite_path: str = Field(":memory:", alias="SQLITE_PATH")

    # PostgreSQL
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("subquery_demo", alias="DB_NAME")
    db_statement_timeout_ms: int = Field(30_000, ge=0, alias="DB_STATEMENT_TIMEOUT_MS")

    # Run
    run_timeout_seconds: Optional[float] = Field(None, ge=0, alias="RUN_TIMEOUT_SECONDS")
    verify_tolerance: float = Field(1e-6, ge=0, alias="VERIFY_TOLERANCE")

    # Logging
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
