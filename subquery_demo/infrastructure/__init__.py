"""
Infrastructure package for the subquery demo.

Centralizes database connectivity concerns (dialect adapters, connection
retry). Keep this layer focused on I/O and resource management, decoupled
from loader/executor logic.
"""

from subquery_demo.infrastructure.db_factory import (
    PostgresQueryInterface,
    QueryInterface,
    SqliteQueryInterface,
    available_dialects,
    build_dsn,
    connect,
)

__all__ = [
    "PostgresQueryInterface",
    "QueryInterface",
    "SqliteQueryInterface",
    "available_dialects",
    "build_dsn",
    "connect",
]
