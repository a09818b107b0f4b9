"""
Query interface adapters for the subquery demo.

The loader and executor talk to a database only through the QueryInterface
protocol: submit SQL text, get back an ordered list of row mappings, or an
EngineError. One adapter exists per supported dialect:

- sqlite   : standard library sqlite3 (in-memory by default, used by tests)
- postgres : psycopg 3, with retry on transient connection failures (tenacity)

Adapters own their connection and are context managers; the caller that opens
one is the only user of it for the duration of a run.
"""

from __future__ import annotations

import sqlite3
import time
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import (
    Any,
    Callable,
    Dict,
    Generator,
    List,
    Optional,
    Protocol,
    Sequence,
    runtime_checkable,
)

import psycopg
from psycopg.rows import dict_row
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from subquery_demo.config import Settings, get_settings
from subquery_demo.errors import EngineError, EngineIntegrityError
from subquery_demo.utils.logging import get_logger

log = get_logger(__name__)

Row = Dict[str, Any]


@runtime_checkable
class QueryInterface(Protocol):
    """
    Common interface every dialect adapter implements.

    Attributes
    ----------
    dialect : str
        Registry name of the adapter.
    placeholder : str
        Positional parameter marker understood by the driver.
    """

    dialect: str
    placeholder: str

    def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[Row]:
        """
        Run one statement and return its rows (empty for statements without results).

        Raises
        ------
        EngineIntegrityError
            On a constraint violation.
        EngineError
            On any other engine failure (syntax, missing table, timeout).
        """
        ...

    def transaction(self) -> Any:
        """Context manager: commit on success, roll back on error."""
        ...

    def read_only(self) -> Any:
        """Context manager under which the engine refuses writes."""
        ...

    def close(self) -> None:
        ...


class _AdapterBase:
    dialect: str = ""
    placeholder: str = "?"

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:  # pragma: no cover - overridden
        raise NotImplementedError


class SqliteQueryInterface(_AdapterBase):
    """
    Adapter over the standard library sqlite3 driver.

    The connection runs in autocommit mode; transactions are opened explicitly
    by `transaction()`. Foreign keys are switched on at connect time since
    SQLite leaves them off by default.
    """

    dialect = "sqlite"
    placeholder = "?"

    def __init__(self, path: str = ":memory:", statement_timeout_ms: int = 0) -> None:
        self.path = path
        self.statement_timeout_ms = statement_timeout_ms
        self._conn = sqlite3.connect(path, isolation_level=None)
        self._conn.execute("PRAGMA foreign_keys = ON")

    @staticmethod
    def _adapt(value: Any) -> Any:
        if isinstance(value, Decimal):
            return float(value)
        if isinstance(value, date):
            return value.isoformat()
        return value

    def _arm_timeout(self) -> None:
        if not self.statement_timeout_ms:
            return
        deadline = time.monotonic() + self.statement_timeout_ms / 1000.0
        # Non-zero return interrupts the running statement.
        self._conn.set_progress_handler(lambda: int(time.monotonic() > deadline), 1000)

    def _disarm_timeout(self) -> None:
        self._conn.set_progress_handler(None, 0)

    def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[Row]:
        args = tuple(self._adapt(v) for v in params) if params else ()
        self._arm_timeout()
        try:
            cur = self._conn.execute(sql, args)
            if cur.description is None:
                return []
            columns = [col[0] for col in cur.description]
            return [dict(zip(columns, row)) for row in cur.fetchall()]
        except sqlite3.IntegrityError as exc:
            raise EngineIntegrityError(str(exc), sql=sql) from exc
        except sqlite3.Error as exc:
            raise EngineError(str(exc), sql=sql) from exc
        finally:
            self._disarm_timeout()

    @contextmanager
    def transaction(self) -> Generator["SqliteQueryInterface", None, None]:
        self.execute("BEGIN")
        try:
            yield self
        except BaseException:
            if self._conn.in_transaction:
                self._conn.execute("ROLLBACK")
            raise
        self.execute("COMMIT")

    @contextmanager
    def read_only(self) -> Generator["SqliteQueryInterface", None, None]:
        self._conn.execute("PRAGMA query_only = ON")
        try:
            yield self
        finally:
            self._conn.execute("PRAGMA query_only = OFF")

    def close(self) -> None:
        self._conn.close()


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a PostgreSQL DSN string from settings."""
    settings = settings or get_settings()
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


def apply_statement_timeout(cur: psycopg.Cursor, timeout_ms: int) -> None:
    """Bound every statement of the session; 0 disables the limit."""
    cur.execute(f"SET statement_timeout = {int(timeout_ms)}")


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def get_sync_connection(dsn: str) -> psycopg.Connection:
    """
    Acquire a dedicated synchronous connection with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection errors.

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts.
    """
    return psycopg.connect(dsn, autocommit=True, row_factory=dict_row)


class PostgresQueryInterface(_AdapterBase):
    """
    Adapter over psycopg 3.

    Autocommit by default; `transaction()` and `read_only()` map onto psycopg
    transaction blocks. The read-only block is always rolled back.
    """

    dialect = "postgres"
    placeholder = "%s"

    def __init__(
        self,
        dsn: str,
        statement_timeout_ms: int = 0,
        connection: Optional[psycopg.Connection] = None,
    ) -> None:
        self.dsn = dsn
        self.statement_timeout_ms = statement_timeout_ms
        self._conn = connection if connection is not None else get_sync_connection(dsn)
        with self._conn.cursor() as cur:
            apply_statement_timeout(cur, statement_timeout_ms)

    def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[Row]:
        try:
            with self._conn.cursor() as cur:
                cur.execute(sql, tuple(params) if params else None)
                if cur.description is None:
                    return []
                return [dict(row) for row in cur.fetchall()]
        except psycopg.IntegrityError as exc:
            raise EngineIntegrityError(str(exc).strip(), sql=sql) from exc
        except psycopg.Error as exc:
            raise EngineError(str(exc).strip(), sql=sql) from exc

    @contextmanager
    def transaction(self) -> Generator["PostgresQueryInterface", None, None]:
        with self._conn.transaction():
            yield self

    @contextmanager
    def read_only(self) -> Generator["PostgresQueryInterface", None, None]:
        with self._conn.transaction(force_rollback=True):
            self.execute("SET TRANSACTION READ ONLY")
            yield self

    def close(self) -> None:
        self._conn.close()


def _dialect_factories(settings: Settings) -> Dict[str, Callable[[], QueryInterface]]:
    """Registry of available query interface adapters."""
    return {
        "sqlite": lambda: SqliteQueryInterface(
            settings.sqlite_path, statement_timeout_ms=settings.db_statement_timeout_ms
        ),
        "postgres": lambda: PostgresQueryInterface(
            build_dsn(settings), statement_timeout_ms=settings.db_statement_timeout_ms
        ),
    }


def available_dialects() -> List[str]:
    """List available dialect names."""
    return sorted(_dialect_factories(get_settings()).keys())


def connect(dialect: Optional[str] = None, settings: Optional[Settings] = None) -> QueryInterface:
    """
    Open a query interface for the given dialect (default from settings).

    Raises
    ------
    ValueError
        If the dialect is not registered.
    EngineError
        If the database cannot be reached.
    """
    settings = settings or get_settings()
    name = dialect or settings.dialect
    factories = _dialect_factories(settings)
    if name not in factories:
        raise ValueError(f"Unknown dialect '{name}'. Available: {', '.join(sorted(factories))}")
    log.debug("Opening query interface", extra={"dialect": name})
    try:
        return factories[name]()
    except (sqlite3.Error, psycopg.Error) as exc:
        raise EngineError(f"Could not connect ({name}): {str(exc).strip()}") from exc


__all__ = [
    "QueryInterface",
    "Row",
    "SqliteQueryInterface",
    "PostgresQueryInterface",
    "apply_statement_timeout",
    "available_dialects",
    "build_dsn",
    "connect",
    "get_sync_connection",
]
