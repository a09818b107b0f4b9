"""
Schema loader: owns the lifecycle of the tutorial dataset.

`load` drops, creates and populates the tables inside one transaction, so a
failed load never leaves a partially populated database behind. `drop` is the
teardown counterpart and `checksum` fingerprints table contents so callers can
prove a scenario run left the data untouched.

`render_script` emits the whole tutorial as a standalone SQL script for people
who want to paste it into a SQL console.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from subquery_demo.domain import SEED_FIXTURE, Fixture
from subquery_demo.errors import EngineError, EngineIntegrityError, IntegrityError, SchemaError
from subquery_demo.infrastructure.db_factory import QueryInterface
from subquery_demo.scenarios import SCENARIOS, Scenario
from subquery_demo.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class TableDefinition:
    """A table's name, its DDL and the columns the fixture populates."""

    name: str
    ddl: str
    columns: Tuple[str, ...] = ()


# Creation order; dropped in reverse so dependents go first.
TABLES: Tuple[TableDefinition, ...] = (
    TableDefinition(
        name="employees",
        ddl="""
CREATE TABLE employees (
    employee_id INT PRIMARY KEY,
    name VARCHAR(100),
    salary DECIMAL(10, 2),
    department VARCHAR(50)
)""".strip(),
        columns=("employee_id", "name", "salary", "department"),
    ),
    TableDefinition(
        name="products",
        ddl="""
CREATE TABLE products (
    product_id INT PRIMARY KEY,
    name VARCHAR(100),
    category VARCHAR(50),
    price DECIMAL(10, 2)
)""".strip(),
        columns=("product_id", "name", "category", "price"),
    ),
    TableDefinition(
        name="orders",
        ddl="""
CREATE TABLE orders (
    order_id INT PRIMARY KEY,
    employee_id INT,
    total DECIMAL(10, 2),
    order_date DATE,
    FOREIGN KEY (employee_id) REFERENCES employees (employee_id)
)""".strip(),
        columns=("order_id", "employee_id", "total", "order_date"),
    ),
)

# Left behind by older versions of the tutorial script; never created.
LEGACY_TABLES: Tuple[str, ...] = ("order_details",)


def _fixture_rows(fixture: Fixture, table: str) -> List[Tuple[Any, ...]]:
    if table == "employees":
        return [(e.employee_id, e.name, e.salary, e.department) for e in fixture.employees]
    if table == "products":
        return [(p.product_id, p.name, p.category, p.price) for p in fixture.products]
    if table == "orders":
        return [(o.order_id, o.employee_id, o.total, o.order_date) for o in fixture.orders]
    return []


def _drop_statements(tables: Sequence[TableDefinition]) -> List[Tuple[str, str]]:
    names = list(LEGACY_TABLES) + [t.name for t in reversed(tables)]
    return [(name, f"DROP TABLE IF EXISTS {name}") for name in names]


def _execute_for(connection: QueryInterface, table: str, sql: str, params: Any = None) -> None:
    try:
        connection.execute(sql, params)
    except EngineIntegrityError:
        raise
    except EngineError as exc:
        log.error(
            "[SCHEMA FAILED] Statement rejected",
            extra={"table": table, "error": exc.message},
        )
        raise SchemaError(table, exc.message) from exc


def _insert_statement(table: TableDefinition, placeholder: str) -> str:
    marks = ", ".join([placeholder] * len(table.columns))
    return f"INSERT INTO {table.name} ({', '.join(table.columns)}) VALUES ({marks})"


def _check_references(fixture: Fixture) -> None:
    dangling = fixture.dangling_orders()
    if dangling:
        details = ", ".join(f"order {o.order_id} -> employee {o.employee_id}" for o in dangling)
        raise IntegrityError(f"Orders reference nonexistent employees: {details}")


def load(
    connection: QueryInterface,
    fixture: Fixture = SEED_FIXTURE,
    tables: Sequence[TableDefinition] = TABLES,
) -> None:
    """
    Create the tables and insert the fixture rows, replacing any previous copy.

    Parameters
    ----------
    connection : QueryInterface
        Open adapter; the whole load runs in one of its transactions.
    fixture : Fixture
        Rows to insert. Defaults to the tutorial's seed data.
    tables : sequence of TableDefinition
        Tables to (re)create, in dependency order.

    Raises
    ------
    IntegrityError
        If an order references a nonexistent employee. Nothing is written.
    SchemaError
        If the engine rejects a DROP, CREATE TABLE or INSERT statement for
        any reason other than a constraint violation. The transaction is
        rolled back.
    """
    _check_references(fixture)

    with connection.transaction():
        for name, statement in _drop_statements(tables):
            _execute_for(connection, name, statement)

        for table in tables:
            _execute_for(connection, table.name, table.ddl)

        for table in tables:
            rows = _fixture_rows(fixture, table.name)
            if not rows:
                continue
            sql = _insert_statement(table, connection.placeholder)
            for row in rows:
                try:
                    _execute_for(connection, table.name, sql, row)
                except EngineIntegrityError as exc:
                    raise IntegrityError(
                        f"Seed row {row!r} rejected by {table.name}: {exc.message}"
                    ) from exc
            log.debug("Seeded table", extra={"table": table.name, "rows": len(rows)})

    log.info(
        "[SCHEMA LOADED]",
        extra={
            "dialect": connection.dialect,
            "employees": len(fixture.employees),
            "products": len(fixture.products),
            "orders": len(fixture.orders),
        },
    )


def drop(connection: QueryInterface, tables: Sequence[TableDefinition] = TABLES) -> None:
    """Teardown: drop every tutorial table (dependents first)."""
    with connection.transaction():
        for name, statement in _drop_statements(tables):
            _execute_for(connection, name, statement)
    log.info("[SCHEMA DROPPED]", extra={"dialect": connection.dialect})


def _canonical(value: Any) -> str:
    # Engines disagree on numeric types (8000 vs 8000.00 vs 8000.0).
    if isinstance(value, bool):
        return repr(value)
    if isinstance(value, (int, float, Decimal)):
        return format(Decimal(str(value)).normalize(), "f")
    if isinstance(value, date):
        return value.isoformat()
    return repr(value)


def checksum(connection: QueryInterface, tables: Sequence[TableDefinition] = TABLES) -> str:
    """
    SHA-256 fingerprint of every table's contents, independent of row order.
    """
    digest = hashlib.sha256()
    for table in tables:
        rows = connection.execute(f"SELECT * FROM {table.name}")
        lines = sorted("|".join(_canonical(v) for v in row.values()) for row in rows)
        digest.update(table.name.encode("utf-8"))
        for line in lines:
            digest.update(b"\n")
            digest.update(line.encode("utf-8"))
        digest.update(b"\x00")
    return digest.hexdigest()


def _literal(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, date):
        return f"'{value.isoformat()}'"
    return "'" + str(value).replace("'", "''") + "'"


def _comment_block(lines: Iterable[str]) -> List[str]:
    return [f"-- {line}".rstrip() for line in lines]


def render_script(
    dialect: str = "sqlite",
    fixture: Fixture = SEED_FIXTURE,
    scenarios: Sequence[Scenario] = SCENARIOS,
    tables: Sequence[TableDefinition] = TABLES,
) -> str:
    """
    Render setup and every scenario as one standalone SQL script.

    The SQLite flavour starts with `PRAGMA foreign_keys = ON`; other engines
    enforce foreign keys unconditionally.
    """
    out: List[str] = _comment_block(["Subquery examples: setup"])
    if dialect == "sqlite":
        out.append("PRAGMA foreign_keys = ON;")
    out.append("")
    out.extend(f"{statement};" for _, statement in _drop_statements(tables))
    out.append("")
    for table in tables:
        out.append(f"{table.ddl};")
        out.append("")
    for table in tables:
        rows = _fixture_rows(fixture, table.name)
        if not rows:
            continue
        values = ",\n".join(f"({', '.join(_literal(v) for v in row)})" for row in rows)
        out.append(f"INSERT INTO {table.name} ({', '.join(table.columns)}) VALUES\n{values};")
        out.append("")

    for index, scenario in enumerate(scenarios, start=1):
        expected = "; ".join(", ".join(_literal(v) for v in row) for row in scenario.expected_rows)
        out.extend(
            _comment_block(
                [
                    f"Example {index}: {scenario.name} ({scenario.pattern})",
                    scenario.description,
                    f"Expected: {expected or '(no rows)'}",
                ]
            )
        )
        out.append(f"{scenario.query};")
        out.append("")

    return "\n".join(out)


__all__ = [
    "LEGACY_TABLES",
    "TABLES",
    "TableDefinition",
    "checksum",
    "drop",
    "load",
    "render_script",
]
