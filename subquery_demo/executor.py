"""
Scenario executor: runs one scenario's query and materializes its rows.

The query runs under the adapter's read-only guard, so a scenario that tries
to write fails instead of mutating the fixture.
"""

from __future__ import annotations

from typing import Any, List, Tuple

from subquery_demo.errors import EngineError, QueryError
from subquery_demo.infrastructure.db_factory import QueryInterface
from subquery_demo.scenarios import Scenario
from subquery_demo.utils.logging import get_logger

log = get_logger(__name__)


def run(connection: QueryInterface, scenario: Scenario) -> List[Tuple[Any, ...]]:
    """
    Submit `scenario.query` and return every row as a tuple in column order.

    Raises
    ------
    QueryError
        Wrapping the engine's message (syntax error, missing table, statement
        timeout, write attempt).
    """
    log.debug("Executing scenario query", extra={"scenario": scenario.name})
    try:
        with connection.read_only():
            rows = connection.execute(scenario.query)
    except EngineError as exc:
        raise QueryError(scenario.name, exc.message) from exc
    return [tuple(row.values()) for row in rows]


__all__ = ["run"]
