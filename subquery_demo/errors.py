"""
Error taxonomy for the subquery demo.

Fatal to a run: SchemaError, IntegrityError (no scenario can run without the
fixture). Scoped to one scenario: QueryError, VerificationFailure.
RunTimeoutError halts the remaining scenarios, which are reported as skipped.

Adapters raise EngineError/EngineIntegrityError so the loader and executor
never depend on a specific driver's exception classes.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence, Tuple


class DemoError(Exception):
    """Base class for every error raised by the demo."""


class EngineError(DemoError):
    """The query engine rejected or failed a statement."""

    def __init__(self, message: str, sql: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.sql = sql


class EngineIntegrityError(EngineError):
    """The query engine reported a constraint violation."""


class SchemaError(DemoError):
    """The engine rejected a statement while (re)building a table."""

    def __init__(self, table: str, message: str) -> None:
        super().__init__(f"Schema load failed at table '{table}': {message}")
        self.table = table
        self.engine_message = message


class IntegrityError(DemoError):
    """A seed row violates the referential invariant."""


class QueryError(DemoError):
    """A scenario's query was rejected or failed at execution time."""

    def __init__(self, scenario: str, message: str) -> None:
        super().__init__(f"Scenario '{scenario}' failed: {message}")
        self.scenario = scenario
        self.engine_message = message


class VerificationFailure(DemoError):
    """A query succeeded but its rows differ from the expected rows."""

    def __init__(
        self,
        missing: Sequence[Tuple[Any, ...]],
        extra: Sequence[Tuple[Any, ...]],
        diff: str,
    ) -> None:
        super().__init__(diff)
        self.missing = list(missing)
        self.extra = list(extra)
        self.diff = diff


class RunTimeoutError(DemoError, TimeoutError):
    """The run exceeded its configured overall time bound."""


__all__ = [
    "DemoError",
    "EngineError",
    "EngineIntegrityError",
    "SchemaError",
    "IntegrityError",
    "QueryError",
    "VerificationFailure",
    "RunTimeoutError",
]
