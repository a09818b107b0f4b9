"""
Runner: loads the fixture, executes every scenario, verifies and reports.

Usage (example from CLI):
    from subquery_demo.infrastructure import connect
    from subquery_demo.runner import run_demo

    with connect("sqlite") as conn:
        report = run_demo(conn)
    print(report.exit_code)

A run walks the state machine

    NotStarted -> SchemaLoaded -> (ScenarioRunning -> ScenarioVerified)* -> Completed

or ends in Aborted when the schema load fails. Scenarios run one at a time in
registry order; one scenario failing never stops the next one.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Sequence

from pydantic import BaseModel, Field, field_serializer

from subquery_demo import executor, schema
from subquery_demo.config import get_settings
from subquery_demo.domain import SEED_FIXTURE, Fixture
from subquery_demo.errors import (
    EngineError,
    IntegrityError,
    QueryError,
    RunTimeoutError,
    SchemaError,
)
from subquery_demo.infrastructure.db_factory import QueryInterface
from subquery_demo.scenarios import SCENARIOS, Scenario
from subquery_demo.utils.logging import get_logger
from subquery_demo.verifier import verify

log = get_logger(__name__)


class RunState(str, Enum):
    NOT_STARTED = "NotStarted"
    SCHEMA_LOADED = "SchemaLoaded"
    SCENARIO_RUNNING = "ScenarioRunning"
    SCENARIO_VERIFIED = "ScenarioVerified"
    COMPLETED = "Completed"
    ABORTED = "Aborted"


_TRANSITIONS: Dict[RunState, FrozenSet[RunState]] = {
    RunState.NOT_STARTED: frozenset({RunState.SCHEMA_LOADED, RunState.ABORTED}),
    RunState.SCHEMA_LOADED: frozenset({RunState.SCENARIO_RUNNING, RunState.COMPLETED}),
    RunState.SCENARIO_RUNNING: frozenset({RunState.SCENARIO_VERIFIED}),
    RunState.SCENARIO_VERIFIED: frozenset({RunState.SCENARIO_RUNNING, RunState.COMPLETED}),
    RunState.COMPLETED: frozenset(),
    RunState.ABORTED: frozenset(),
}


class ScenarioStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"
    SKIPPED = "skipped"


class ScenarioOutcome(BaseModel):
    """Result of one scenario, as it appears in the report."""

    name: str
    pattern: str = ""
    status: ScenarioStatus
    expected_rows: List[List[Any]] = Field(default_factory=list)
    actual_rows: List[List[Any]] = Field(default_factory=list)
    missing_rows: List[List[Any]] = Field(default_factory=list)
    extra_rows: List[List[Any]] = Field(default_factory=list)
    detail: str = ""
    duration_seconds: float = 0.0

    @field_serializer("expected_rows", "actual_rows", "missing_rows", "extra_rows", when_used="json")
    def _json_rows(self, rows: List[List[Any]]) -> List[List[Any]]:
        # Engines return numerics as int, float or Decimal; JSON gets numbers.
        return [[float(v) if isinstance(v, Decimal) else v for v in row] for row in rows]


class RunReport(BaseModel):
    """Machine-readable summary of a full run."""

    dialect: str
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    state: RunState = RunState.NOT_STARTED
    history: List[RunState] = Field(default_factory=lambda: [RunState.NOT_STARTED])
    outcomes: List[ScenarioOutcome] = Field(default_factory=list)
    timed_out: bool = False
    fatal_error: Optional[str] = None
    checksum_before: Optional[str] = None
    checksum_after: Optional[str] = None

    def transition(self, new_state: RunState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal run transition {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.history.append(new_state)

    def count(self, status: ScenarioStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)

    @property
    def data_unchanged(self) -> Optional[bool]:
        if self.checksum_before is None or self.checksum_after is None:
            return None
        return self.checksum_before == self.checksum_after

    @property
    def all_passed(self) -> bool:
        return (
            self.state is RunState.COMPLETED
            and bool(self.outcomes)
            and all(o.status is ScenarioStatus.PASSED for o in self.outcomes)
        )

    @property
    def exit_code(self) -> int:
        """0 when every scenario passed, 2 when the schema load failed, 1 otherwise."""
        if self.state is RunState.ABORTED:
            return 2
        return 0 if self.all_passed else 1

    def summary(self) -> Dict[str, Any]:
        return {
            "total": len(self.outcomes),
            "passed": self.count(ScenarioStatus.PASSED),
            "failed": self.count(ScenarioStatus.FAILED),
            "error": self.count(ScenarioStatus.ERROR),
            "skipped": self.count(ScenarioStatus.SKIPPED),
            "data_unchanged": self.data_unchanged,
            "exit_code": self.exit_code,
        }


def _rows(rows: Sequence[Sequence[Any]]) -> List[List[Any]]:
    return [list(row) for row in rows]


def _skipped(scenario: Scenario, reason: str) -> ScenarioOutcome:
    return ScenarioOutcome(
        name=scenario.name,
        pattern=scenario.pattern,
        status=ScenarioStatus.SKIPPED,
        expected_rows=_rows(scenario.expected_rows),
        detail=reason,
    )


def _execute_scenario(
    connection: QueryInterface,
    scenario: Scenario,
    tolerance: float,
    clock: Callable[[], float],
) -> ScenarioOutcome:
    log.info(f"[SCENARIO START] {scenario.name}", extra={"scenario": scenario.name})
    started = clock()
    outcome = ScenarioOutcome(
        name=scenario.name,
        pattern=scenario.pattern,
        status=ScenarioStatus.ERROR,
        expected_rows=_rows(scenario.expected_rows),
    )
    try:
        actual = executor.run(connection, scenario)
    except QueryError as exc:
        log.exception(f"[SCENARIO ERROR] {scenario.name}", extra={"scenario": scenario.name})
        outcome.detail = exc.engine_message
        outcome.duration_seconds = clock() - started
        return outcome

    verification = verify(
        actual, scenario.expected_rows, ordered=scenario.ordered, tolerance=tolerance
    )
    outcome.actual_rows = _rows(actual)
    outcome.missing_rows = _rows(verification.missing)
    outcome.extra_rows = _rows(verification.extra)
    outcome.detail = verification.diff
    outcome.duration_seconds = clock() - started
    if verification.passed:
        outcome.status = ScenarioStatus.PASSED
        log.info(
            f"[SCENARIO PASSED] {scenario.name}",
            extra={"scenario": scenario.name, "rows": len(actual)},
        )
    else:
        outcome.status = ScenarioStatus.FAILED
        log.warning(
            f"[SCENARIO FAILED] {scenario.name}",
            extra={"scenario": scenario.name, "diff": verification.diff},
        )
    return outcome


def run_demo(
    connection: QueryInterface,
    scenarios: Optional[Sequence[Scenario]] = None,
    *,
    fixture: Fixture = SEED_FIXTURE,
    tolerance: Optional[float] = None,
    run_timeout_seconds: Optional[float] = None,
    teardown: bool = False,
    clock: Callable[[], float] = time.perf_counter,
) -> RunReport:
    """
    Load the fixture and run every scenario against it.

    Parameters
    ----------
    connection : QueryInterface
        Exclusively owned by this run; not closed here.
    scenarios : sequence of Scenario | None
        Scenarios in execution order. Defaults to the full registry.
    fixture : Fixture
        Dataset to load. Defaults to the tutorial seed data.
    tolerance : float | None
        Numeric tolerance for verification. Defaults to settings.verify_tolerance.
    run_timeout_seconds : float | None
        Overall bound, measured from the start of the run. Scenarios not
        started in time are reported as skipped. Defaults to
        settings.run_timeout_seconds; None disables the bound.
    teardown : bool
        Drop the tables once the run is over.
    clock : callable
        Monotonic time source, in seconds.

    Returns
    -------
    RunReport
        Never raises for scenario-level failures; a failed schema load yields
        a report in the Aborted state.
    """
    settings = get_settings()
    selected = list(scenarios) if scenarios is not None else list(SCENARIOS)
    effective_tolerance = settings.verify_tolerance if tolerance is None else tolerance
    timeout = settings.run_timeout_seconds if run_timeout_seconds is None else run_timeout_seconds
    started = clock()
    deadline = started + timeout if timeout is not None else None

    report = RunReport(dialect=connection.dialect)
    log.info(
        "[RUN START]",
        extra={"dialect": connection.dialect, "scenarios": len(selected), "timeout": timeout},
    )

    try:
        schema.load(connection, fixture)
        checksum_before = schema.checksum(connection)
    except (SchemaError, IntegrityError, EngineError) as exc:
        log.exception("[RUN ABORTED] Schema load failed", extra={"dialect": connection.dialect})
        report.fatal_error = str(exc)
        report.transition(RunState.ABORTED)
        return report
    report.transition(RunState.SCHEMA_LOADED)
    report.checksum_before = checksum_before

    try:
        for index, scenario in enumerate(selected):
            if deadline is not None and clock() >= deadline:
                error = RunTimeoutError(
                    f"Run exceeded {timeout}s; {len(selected) - index} scenario(s) not started"
                )
                reason = f"{type(error).__name__}: {error}"
                log.warning(f"[RUN TIMEOUT] {reason}", extra={"timeout": timeout})
                report.timed_out = True
                report.outcomes.extend(_skipped(s, reason) for s in selected[index:])
                break
            report.transition(RunState.SCENARIO_RUNNING)
            report.outcomes.append(
                _execute_scenario(connection, scenario, effective_tolerance, clock)
            )
            report.transition(RunState.SCENARIO_VERIFIED)

        report.checksum_after = schema.checksum(connection)
        if not report.data_unchanged:
            log.error("Scenario run modified the dataset", extra={"dialect": connection.dialect})
    finally:
        if teardown:
            schema.drop(connection)

    report.transition(RunState.COMPLETED)
    log.info(
        "[RUN COMPLETE]",
        extra={**report.summary(), "duration_seconds": round(clock() - started, 3)},
    )
    return report


__all__ = ["RunReport", "RunState", "ScenarioOutcome", "ScenarioStatus", "run_demo"]
