from __future__ import annotations

import itertools
from datetime import date
from decimal import Decimal

import pytest

from subquery_demo import schema
from subquery_demo.domain import SEED_FIXTURE, Fixture, Order
from subquery_demo.errors import EngineError
from subquery_demo.runner import RunReport, RunState, ScenarioStatus, run_demo
from subquery_demo.scenarios import SCENARIOS, Scenario, get_scenario

SCENARIO_COUNT = 6


def _ticking_clock(step: float = 1.0):
    counter = itertools.count()
    return lambda: next(counter) * step


def test_full_run_passes_and_walks_the_state_machine(sqlite_conn):
    report = run_demo(sqlite_conn)

    assert report.state is RunState.COMPLETED
    assert report.exit_code == 0
    assert report.count(ScenarioStatus.PASSED) == SCENARIO_COUNT
    assert [o.name for o in report.outcomes] == [s.name for s in SCENARIOS]
    assert report.history[:2] == [RunState.NOT_STARTED, RunState.SCHEMA_LOADED]
    assert report.history[2:-1] == [
        RunState.SCENARIO_RUNNING,
        RunState.SCENARIO_VERIFIED,
    ] * SCENARIO_COUNT
    assert report.history[-1] is RunState.COMPLETED


def test_run_leaves_dataset_unchanged(sqlite_conn):
    report = run_demo(sqlite_conn)

    assert report.checksum_before is not None
    assert report.data_unchanged is True


def test_failing_scenario_does_not_stop_the_next_one(sqlite_conn):
    wrong = Scenario(
        name="WrongExpectation",
        pattern="scalar subquery in WHERE",
        query=get_scenario("ScalarAboveAverageSalary").query,
        expected_rows=(("Carlos Vendedor", Decimal("3000.00")),),
    )
    broken = Scenario(name="Broken", pattern="none", query="SELECT * FROM missing_table")
    scenarios = [wrong, broken, get_scenario("SalesStaffWithNoOrders")]

    report = run_demo(sqlite_conn, scenarios)

    statuses = [o.status for o in report.outcomes]
    assert statuses == [ScenarioStatus.FAILED, ScenarioStatus.ERROR, ScenarioStatus.PASSED]
    assert report.outcomes[0].missing_rows == [["Carlos Vendedor", Decimal("3000.00")]]
    assert report.outcomes[0].extra_rows == [["Ana Gerente", 8000]]
    assert "no such table" in report.outcomes[1].detail
    assert report.state is RunState.COMPLETED
    assert report.exit_code == 1


def test_timeout_marks_remaining_scenarios_skipped(sqlite_conn):
    # Each clock read advances one second; the bound allows the first scenario only.
    report = run_demo(sqlite_conn, run_timeout_seconds=2.5, clock=_ticking_clock())

    statuses = [o.status for o in report.outcomes]
    assert statuses[0] is ScenarioStatus.PASSED
    assert statuses[1:] == [ScenarioStatus.SKIPPED] * (SCENARIO_COUNT - 1)
    assert report.timed_out is True
    assert report.state is RunState.COMPLETED
    assert report.exit_code == 1
    assert "not started" in report.outcomes[-1].detail


def test_zero_timeout_skips_everything_but_still_loads(sqlite_conn):
    report = run_demo(sqlite_conn, run_timeout_seconds=0)

    assert report.count(ScenarioStatus.SKIPPED) == SCENARIO_COUNT
    assert report.history == [RunState.NOT_STARTED, RunState.SCHEMA_LOADED, RunState.COMPLETED]


def test_timeout_defaults_to_settings(sqlite_conn, monkeypatch):
    monkeypatch.setenv("RUN_TIMEOUT_SECONDS", "0")

    report = run_demo(sqlite_conn)

    assert report.timed_out is True


def test_integrity_error_aborts_the_run(sqlite_conn):
    fixture = Fixture(
        employees=SEED_FIXTURE.employees,
        orders=(Order(order_id=1, employee_id=404, total=Decimal("1"), order_date=date(2023, 1, 1)),),
    )

    report = run_demo(sqlite_conn, fixture=fixture)

    assert report.state is RunState.ABORTED
    assert report.exit_code == 2
    assert report.outcomes == []
    assert "employee 404" in report.fatal_error


def test_teardown_drops_tables(sqlite_conn):
    run_demo(sqlite_conn, teardown=True)

    tables = sqlite_conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
    assert tables == []


def test_without_teardown_fixture_stays_loaded(sqlite_conn):
    report = run_demo(sqlite_conn)

    assert schema.checksum(sqlite_conn) == report.checksum_after


def test_illegal_transition_is_rejected():
    report = RunReport(dialect="sqlite")

    with pytest.raises(RuntimeError, match="NotStarted -> ScenarioRunning"):
        report.transition(RunState.SCENARIO_RUNNING)


def test_empty_scenario_list_completes_without_passing(sqlite_conn):
    report = run_demo(sqlite_conn, [])

    assert report.state is RunState.COMPLETED
    assert report.exit_code == 1


def test_report_serializes_to_json_types(sqlite_conn):
    report = run_demo(sqlite_conn, [get_scenario("ScalarAboveAverageSalary")])

    payload = report.model_dump(mode="json")

    assert payload["state"] == "Completed"
    assert payload["outcomes"][0]["status"] == "passed"
    outcome = payload["outcomes"][0]
    assert outcome["expected_rows"] == [["Ana Gerente", 8000.0]]
    assert isinstance(outcome["expected_rows"][0][1], float)
    assert outcome["actual_rows"] == outcome["expected_rows"]


def test_rejected_drop_aborts_the_run(sqlite_conn):
    sqlite_conn.execute("CREATE VIEW employees AS SELECT 1 AS x")

    report = run_demo(sqlite_conn)

    assert report.state is RunState.ABORTED
    assert report.exit_code == 2
    assert "DROP VIEW" in report.fatal_error


def test_failing_initial_checksum_aborts_the_run(sqlite_conn, monkeypatch):
    def unreadable(connection, tables=schema.TABLES):
        raise EngineError("disk I/O error")

    monkeypatch.setattr(schema, "checksum", unreadable)

    report = run_demo(sqlite_conn)

    assert report.state is RunState.ABORTED
    assert report.history == [RunState.NOT_STARTED, RunState.ABORTED]
    assert report.fatal_error == "disk I/O error"


def test_skipped_detail_names_the_timeout_error(sqlite_conn):
    report = run_demo(sqlite_conn, run_timeout_seconds=0)

    assert report.outcomes[0].detail.startswith("RunTimeoutError: Run exceeded 0s")
