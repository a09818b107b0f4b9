from __future__ import annotations

from rich.console import Console

from subquery_demo.reporter import print_report, report_payload
from subquery_demo.runner import RunReport, RunState, ScenarioOutcome, ScenarioStatus


def _report() -> RunReport:
    report = RunReport(dialect="sqlite")
    report.transition(RunState.SCHEMA_LOADED)
    report.outcomes = [
        ScenarioOutcome(name="Ok", pattern="scalar", status=ScenarioStatus.PASSED),
        ScenarioOutcome(
            name="Bad",
            pattern="list",
            status=ScenarioStatus.FAILED,
            detail="missing 1 row(s): [('x',)]",
        ),
    ]
    report.transition(RunState.COMPLETED)
    return report


def test_print_report_renders_failures_with_detail():
    console = Console(record=True, width=200)

    print_report(_report(), console)

    text = console.export_text()
    assert "PASSED" in text
    assert "FAILED" in text
    assert "missing 1 row(s): [('x',)]" in text
    assert "1/2 passed" in text


def test_print_report_for_aborted_run():
    report = RunReport(dialect="sqlite")
    report.fatal_error = "Orders reference nonexistent employees"
    report.transition(RunState.ABORTED)
    console = Console(record=True, width=200)

    print_report(report, console)

    assert "Run aborted: Orders reference nonexistent employees" in console.export_text()


def test_payload_includes_summary():
    payload = report_payload(_report())

    assert payload["summary"]["passed"] == 1
    assert payload["summary"]["failed"] == 1
    assert payload["summary"]["exit_code"] == 1
    assert payload["history"] == ["NotStarted", "SchemaLoaded", "Completed"]
