"""
Report rendering and persistence.

`print_report` renders a run as a rich table; `write_report` stores the
machine-readable JSON version (the `--report` CLI flag).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from subquery_demo.runner import RunReport, ScenarioStatus
from subquery_demo.utils.logging import get_logger

log = get_logger(__name__)

_STATUS_STYLE = {
    ScenarioStatus.PASSED: "bold green",
    ScenarioStatus.FAILED: "bold red",
    ScenarioStatus.ERROR: "bold magenta",
    ScenarioStatus.SKIPPED: "yellow",
}


def report_payload(report: RunReport) -> dict:
    payload = report.model_dump(mode="json")
    payload["summary"] = report.summary()
    return payload


def write_report(report: RunReport, path: Path | str) -> Path:
    """Write the JSON report, creating parent directories as needed."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as f:
        json.dump(report_payload(report), f, indent=2, sort_keys=True)
    log.info("Report persisted", extra={"report": str(target)})
    return target


def print_report(report: RunReport, console: Optional[Console] = None) -> None:
    """
    Render a run report as a rich table, in execution order.
    """
    console = console or Console()

    if report.fatal_error:
        console.print(f"[bold red]Run aborted:[/bold red] {escape(report.fatal_error)}")
        return
    if not report.outcomes:
        console.print("[yellow]No scenarios were run.[/yellow]")
        return

    summary = report.summary()
    caption = (
        f"{summary['passed']}/{summary['total']} passed"
        f" │ failed {summary['failed']} │ errors {summary['error']}"
        f" │ skipped {summary['skipped']}"
    )
    if report.timed_out:
        caption += " │ [yellow]timed out[/yellow]"
    if report.data_unchanged is False:
        caption += " │ [red]dataset modified[/red]"

    table = Table(
        title=f"Subquery Scenarios\n[dim]Engine: {report.dialect}[/dim]",
        box=box.ROUNDED,
        caption=caption,
    )
    table.add_column("Scenario", style="cyan", no_wrap=True)
    table.add_column("Pattern", style="blue")
    table.add_column("Status", justify="center")
    table.add_column("Rows", justify="right", style="magenta")
    table.add_column("Time (ms)", justify="right", style="green")
    table.add_column("Detail", overflow="fold")

    for outcome in report.outcomes:
        style = _STATUS_STYLE[outcome.status]
        rows = "-" if outcome.status is ScenarioStatus.SKIPPED else str(len(outcome.actual_rows))
        detail = "" if outcome.status is ScenarioStatus.PASSED else escape(outcome.detail)
        table.add_row(
            outcome.name,
            outcome.pattern,
            f"[{style}]{outcome.status.value.upper()}[/{style}]",
            rows,
            f"{outcome.duration_seconds * 1000:.1f}",
            detail,
        )

    console.print(table)


__all__ = ["print_report", "report_payload", "write_report"]
