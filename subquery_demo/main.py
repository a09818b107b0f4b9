from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from subquery_demo.config import get_settings
from subquery_demo.errors import EngineError
from subquery_demo.infrastructure import available_dialects, connect
from subquery_demo.reporter import print_report, write_report
from subquery_demo.runner import run_demo
from subquery_demo.scenarios import SCENARIOS, select_scenarios
from subquery_demo.schema import render_script
from subquery_demo.utils.logging import configure_logging, get_logger

app = typer.Typer(help="Subquery tutorial runner.")
log = get_logger(__name__)

EXIT_SCHEMA_FAILURE = 2


def _check_dialect(dialect: str) -> str:
    dialects = available_dialects()
    if dialect not in dialects:
        raise typer.BadParameter(
            f"Unknown dialect '{dialect}'. Available: {', '.join(dialects)}",
            param_hint="--dialect",
        )
    return dialect


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"dialect={settings.dialect} sqlite_path={settings.sqlite_path} | "
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"statement_timeout_ms={settings.db_statement_timeout_ms} "
        f"run_timeout_seconds={settings.run_timeout_seconds} "
        f"tolerance={settings.verify_tolerance}"
    )


@app.command("list-scenarios")
def list_scenarios() -> None:
    """
    List the registered scenarios in execution order.
    """
    for scenario in SCENARIOS:
        typer.echo(f"{scenario.name}\t{scenario.pattern}")


@app.command("export-sql")
def export_sql(
    dialect: Optional[str] = typer.Option(
        None, "--dialect", "-d", help="Target dialect (default from settings)."
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the script here instead of stdout."
    ),
) -> None:
    """
    Print the whole tutorial (setup and examples) as a standalone SQL script.
    """
    name = _check_dialect(dialect or get_settings().dialect)
    script = render_script(name)
    if output is None:
        typer.echo(script)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(script + "\n", encoding="utf-8")
    typer.echo(f"Wrote {output}")


@app.command("run-demo")
def run_demo_command(
    dialect: Optional[str] = typer.Option(
        None,
        "--dialect",
        "-d",
        help="Query interface adapter to use (e.g., sqlite, postgres).",
    ),
    report: Optional[Path] = typer.Option(
        None, "--report", "-r", help="Write a machine-readable JSON report to this path."
    ),
    scenario: Optional[List[str]] = typer.Option(
        None, "--scenario", "-s", help="Run only these scenarios (repeatable)."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", "-t", help="Overall run timeout in seconds."
    ),
    keep_data: bool = typer.Option(
        False, "--keep-data", help="Leave the tables in place after the run."
    ),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON."),
) -> None:
    """
    Load the fixture, run the scenarios and verify their results.

    Exit code 0 if every scenario passes, 1 if any fails, errors or is
    skipped, 2 if the fixture cannot be loaded.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=json_logs or settings.log_json)
    name = _check_dialect(dialect or settings.dialect)
    try:
        selected = select_scenarios(scenario or None)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--scenario") from exc

    try:
        connection = connect(name, settings)
    except EngineError as exc:
        log.exception("Connection failed", extra={"dialect": name})
        typer.echo(f"Could not open '{name}' database: {exc}", err=True)
        raise typer.Exit(code=EXIT_SCHEMA_FAILURE) from exc

    with connection:
        result = run_demo(
            connection,
            selected,
            run_timeout_seconds=timeout,
            teardown=not keep_data,
        )

    print_report(result, Console())
    if report is not None:
        write_report(result, report)
    raise typer.Exit(code=result.exit_code)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
