"""
Subquery Demo - worked SQL subquery examples with verified results.

This package loads a small employees/products/orders fixture into a database
and runs six canonical subquery patterns against it, checking each result:

- Scalar subquery in WHERE
- List subquery with IN
- Correlated subquery in SELECT
- Correlated NOT EXISTS
- Derived table in FROM
- Common table expression

The query engine is external; the package talks to it through small dialect
adapters (SQLite and PostgreSQL).
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from subquery_demo.config import Settings, get_settings
from subquery_demo.errors import (
    DemoError,
    IntegrityError,
    QueryError,
    RunTimeoutError,
    SchemaError,
    VerificationFailure,
)
from subquery_demo.executor import run
from subquery_demo.infrastructure import QueryInterface, available_dialects, connect
from subquery_demo.runner import RunReport, RunState, run_demo
from subquery_demo.scenarios import SCENARIOS, Scenario, get_scenario
from subquery_demo.schema import checksum, drop, load
from subquery_demo.utils.logging import configure_logging, get_logger
from subquery_demo.verifier import Verification, verify

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Errors
    "DemoError",
    "IntegrityError",
    "QueryError",
    "RunTimeoutError",
    "SchemaError",
    "VerificationFailure",
    # Query interface
    "QueryInterface",
    "available_dialects",
    "connect",
    # Components
    "load",
    "drop",
    "checksum",
    "SCENARIOS",
    "Scenario",
    "get_scenario",
    "run",
    "verify",
    "Verification",
    "run_demo",
    "RunReport",
    "RunState",
    # Logging
    "configure_logging",
    "get_logger",
]
