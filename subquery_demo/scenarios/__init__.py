"""
Scenarios package for the subquery demo.

Re-exports the Scenario record and the registry of worked examples so
downstream code can import from `subquery_demo.scenarios` directly.
"""

from subquery_demo.scenarios.base import Scenario
from subquery_demo.scenarios.registry import (
    SCENARIOS,
    available_scenarios,
    get_scenario,
    select_scenarios,
)

__all__ = [
    "Scenario",
    "SCENARIOS",
    "available_scenarios",
    "get_scenario",
    "select_scenarios",
]
