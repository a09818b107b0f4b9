"""
The six worked subquery examples, in the order they are taught.

Expected rows are derived from SEED_FIXTURE. None of the queries has an
ORDER BY, so every scenario is compared as a multiset.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from subquery_demo.scenarios.base import Scenario

_DEPARTMENT_AVERAGES = (("Ventas", Decimal("3850.00")),)

SCENARIOS: Tuple[Scenario, ...] = (
    Scenario(
        name="ScalarAboveAverageSalary",
        pattern="scalar subquery in WHERE",
        description=(
            "Employees earning more than the company-wide average salary. "
            "The subquery yields a single number the outer query compares against."
        ),
        query="""
SELECT name, salary
FROM employees
WHERE salary > (SELECT AVG(salary) FROM employees)
""".strip(),
        expected_rows=(("Ana Gerente", Decimal("8000.00")),),
    ),
    Scenario(
        name="SameCategoryExcludingSelf",
        pattern="list subquery with IN",
        description=(
            "Products in the same category as 'Silla Ergonómica', "
            "excluding the chair itself."
        ),
        query="""
SELECT name, price
FROM products
WHERE category IN (
    SELECT category
    FROM products
    WHERE name = 'Silla Ergonómica'
)
AND name <> 'Silla Ergonómica'
""".strip(),
        expected_rows=(("Escritorio", Decimal("150.00")),),
    ),
    Scenario(
        name="OrderCountPerEmployee",
        pattern="correlated subquery in SELECT",
        description=(
            "Every employee with the number of orders they processed; "
            "the subquery is evaluated once per employee row."
        ),
        query="""
SELECT
    name,
    (SELECT COUNT(*)
     FROM orders
     WHERE orders.employee_id = employees.employee_id) AS total_orders
FROM employees
""".strip(),
        expected_rows=(
            ("Ana Gerente", 1),
            ("Carlos Vendedor", 2),
            ("Diana Vendedora", 1),
            ("Eduardo Soporte", 0),
            ("Fernando Nuevo", 0),
        ),
    ),
    Scenario(
        name="SalesStaffWithNoOrders",
        pattern="correlated NOT EXISTS",
        description=(
            "Employees of the 'Ventas' department with no orders yet. "
            "Eduardo has none either but works in IT."
        ),
        query="""
SELECT name
FROM employees e
WHERE department = 'Ventas'
AND NOT EXISTS (
    SELECT 1
    FROM orders o
    WHERE o.employee_id = e.employee_id
)
""".strip(),
        expected_rows=(("Fernando Nuevo",),),
    ),
    Scenario(
        name="DepartmentsAboveAverage",
        pattern="derived table in FROM",
        description=(
            "Average salary per department, keeping only departments above 3000. "
            "The grouped averages form a virtual table the outer query filters."
        ),
        query="""
SELECT department, average_salary
FROM (
    SELECT department, AVG(salary) AS average_salary
    FROM employees
    GROUP BY department
) AS department_averages
WHERE average_salary > 3000
""".strip(),
        expected_rows=_DEPARTMENT_AVERAGES,
    ),
    Scenario(
        name="DepartmentsAboveAverageCTE",
        pattern="common table expression",
        description=(
            "Same question as DepartmentsAboveAverage, with the grouped averages "
            "named up front in a WITH clause."
        ),
        query="""
WITH department_metrics AS (
    SELECT department, AVG(salary) AS average_salary
    FROM employees
    GROUP BY department
)
SELECT department, average_salary
FROM department_metrics
WHERE average_salary > 3000
""".strip(),
        expected_rows=_DEPARTMENT_AVERAGES,
    ),
)


def _registry() -> Dict[str, Scenario]:
    return {scenario.name: scenario for scenario in SCENARIOS}


def available_scenarios() -> List[str]:
    """List scenario names in registry order."""
    return [scenario.name for scenario in SCENARIOS]


def get_scenario(name: str) -> Scenario:
    registry = _registry()
    if name not in registry:
        raise ValueError(f"Unknown scenario '{name}'. Available: {', '.join(registry)}")
    return registry[name]


def select_scenarios(names: Optional[Iterable[str]] = None) -> Tuple[Scenario, ...]:
    """
    Resolve names to scenarios, keeping registry order. None or ["all"] selects every scenario.
    """
    wanted = list(names) if names is not None else ["all"]
    if not wanted or wanted == ["all"]:
        return SCENARIOS
    for name in wanted:
        get_scenario(name)
    return tuple(s for s in SCENARIOS if s.name in wanted)


__all__ = ["SCENARIOS", "available_scenarios", "get_scenario", "select_scenarios"]
