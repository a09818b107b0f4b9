"""
Domain package for the subquery demo.

Exports the row models, the Fixture container and the canonical seed data.
Keep this package focused on data definitions and validation concerns.
"""

from subquery_demo.domain.models import Employee, Fixture, Order, Product
from subquery_demo.domain.seed import SEED_FIXTURE

__all__ = [
    "Employee",
    "Fixture",
    "Order",
    "Product",
    "SEED_FIXTURE",
]
