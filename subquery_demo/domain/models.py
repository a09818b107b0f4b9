"""
Domain models for the subquery demo.

Defines the three row types of the tutorial dataset and the Fixture that groups
them. All models are frozen: rows are created once at load time and never
change within a run.
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, Optional, Tuple

from pydantic import BaseModel, Field, model_validator

_FROZEN = {
    "frozen": True,
    "populate_by_name": True,
    "arbitrary_types_allowed": False,
}


class Employee(BaseModel):
    """
    A salesperson or staff member; row of the `employees` table.
    """

    employee_id: int = Field(..., description="Primary key.")
    name: str = Field(..., description="Full name.")
    salary: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    department: str = Field(..., min_length=1)

    model_config = _FROZEN


class Product(BaseModel):
    """
    A catalogue item; row of the `products` table.
    """

    product_id: int = Field(..., description="Primary key.")
    name: str
    category: str
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)

    model_config = _FROZEN


class Order(BaseModel):
    """
    A sale; row of the `orders` table. `employee_id` is who sold it.
    """

    order_id: int = Field(..., description="Primary key.")
    employee_id: Optional[int] = Field(None, description="FK to employees, nullable.")
    total: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    order_date: date

    model_config = _FROZEN


def _ensure_unique(ids: Iterable[int], label: str) -> None:
    seen: Dict[int, int] = {}
    for value in ids:
        seen[value] = seen.get(value, 0) + 1
    duplicates = sorted(k for k, count in seen.items() if count > 1)
    if duplicates:
        raise ValueError(f"Duplicate {label} identifiers: {duplicates}")


class Fixture(BaseModel):
    """
    The complete dataset loaded before any scenario runs.

    Identifier uniqueness is validated here. The referential invariant
    (orders point at existing employees) is checked by the schema loader,
    which reports it as an IntegrityError.
    """

    employees: Tuple[Employee, ...] = ()
    products: Tuple[Product, ...] = ()
    orders: Tuple[Order, ...] = ()

    model_config = _FROZEN

    @model_validator(mode="after")
    def _unique_identifiers(self) -> "Fixture":
        _ensure_unique((e.employee_id for e in self.employees), "employee")
        _ensure_unique((p.product_id for p in self.products), "product")
        _ensure_unique((o.order_id for o in self.orders), "order")
        return self

    def dangling_orders(self) -> Tuple[Order, ...]:
        """Orders whose employee reference does not resolve."""
        known = {e.employee_id for e in self.employees}
        return tuple(
            o for o in self.orders if o.employee_id is not None and o.employee_id not in known
        )


__all__ = ["Employee", "Product", "Order", "Fixture"]
