"""
The canonical tutorial dataset: five employees, five products, four orders.

Eduardo (IT) and Fernando (Ventas) have no orders; Fernando is the low-salary
newcomer the NOT EXISTS scenario is meant to find.
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal

from subquery_demo.domain.models import Employee, Fixture, Order, Product

SEED_FIXTURE = Fixture(
    employees=(
        Employee(employee_id=1, name="Ana Gerente", salary=Decimal("8000.00"), department="Ventas"),
        Employee(
            employee_id=2, name="Carlos Vendedor", salary=Decimal("3000.00"), department="Ventas"
        ),
        Employee(
            employee_id=3, name="Diana Vendedora", salary=Decimal("3200.00"), department="Ventas"
        ),
        Employee(employee_id=4, name="Eduardo Soporte", salary=Decimal("2500.00"), department="IT"),
        Employee(
            employee_id=5, name="Fernando Nuevo", salary=Decimal("1200.00"), department="Ventas"
        ),
    ),
    products=(
        Product(product_id=101, name="Laptop Pro", category="Electrónica", price=Decimal("1500.00")),
        Product(product_id=102, name="Smartphone", category="Electrónica", price=Decimal("800.00")),
        Product(product_id=103, name="Monitor", category="Electrónica", price=Decimal("300.00")),
        Product(
            product_id=104, name="Silla Ergonómica", category="Muebles", price=Decimal("200.00")
        ),
        Product(product_id=105, name="Escritorio", category="Muebles", price=Decimal("150.00")),
    ),
    orders=(
        Order(order_id=1, employee_id=2, total=Decimal("1500.00"), order_date=date(2023, 10, 1)),
        Order(order_id=2, employee_id=2, total=Decimal("300.00"), order_date=date(2023, 10, 2)),
        Order(order_id=3, employee_id=3, total=Decimal("2000.00"), order_date=date(2023, 10, 5)),
        Order(order_id=4, employee_id=1, total=Decimal("5000.00"), order_date=date(2023, 10, 10)),
    ),
)

__all__ = ["SEED_FIXTURE"]
