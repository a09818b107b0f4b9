from __future__ import annotations

from decimal import Decimal

import pytest

from subquery_demo.errors import VerificationFailure
from subquery_demo.verifier import values_match, verify


def test_unordered_rows_pass_regardless_of_order():
    expected = [("Ana Gerente", 1), ("Carlos Vendedor", 2)]
    actual = [("Carlos Vendedor", 2), ("Ana Gerente", 1)]

    result = verify(actual, expected)

    assert result.passed
    assert result.missing == []
    assert result.extra == []
    assert result.failure is None


def test_numeric_fields_compare_across_types():
    assert values_match(8000, Decimal("8000.00"))
    assert values_match(3850.0, Decimal("3850.00"))
    assert values_match(Decimal("4733.3333333333333333"), 14200 / 3)


def test_tolerance_is_absolute_and_configurable():
    assert values_match(1.0000005, 1.0)
    assert not values_match(1.00001, 1.0)
    assert values_match(1.00001, 1.0, tolerance=1e-4)


def test_bool_and_strings_are_not_treated_as_numbers():
    assert not values_match(True, 1)
    assert not values_match("8000", 8000)


def test_duplicates_are_counted():
    result = verify([("a",), ("a",)], [("a",)])

    assert not result.passed
    assert result.missing == []
    assert result.extra == [("a",)]


def test_missing_and_extra_rows_are_reported():
    result = verify([("Eduardo Soporte",)], [("Fernando Nuevo",)])

    assert not result.passed
    assert result.missing == [("Fernando Nuevo",)]
    assert result.extra == [("Eduardo Soporte",)]
    assert "missing 1 row(s)" in result.diff
    assert "unexpected 1 row(s)" in result.diff


def test_field_order_within_row_matters():
    result = verify([(150, "Escritorio")], [("Escritorio", 150)])

    assert not result.passed


def test_ordered_comparison_requires_same_sequence():
    rows = [("a", 1), ("b", 2)]

    assert verify(rows, rows, ordered=True).passed
    result = verify(list(reversed(rows)), rows, ordered=True)
    assert not result.passed
    assert result.missing == rows
    assert result.extra == list(reversed(rows))


def test_ordered_comparison_reports_trailing_rows():
    result = verify([("a",)], [("a",), ("b",)], ordered=True)

    assert result.missing == [("b",)]
    assert result.extra == []


def test_raise_for_failure_carries_rows():
    result = verify([], [("Ana Gerente", 8000)])

    with pytest.raises(VerificationFailure) as excinfo:
        result.raise_for_failure()

    assert excinfo.value.missing == [("Ana Gerente", 8000)]
    assert excinfo.value.extra == []


def test_empty_against_empty_passes():
    assert verify([], []).passed


def test_non_finite_values_fail_instead_of_raising():
    result = verify([("x", Decimal("NaN"))], [("x", Decimal("1"))])

    assert not result.passed
    assert result.missing == [("x", Decimal("1"))]
    assert not values_match(Decimal("Infinity"), Decimal("1"))
    assert not values_match(float("nan"), float("inf"))


def test_non_finite_values_match_only_themselves():
    assert values_match(Decimal("NaN"), float("nan"))
    assert values_match(float("inf"), Decimal("Infinity"))
    assert not values_match(float("inf"), float("-inf"))
