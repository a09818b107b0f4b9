"""
Result verifier: compares the rows a scenario returned with the rows it should return.

Rows are compared as a multiset unless the scenario demands an order. Numeric
fields are compared in Decimal arithmetic with an absolute tolerance, since
engines hand back the same value as int, float or Decimal (8000, 8000.0,
Decimal("8000.00")) and averages are not exact.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, List, Optional, Sequence, Tuple

from subquery_demo.errors import VerificationFailure

DEFAULT_TOLERANCE = 1e-6

RowTuple = Tuple[Any, ...]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _as_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # repr keeps the shortest round-tripping form of a float
    return Decimal(repr(value)) if isinstance(value, float) else Decimal(value)


def values_match(actual: Any, expected: Any, tolerance: float = DEFAULT_TOLERANCE) -> bool:
    if _is_number(actual) and _is_number(expected):
        a, e = _as_decimal(actual), _as_decimal(expected)
        # NaN matches only NaN; infinities only themselves.
        if a.is_nan() or e.is_nan():
            return a.is_nan() and e.is_nan()
        if a.is_infinite() or e.is_infinite():
            return a == e
        return abs(a - e) <= Decimal(repr(tolerance))
    return actual == expected


def rows_match(actual: RowTuple, expected: RowTuple, tolerance: float = DEFAULT_TOLERANCE) -> bool:
    if len(actual) != len(expected):
        return False
    return all(values_match(a, e, tolerance) for a, e in zip(actual, expected))


@dataclass
class Verification:
    """
    Outcome of one comparison.

    `missing` holds expected rows with no counterpart, `extra` the returned
    rows nothing expected. For ordered comparisons they are the mismatching
    rows position by position.
    """

    passed: bool
    missing: List[RowTuple] = field(default_factory=list)
    extra: List[RowTuple] = field(default_factory=list)
    diff: str = ""

    @property
    def failure(self) -> Optional[VerificationFailure]:
        if self.passed:
            return None
        return VerificationFailure(self.missing, self.extra, self.diff)

    def raise_for_failure(self) -> None:
        failure = self.failure
        if failure is not None:
            raise failure


def _describe(missing: List[RowTuple], extra: List[RowTuple], ordered: bool) -> str:
    if not missing and not extra:
        return "rows match"
    parts = []
    if ordered:
        parts.append("row order differs or rows mismatch")
    if missing:
        parts.append(f"missing {len(missing)} row(s): {missing!r}")
    if extra:
        parts.append(f"unexpected {len(extra)} row(s): {extra!r}")
    return "; ".join(parts)


def _verify_unordered(
    actual: List[RowTuple], expected: List[RowTuple], tolerance: float
) -> Tuple[List[RowTuple], List[RowTuple]]:
    remaining = list(actual)
    missing: List[RowTuple] = []
    for exp in expected:
        for index, act in enumerate(remaining):
            if rows_match(act, exp, tolerance):
                del remaining[index]
                break
        else:
            missing.append(exp)
    return missing, remaining


def _verify_ordered(
    actual: List[RowTuple], expected: List[RowTuple], tolerance: float
) -> Tuple[List[RowTuple], List[RowTuple]]:
    missing: List[RowTuple] = []
    extra: List[RowTuple] = []
    for index in range(max(len(actual), len(expected))):
        act = actual[index] if index < len(actual) else None
        exp = expected[index] if index < len(expected) else None
        if act is not None and exp is not None and rows_match(act, exp, tolerance):
            continue
        if exp is not None:
            missing.append(exp)
        if act is not None:
            extra.append(act)
    return missing, extra


def verify(
    actual_rows: Sequence[Sequence[Any]],
    expected_rows: Sequence[Sequence[Any]],
    ordered: bool = False,
    tolerance: float = DEFAULT_TOLERANCE,
) -> Verification:
    """
    Compare actual rows with expected rows.

    Parameters
    ----------
    actual_rows, expected_rows : sequences of row sequences
        Field order within a row is significant.
    ordered : bool
        Require the same row sequence instead of the same multiset.
    tolerance : float
        Absolute tolerance for numeric fields.

    Returns
    -------
    Verification
        Never raises on mismatch; see `Verification.raise_for_failure`.
    """
    actual = [tuple(row) for row in actual_rows]
    expected = [tuple(row) for row in expected_rows]
    if ordered:
        missing, extra = _verify_ordered(actual, expected, tolerance)
    else:
        missing, extra = _verify_unordered(actual, expected, tolerance)
    passed = not missing and not extra
    return Verification(
        passed=passed, missing=missing, extra=extra, diff=_describe(missing, extra, ordered)
    )


__all__ = ["DEFAULT_TOLERANCE", "Verification", "rows_match", "values_match", "verify"]
