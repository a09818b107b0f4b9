"""
Scenario record shared by the registry, executor, verifier and reporter.
"""

from __future__ import annotations

from typing import Any, Tuple

from pydantic import BaseModel, Field


class Scenario(BaseModel):
    """
    One worked subquery example: the SQL to run and the rows it must return.

    Attributes
    ----------
    name : str
        Registry key (e.g. "ScalarAboveAverageSalary").
    pattern : str
        Which subquery form the query demonstrates.
    description : str
        What the query asks, in plain words.
    query : str
        SQL text submitted verbatim to the query engine.
    expected_rows : tuple of tuples
        Field order within a row is meaningful.
    ordered : bool
        Whether row order must match. False means multiset comparison.
    """

    name: str = Field(..., min_length=1)
    pattern: str
    description: str = ""
    query: str = Field(..., min_length=1)
    expected_rows: Tuple[Tuple[Any, ...], ...] = ()
    ordered: bool = False

    model_config = {
        "frozen": True,
        "arbitrary_types_allowed": False,
    }


__all__ = ["Scenario"]
