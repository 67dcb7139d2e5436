"""
Derived Fields

Age from birth year, age-group bucketing and null-safe numeric summaries.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple

import polars as pl

AGE_GROUPS: Tuple[str, ...] = ("18-24", "25-34", "35-44", "45-54", "55-64", "65+")

# Upper bounds (exclusive). Ages under 18 land in "18-24".
_AGE_BOUNDARIES: Tuple[Tuple[int, str], ...] = (
    (25, "18-24"),
    (35, "25-34"),
    (45, "35-44"),
    (55, "45-54"),
    (65, "55-64"),
)
_OLDEST_GROUP = "65+"


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round like a spreadsheet would: .5 goes away from zero."""
    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def resolve_current_year(override: Optional[int] = None) -> int:
    return override if override is not None else date.today().year


def age_group(age: int) -> str:
    """Bucket label for an age."""
    for upper, label in _AGE_BOUNDARIES:
        if age < upper:
            return label
    return _OLDEST_GROUP


def age_group_expr(age_column: str = "age") -> pl.Expr:
    """Vectorized equivalent of :func:`age_group`."""
    upper, label = _AGE_BOUNDARIES[0]
    expr = pl.when(pl.col(age_column) < upper).then(pl.lit(label))
    for upper, label in _AGE_BOUNDARIES[1:]:
        expr = expr.when(pl.col(age_column) < upper).then(pl.lit(label))
    return expr.otherwise(pl.lit(_OLDEST_GROUP))


def with_age(frame: pl.DataFrame, current_year: int) -> pl.DataFrame:
    """Add an ``age`` column; null where the birth year is unknown."""
    return frame.with_columns(
        (pl.lit(current_year, dtype=pl.Int64) - pl.col("birth_year")).alias("age")
    )


def known_ages(frame: pl.DataFrame, current_year: int) -> pl.DataFrame:
    """Rows with a usable birth year, with their age attached."""
    return with_age(frame.filter(pl.col("birth_year").is_not_null()), current_year)


@dataclass(frozen=True)
class NumericSummary:
    """
    Average/min/max over the non-null values of a column.

    An empty input yields average 0 and min/max None, so a 0 average is
    only meaningful together with a non-zero ``count``.
    """
    count: int
    average: float
    minimum: Optional[int]
    maximum: Optional[int]


def summarize(values: pl.Series, ndigits: int) -> NumericSummary:
    values = values.drop_nulls()
    if values.len() == 0:
        return NumericSummary(count=0, average=0, minimum=None, maximum=None)
    return NumericSummary(
        count=values.len(),
        average=round_half_up(values.mean(), ndigits),
        minimum=int(values.min()),
        maximum=int(values.max()),
    )
