"""
Group-and-Count Reducers

Generic building blocks for the per-field breakdowns: empty filtering,
stable grouping, ordering and percentages.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, List, Optional

import polars as pl

from src.statistics.derived import round_half_up


class SortMode(str, Enum):
    """Result ordering of a breakdown"""
    COUNT_DESC = "count_desc"
    KEY_ASC = "key_asc"


@dataclass(frozen=True)
class GroupCount:
    """One row of a breakdown."""
    label: Any
    count: int
    percentage: Optional[float] = None


def drop_empty(frame: pl.DataFrame, column: str) -> pl.DataFrame:
    """Exclude rows whose value is null or an empty string."""
    value = pl.col(column).cast(pl.Utf8)
    return frame.filter(value.is_not_null() & (value != ""))


def group_count(
    frame: pl.DataFrame,
    column: str,
    filter_empty: bool = False,
    sort: SortMode = SortMode.COUNT_DESC,
) -> List[GroupCount]:
    """
    Count records per distinct value of ``column``.

    Groups are formed in first-seen order. ``COUNT_DESC`` is a stable sort,
    so equal counts keep that order; ``KEY_ASC`` sorts by the label itself
    with a null label last.

    Args:
        frame: Records to count
        column: Field to group on
        filter_empty: Drop null and "" values before grouping
        sort: Result ordering
    """
    if filter_empty:
        frame = drop_empty(frame, column)
    if frame.height == 0:
        return []

    grouped = frame.group_by(column, maintain_order=True).agg(pl.len().alias("count"))

    if sort == SortMode.COUNT_DESC:
        grouped = grouped.sort("count", descending=True, maintain_order=True)
    elif sort == SortMode.KEY_ASC:
        grouped = grouped.sort(column, nulls_last=True, maintain_order=True)
    else:
        raise ValueError(f"Unsupported sort mode: {sort}")

    return [
        GroupCount(label=row[column], count=row["count"])
        for row in grouped.iter_rows(named=True)
    ]


def with_percentages(groups: List[GroupCount], ndigits: int = 2) -> List[GroupCount]:
    """
    Attach each group's share of the counted total.

    The total is the sum of the given groups, i.e. the population left
    after any empty filtering, not the raw record count.
    """
    total = sum(group.count for group in groups)
    if total == 0:
        return list(groups)
    return [
        replace(group, percentage=round_half_up(group.count / total * 100, ndigits))
        for group in groups
    ]
