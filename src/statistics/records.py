"""
Customer Records

Immutable in-process view of stored customer rows, plus the conversion
into polars frames that the aggregation engine works on.
"""

import math
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

import polars as pl


@dataclass(frozen=True)
class CustomerRecord:
    """One stored login/visit event. Never mutated after ingestion."""
    customer_id: int
    location_name: str
    date: str
    login_hour: str
    full_name: str
    email: str
    sequence_index: Optional[int] = None
    birth_year: Optional[int] = None
    gender: Optional[str] = None
    phone: Optional[str] = None
    device: Optional[str] = None
    digital_interest: Optional[str] = None
    location_type: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, row: Any) -> "CustomerRecord":
        """Build a record from an ORM row (or anything with matching attributes)."""
        return cls(**{name: getattr(row, name) for name in RECORD_COLUMNS})


RECORD_COLUMNS: List[str] = [f.name for f in fields(CustomerRecord)]

FRAME_SCHEMA: Dict[str, pl.DataType] = {
    "customer_id": pl.Int64,
    "location_name": pl.Utf8,
    "date": pl.Utf8,
    "login_hour": pl.Utf8,
    "full_name": pl.Utf8,
    "email": pl.Utf8,
    "sequence_index": pl.Int64,
    "birth_year": pl.Int64,
    "gender": pl.Utf8,
    "phone": pl.Utf8,
    "device": pl.Utf8,
    "digital_interest": pl.Utf8,
    "location_type": pl.Utf8,
    "created_at": pl.Datetime,
    "updated_at": pl.Datetime,
}


def coerce_birth_year(value: Any) -> Optional[int]:
    """
    Normalize a stored birth year.

    Anything that is not a finite number (None, NaN, free text, booleans)
    becomes None, so the record drops out of age aggregates instead of
    counting as year 0.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def frame_from_rows(columns: Sequence[str], rows: Iterable[Sequence[Any]]) -> pl.DataFrame:
    """
    Build a frame from positional rows, keeping row order.

    Args:
        columns: Record attribute names, one per row position
        rows: Row tuples in store iteration order
    """
    unknown = [c for c in columns if c not in FRAME_SCHEMA]
    if unknown:
        raise ValueError(f"Unknown record columns: {unknown}")

    data: Dict[str, List[Any]] = {column: [] for column in columns}
    birth_year_at = list(columns).index("birth_year") if "birth_year" in columns else None

    for row in rows:
        for position, column in enumerate(columns):
            value = row[position]
            if position == birth_year_at:
                value = coerce_birth_year(value)
            data[column].append(value)

    return pl.DataFrame(data, schema={column: FRAME_SCHEMA[column] for column in columns})


def records_to_frame(
    records: Iterable[CustomerRecord],
    columns: Optional[Sequence[str]] = None,
) -> pl.DataFrame:
    """Project records onto the given columns (all columns by default)."""
    selected = list(columns or RECORD_COLUMNS)
    return frame_from_rows(
        selected,
        ([getattr(record, column) for column in selected] for record in records),
    )
