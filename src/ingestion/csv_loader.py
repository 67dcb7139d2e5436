"""
Customer CSV Loader

Bulk import of the visit/login export into the ``customers`` table.
Supports:
- Header trimming and mapping to record fields
- Lenient integer parsing (unparseable birth years are stored as NULL)
- Required-field checks with per-row rejection
- Batched inserts where a failing batch does not stop the import
"""

import re
from contextlib import AbstractAsyncContextManager
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import polars as pl
import structlog
from pydantic import BaseModel
from sqlalchemy import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import get_settings
from src.database.connection import get_db
from src.database.models import Customer

logger = structlog.get_logger(__name__)

HEADER_MAP: Dict[str, str] = {
    "": "sequence_index",
    "Number": "customer_id",
    "Name of Location": "location_name",
    "Date": "date",
    "Login Hour": "login_hour",
    "Name": "full_name",
    "Age": "birth_year",
    "gender": "gender",
    "Email": "email",
    "No Telp": "phone",
    "Brand Device": "device",
    "Digital Interest": "digital_interest",
    "Location Type": "location_type",
}

INTEGER_FIELDS = ("sequence_index", "customer_id", "birth_year")
REQUIRED_FIELDS = ("customer_id", "location_name", "date", "login_hour", "full_name", "email")

# Index column written by dataframe exports without a header name
_UNNAMED_HEADER = re.compile(r"^(column_\d+|Unnamed: \d+)$")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class LoadStatus(str, Enum):
    """Import status"""
    RUNNING = "running"
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


class LoadResult(BaseModel):
    """Result of a CSV import"""
    file_path: str
    status: LoadStatus
    rows_read: int = 0
    rows_loaded: int = 0
    rows_rejected: int = 0
    rows_failed: int = 0
    batches: int = 0
    failed_batches: int = 0
    error_message: Optional[str] = None
    load_duration_seconds: float = 0
    started_at: datetime
    completed_at: Optional[datetime] = None


def parse_int(value: Any) -> Optional[int]:
    """Leading integer of a cell ("1990", " 42 ", "1985.0"), None if there is none."""
    if value is None:
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


def normalize_header(header: str, position: int) -> Optional[str]:
    """Record field for a CSV header, None for columns we do not import."""
    header = header.strip()
    if position == 0 and _UNNAMED_HEADER.match(header):
        header = ""
    return HEADER_MAP.get(header)


def map_row(row: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Convert a CSV row (keyed by record field) into insert values.

    Returns:
        Insert values, or None when a required field is missing
    """
    values: Dict[str, Any] = {}
    for field in HEADER_MAP.values():
        raw = row.get(field)
        if field in INTEGER_FIELDS:
            values[field] = parse_int(raw)
        else:
            values[field] = raw.strip() if isinstance(raw, str) else raw

    for field in REQUIRED_FIELDS:
        if values[field] is None or values[field] == "":
            return None
    return values


class CustomerCsvLoader:
    """
    Import customer rows from a CSV export.

    Example:
        loader = CustomerCsvLoader(batch_size=200)
        result = await loader.load("Dataset.csv")
    """

    def __init__(
        self,
        batch_size: Optional[int] = None,
        session_factory: SessionFactory = get_db,
    ):
        self.batch_size = batch_size or get_settings().ingestion.batch_size
        self.session_factory = session_factory

    def read_csv(self, file_path: Union[str, Path]) -> List[Dict[str, Any]]:
        """Read every cell as text and key rows by record field."""
        df = pl.read_csv(file_path, infer_schema_length=0)
        fields = {
            column: normalize_header(column, position)
            for position, column in enumerate(df.columns)
        }
        df = df.select([pl.col(column).alias(field) for column, field in fields.items() if field])
        return df.to_dicts()

    async def _insert_batch(self, batch: List[Dict[str, Any]]) -> None:
        async with self.session_factory() as db:
            await db.execute(insert(Customer), batch)
            await db.commit()

    async def load(self, file_path: Union[str, Path]) -> LoadResult:
        """
        Import a CSV file.

        Failed batches are logged and counted; the import carries on with
        the next batch.
        """
        file_path = Path(file_path)
        started_at = datetime.now(timezone.utc)
        result = LoadResult(
            file_path=str(file_path),
            status=LoadStatus.RUNNING,
            started_at=started_at,
        )

        logger.info("Starting customer import", file=str(file_path), batch_size=self.batch_size)

        try:
            if not file_path.exists():
                raise FileNotFoundError(f"File not found: {file_path}")
            rows = self.read_csv(file_path)
        except (OSError, pl.exceptions.PolarsError) as e:
            logger.error("Customer import failed", file=str(file_path), error=str(e))
            result.status = LoadStatus.FAILED
            result.error_message = str(e)
            return self._finish(result)

        result.rows_read = len(rows)
        records = []
        for row in rows:
            values = map_row(row)
            if values is None:
                result.rows_rejected += 1
                continue
            records.append(values)

        if result.rows_rejected:
            logger.warning("Rows rejected for missing required fields", rejected=result.rows_rejected)

        for start in range(0, len(records), self.batch_size):
            batch = records[start:start + self.batch_size]
            result.batches += 1
            try:
                await self._insert_batch(batch)
            except SQLAlchemyError as e:
                result.failed_batches += 1
                result.rows_failed += len(batch)
                logger.error(
                    "Insert batch failed",
                    batch=result.batches,
                    rows=len(batch),
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue
            result.rows_loaded += len(batch)
            logger.info("Inserted batch", batch=result.batches, rows=len(batch))

        if result.rows_failed == 0 and result.rows_rejected == 0:
            result.status = LoadStatus.COMPLETED
        elif result.rows_loaded > 0:
            result.status = LoadStatus.PARTIAL
        else:
            result.status = LoadStatus.FAILED

        return self._finish(result)

    def _finish(self, result: LoadResult) -> LoadResult:
        result.completed_at = datetime.now(timezone.utc)
        result.load_duration_seconds = (result.completed_at - result.started_at).total_seconds()
        logger.info(
            "Customer import finished",
            status=result.status.value,
            rows_read=result.rows_read,
            rows_loaded=result.rows_loaded,
            rows_rejected=result.rows_rejected,
            rows_failed=result.rows_failed,
            duration_seconds=result.load_duration_seconds,
        )
        return result
