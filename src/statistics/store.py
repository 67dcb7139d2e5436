"""
Record Stores

The engine reads customers through a small store protocol so it can run
against the SQL database in production and against plain lists in tests.
Every store yields records in insertion order.
"""

from typing import List, Optional, Protocol, Sequence

import polars as pl
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.models import Customer
from src.statistics.records import CustomerRecord, frame_from_rows, records_to_frame


class CustomerStore(Protocol):
    """Read-only access to stored customer records"""

    async def count(self) -> int:
        ...

    async def find(self, skip: int = 0, limit: Optional[int] = None) -> List[CustomerRecord]:
        ...

    async def load_frame(self, columns: Sequence[str]) -> pl.DataFrame:
        ...


class InMemoryCustomerStore:
    """Store over an in-process sequence of records."""

    def __init__(self, records: Sequence[CustomerRecord] = ()):
        self._records = tuple(records)

    async def count(self) -> int:
        return len(self._records)

    async def find(self, skip: int = 0, limit: Optional[int] = None) -> List[CustomerRecord]:
        end = None if limit is None else skip + limit
        return list(self._records[skip:end])

    async def load_frame(self, columns: Sequence[str]) -> pl.DataFrame:
        return records_to_frame(self._records, columns)


class SQLAlchemyCustomerStore:
    """
    Store backed by the ``customers`` table.

    Uses the caller's session; it never commits or writes.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def count(self) -> int:
        result = await self.session.execute(select(func.count(Customer.id)))
        return result.scalar() or 0

    async def find(self, skip: int = 0, limit: Optional[int] = None) -> List[CustomerRecord]:
        query = select(Customer).order_by(Customer.id).offset(skip)
        if limit is not None:
            query = query.limit(limit)
        result = await self.session.execute(query)
        return [CustomerRecord.from_model(row) for row in result.scalars().all()]

    async def load_frame(self, columns: Sequence[str]) -> pl.DataFrame:
        """Fetch only the requested columns, in insertion order."""
        query = select(*[getattr(Customer, column) for column in columns]).order_by(Customer.id)
        result = await self.session.execute(query)
        return frame_from_rows(columns, result.all())
