"""
Database Models

Customer interaction records as ingested from the visit/login export.
One row per login event; the same real-world customer may appear many
times, under the same or a different ``customer_id``.

The surrogate ``id`` column fixes the store's natural (insertion) order,
which the statistics engine relies on for first-occurrence deduplication.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


class Customer(Base):
    """
    Customer Interaction Table

    Rows are written once by the CSV importer and never updated by the API.
    """
    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Original CSV row position, informational only
    sequence_index: Mapped[Optional[int]] = mapped_column(Integer)

    customer_id: Mapped[int] = mapped_column(Integer, nullable=False)
    location_name: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[str] = mapped_column(String(50), nullable=False)
    login_hour: Mapped[str] = mapped_column(String(20), nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Demographics
    birth_year: Mapped[Optional[int]] = mapped_column(Integer)
    gender: Mapped[Optional[str]] = mapped_column(String(20))

    # Contact
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(50))

    # Behaviour
    device: Mapped[Optional[str]] = mapped_column(String(100))
    digital_interest: Mapped[Optional[str]] = mapped_column(String(100))
    location_type: Mapped[Optional[str]] = mapped_column(String(100))

    # Audit
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("ix_customers_customer_id", "customer_id"),
        Index("ix_customers_email", "email"),
        Index("ix_customers_full_name_email", "full_name", "email"),
    )

    def __repr__(self) -> str:
        return f"<Customer id={self.id} customer_id={self.customer_id} email={self.email!r}>"
