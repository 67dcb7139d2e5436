"""
Test Suite Configuration
"""
import os

os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("REDIS_ENABLED", "false")

from typing import AsyncGenerator, Callable, List

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.database.models import Base
from src.statistics.records import CustomerRecord


def build_record(**overrides) -> CustomerRecord:
    """Customer record with required fields filled in."""
    values = {
        "customer_id": 1,
        "location_name": "Mall A",
        "date": "2024-01-01",
        "login_hour": "09",
        "full_name": "Ana",
        "email": "a@x.com",
    }
    values.update(overrides)
    return CustomerRecord(**values)


@pytest.fixture
def make_record() -> Callable[..., CustomerRecord]:
    return build_record


@pytest.fixture
def sample_records() -> List[CustomerRecord]:
    """
    Five visits by four emails / three customer ids / three names.

    Rows 1 and 2 are the same visitor; "Budi" shows up under two emails
    sharing customer id 2.
    """
    return [
        build_record(
            sequence_index=0, customer_id=1, full_name="Ana", email="a@x.com",
            gender="F", birth_year=1990, device="iPhone", digital_interest="Music",
            location_type="Mall", location_name="Mall A", login_hour="09",
        ),
        build_record(
            sequence_index=1, customer_id=1, full_name="Ana", email="a@x.com",
            gender="F", birth_year=1990, device="iPhone", digital_interest="Music",
            location_type="Mall", location_name="Mall B", login_hour="10",
        ),
        build_record(
            sequence_index=2, customer_id=2, full_name="Budi", email="b@x.com",
            gender="M", birth_year=1985, device="Samsung", digital_interest="Sports",
            location_type="Cafe", location_name="Cafe A", login_hour="09",
        ),
        build_record(
            sequence_index=3, customer_id=3, full_name="Citra", email="c@x.com",
            gender="F", birth_year=None, device="", digital_interest=None,
            location_type="Mall", location_name="Mall A", login_hour="21",
        ),
        build_record(
            sequence_index=4, customer_id=2, full_name="Budi", email="d@x.com",
            gender="M", birth_year=2001, device="Samsung", digital_interest="Music",
            location_type="", location_name="Park", login_hour="",
        ),
    ]


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite engine with the schema created"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker:
    return async_sessionmaker(bind=db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Test database session"""
    async with session_factory() as session:
        yield session
