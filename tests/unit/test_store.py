"""
Unit Tests - Record Stores
"""
import pytest
import pytest_asyncio

from src.database.models import Customer
from src.statistics.dedup import DedupKey
from src.statistics.engine import StatisticsEngine
from src.statistics.records import RECORD_COLUMNS, CustomerRecord
from src.statistics.store import InMemoryCustomerStore, SQLAlchemyCustomerStore

STORED_FIELDS = [column for column in RECORD_COLUMNS if column not in ("created_at", "updated_at")]


@pytest_asyncio.fixture
async def populated_session(session_factory, db_session, sample_records):
    async with session_factory() as session:
        session.add_all([
            Customer(**{field: getattr(record, field) for field in STORED_FIELDS})
            for record in sample_records
        ])
        await session.commit()
    return db_session


class TestInMemoryStore:
    """Tests for InMemoryCustomerStore"""

    @pytest.mark.asyncio
    async def test_find_window(self, sample_records):
        store = InMemoryCustomerStore(sample_records)

        assert await store.count() == 5
        assert await store.find(skip=1, limit=2) == sample_records[1:3]
        assert await store.find(skip=3) == sample_records[3:]

    @pytest.mark.asyncio
    async def test_load_frame_projection(self, sample_records):
        store = InMemoryCustomerStore(sample_records)

        frame = await store.load_frame(["email", "birth_year"])

        assert frame.columns == ["email", "birth_year"]
        assert frame["birth_year"].to_list() == [1990, 1990, 1985, None, 2001]

    @pytest.mark.asyncio
    async def test_unknown_column(self, sample_records):
        store = InMemoryCustomerStore(sample_records)
        with pytest.raises(ValueError):
            await store.load_frame(["shoe_size"])


class TestSQLAlchemyStore:
    """Tests for SQLAlchemyCustomerStore"""

    @pytest.mark.asyncio
    async def test_count_and_order(self, populated_session):
        store = SQLAlchemyCustomerStore(populated_session)

        records = await store.find()

        assert await store.count() == 5
        assert all(isinstance(r, CustomerRecord) for r in records)
        assert [r.sequence_index for r in records] == [0, 1, 2, 3, 4]
        assert records[0].created_at is not None

    @pytest.mark.asyncio
    async def test_find_window(self, populated_session):
        store = SQLAlchemyCustomerStore(populated_session)

        records = await store.find(skip=2, limit=2)

        assert [r.email for r in records] == ["b@x.com", "c@x.com"]

    @pytest.mark.asyncio
    async def test_load_frame_in_insertion_order(self, populated_session):
        store = SQLAlchemyCustomerStore(populated_session)

        frame = await store.load_frame(["customer_id", "email"])

        assert frame.columns == ["customer_id", "email"]
        assert frame["customer_id"].to_list() == [1, 1, 2, 3, 2]

    @pytest.mark.asyncio
    async def test_empty_table(self, db_session):
        store = SQLAlchemyCustomerStore(db_session)

        assert await store.count() == 0
        assert (await store.load_frame(["email"])).height == 0

    @pytest.mark.asyncio
    async def test_engine_matches_in_memory(self, populated_session, sample_records):
        sql_engine = StatisticsEngine(SQLAlchemyCustomerStore(populated_session), current_year=2024)
        memory_engine = StatisticsEngine(InMemoryCustomerStore(sample_records), current_year=2024)

        for key in DedupKey:
            assert await sql_engine.summary_stats(key) == await memory_engine.summary_stats(key)
        assert await sql_engine.correlation_stats() == await memory_engine.correlation_stats()
