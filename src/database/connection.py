"""
Database Connection Management

Async database connection handling with SQLAlchemy 2.0.
Implements engine setup, health checks, and graceful shutdown.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from src.config import get_settings
from src.database.models import Base

logger = structlog.get_logger(__name__)

# Global engine and session factory
_engine: Optional[AsyncEngine] = None
_async_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


async def init_database(url: Optional[str] = None, create_tables: bool = True) -> AsyncEngine:
    """
    Initialize the database engine and session factory.

    Args:
        url: Override the configured database URL
        create_tables: Create missing tables after connecting

    Returns:
        AsyncEngine: The initialized database engine
    """
    global _engine, _async_session_factory

    if _engine is not None:
        logger.warning("Database already initialized")
        return _engine

    settings = get_settings()
    database_url = url or settings.database.url

    engine_config = {
        "echo": settings.database.echo,
        "pool_pre_ping": settings.database.pool_pre_ping,
    }

    # SQLite keeps the default pool; an in-memory database lives on its connection
    if not database_url.startswith("sqlite"):
        engine_config["poolclass"] = NullPool

    _engine = create_async_engine(database_url, **engine_config)

    _async_session_factory = async_sessionmaker(
        bind=_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    try:
        async with _engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            if create_tables:
                await conn.run_sync(Base.metadata.create_all)
        logger.info(
            "Database connection established",
            dialect=_engine.dialect.name,
            create_tables=create_tables,
        )
    except Exception as e:
        logger.error("Failed to connect to database", error=str(e))
        await _engine.dispose()
        _engine = None
        _async_session_factory = None
        raise

    return _engine


async def close_database() -> None:
    """Dispose of the engine and drop the session factory."""
    global _engine, _async_session_factory

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _async_session_factory = None
        logger.info("Database connection pool closed")


def get_engine() -> AsyncEngine:
    """
    Get the database engine.

    Raises:
        RuntimeError: If database is not initialized
    """
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return _engine


@asynccontextmanager
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Get a database session.

    Context manager that provides a database session and handles
    commit/rollback/close automatically.

    Example:
        async with get_db() as db:
            result = await db.execute(query)
    """
    if _async_session_factory is None:
        logger.error("Database not initialized when get_db() called")
        raise RuntimeError("Database not initialized. Call init_database() first.")

    session = _async_session_factory()
    try:
        yield session
        await session.commit()
    except Exception as e:
        logger.error("Database session error, rolling back", error=str(e), error_type=type(e).__name__)
        await session.rollback()
        raise
    finally:
        await session.close()


async def get_db_dependency() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for database sessions.

    Example:
        @router.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db_dependency)):
            ...
    """
    async with get_db() as session:
        yield session


async def check_database_health() -> dict:
    """
    Check database health status.

    Returns:
        dict: Health status with latency information
    """
    try:
        start = time.perf_counter()
        async with get_db() as db:
            await db.execute(text("SELECT 1"))
        latency_ms = (time.perf_counter() - start) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(latency_ms, 2),
            "dialect": get_engine().dialect.name,
        }
    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e),
        }
