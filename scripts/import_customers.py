#!/usr/bin/env python
"""
Customer CSV Import

Loads the visit/login export into the record store.
Usage:
    python scripts/import_customers.py Dataset.csv
    python scripts/import_customers.py Dataset.csv --batch-size 500
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import structlog

from src.config import get_settings
from src.config.logging import configure_logging
from src.database.connection import close_database, init_database
from src.ingestion import CustomerCsvLoader, LoadStatus
from src.serving.cache import close_redis, init_redis, report_cache

logger = structlog.get_logger(__name__)


async def run_import(csv_path: str, batch_size: int) -> LoadStatus:
    settings = get_settings()
    await init_database()
    try:
        result = await CustomerCsvLoader(batch_size=batch_size).load(csv_path)
    finally:
        await close_database()

    # Reports computed before the import are stale now
    if settings.redis.enabled and result.rows_loaded:
        await init_redis()
        try:
            removed = await report_cache.invalidate_all()
            logger.info("Report cache invalidated", keys=removed)
        finally:
            await close_redis()

    print(result.model_dump_json(indent=2))
    return result.status


def main() -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Import customer visit records from CSV")
    parser.add_argument(
        "csv_path",
        nargs="?",
        default=settings.ingestion.csv_path,
        help=f"CSV file to import (default: {settings.ingestion.csv_path})",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=settings.ingestion.batch_size,
        help=f"Rows per insert batch (default: {settings.ingestion.batch_size})",
    )
    args = parser.parse_args()

    configure_logging()
    status = asyncio.run(run_import(args.csv_path, args.batch_size))
    return 0 if status != LoadStatus.FAILED else 1


if __name__ == "__main__":
    sys.exit(main())
