"""
Customers API Endpoints

Raw customer listing and the customer statistics reports.
"""

from typing import Dict, List, Optional

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import get_settings
from src.database.connection import get_db_dependency
from src.serving.cache import report_cache
from src.statistics import DedupKey, SQLAlchemyCustomerStore, StatisticsEngine
from src.statistics.schemas import (
    AgeGroupStat,
    CorrelationReport,
    CustomerPage,
    DeviceStat,
    InterestStat,
    LocationStat,
    LoginHourStat,
    SummaryReport,
)

router = APIRouter()
logger = structlog.get_logger(__name__)

DEDUP_DESCRIPTION = "Deduplication key: none, customerId, email, fullName or nameEmail"


def get_statistics_engine(
    db: AsyncSession = Depends(get_db_dependency),
) -> StatisticsEngine:
    """FastAPI dependency: an engine over the request's database session."""
    return StatisticsEngine.from_settings(
        SQLAlchemyCustomerStore(db),
        get_settings().statistics,
    )


def _cache_key(report: str, dedup: Optional[DedupKey] = None) -> str:
    return f"{report}:{dedup.value}" if dedup else f"{report}:default"


@router.get("", response_model=CustomerPage)
async def list_customers(
    page: Optional[str] = Query(None, description="1-indexed page number"),
    limit: Optional[str] = Query(None, description="Page size"),
    engine: StatisticsEngine = Depends(get_statistics_engine),
) -> CustomerPage:
    """List raw customer records."""
    return await engine.list_customers(page, limit)


@router.get("/statistics/gender", response_model=Dict[str, int])
async def get_gender_stats(
    dedup: Optional[DedupKey] = Query(None, description=DEDUP_DESCRIPTION),
    engine: StatisticsEngine = Depends(get_statistics_engine),
):
    """Gender breakdown."""
    return await report_cache.get_or_compute(
        _cache_key("gender", dedup),
        lambda: engine.gender_stats(dedup),
    )


@router.get("/statistics/age-groups", response_model=List[AgeGroupStat])
async def get_age_group_stats(
    engine: StatisticsEngine = Depends(get_statistics_engine),
):
    """Age-group distribution with average age and birth year per group."""
    return await report_cache.get_or_compute("age-groups", engine.age_group_stats)


@router.get("/statistics/digital-interests", response_model=List[InterestStat])
async def get_digital_interest_stats(
    dedup: Optional[DedupKey] = Query(None, description=DEDUP_DESCRIPTION),
    engine: StatisticsEngine = Depends(get_statistics_engine),
):
    """Digital-interest popularity with percentages."""
    return await report_cache.get_or_compute(
        _cache_key("digital-interests", dedup),
        lambda: engine.digital_interest_stats(dedup),
    )


@router.get("/statistics/devices", response_model=List[DeviceStat])
async def get_device_stats(
    dedup: Optional[DedupKey] = Query(None, description=DEDUP_DESCRIPTION),
    engine: StatisticsEngine = Depends(get_statistics_engine),
):
    """Device usage."""
    return await report_cache.get_or_compute(
        _cache_key("devices", dedup),
        lambda: engine.device_stats(dedup),
    )


@router.get("/statistics/locations", response_model=List[LocationStat])
async def get_location_stats(
    engine: StatisticsEngine = Depends(get_statistics_engine),
):
    """Location-type distribution with distinct location counts."""
    return await report_cache.get_or_compute("locations", engine.location_stats)


@router.get("/statistics/login-hours", response_model=List[LoginHourStat])
async def get_login_hour_stats(
    engine: StatisticsEngine = Depends(get_statistics_engine),
):
    """Login-hour histogram."""
    return await report_cache.get_or_compute("login-hours", engine.login_hour_stats)


@router.get("/statistics/correlation", response_model=CorrelationReport)
async def get_correlation_stats(
    engine: StatisticsEngine = Depends(get_statistics_engine),
):
    """Age/gender correlation with a capped scatter payload."""
    return await report_cache.get_or_compute("correlation", engine.correlation_stats)


@router.get("/statistics/summary", response_model=SummaryReport)
async def get_summary_stats(
    dedup: Optional[DedupKey] = Query(None, description=DEDUP_DESCRIPTION),
    engine: StatisticsEngine = Depends(get_statistics_engine),
):
    """Dashboard summary with every dedup count variant side by side."""
    return await report_cache.get_or_compute(
        _cache_key("summary", dedup),
        lambda: engine.summary_stats(dedup),
    )
