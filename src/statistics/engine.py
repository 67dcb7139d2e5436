"""
Statistics Engine

Entry points for every customer report. Each call is one independent,
read-only pass over the store:

    store -> projected frame -> dedup strategy -> reducers -> report

Any fault while querying or reducing is logged and re-raised as
:class:`StatisticsError`; a report is either complete or not returned.
"""

import math
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, TypeVar, Union

import polars as pl
import structlog

from src.statistics import reports
from src.statistics.dedup import DedupKey, DedupStrategy, deduplicate, required_columns, resolve_key
from src.statistics.derived import resolve_current_year
from src.statistics.errors import StatisticsError
from src.statistics.schemas import (
    AgeGroupStat,
    CorrelationReport,
    CustomerOut,
    CustomerPage,
    DeviceStat,
    InterestStat,
    LocationStat,
    LoginHourStat,
    SummaryReport,
)
from src.statistics.store import CustomerStore

logger = structlog.get_logger(__name__)

T = TypeVar("T")
KeyParam = Optional[Union[DedupKey, str]]

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def normalize_page_params(
    page: Any,
    limit: Any,
    default_limit: int = DEFAULT_PAGE_SIZE,
    max_limit: int = MAX_PAGE_SIZE,
) -> Tuple[int, int]:
    """
    Lenient pagination parsing.

    Non-numeric or non-positive values fall back to the defaults and the
    page size is clamped to ``max_limit``.
    """
    def _parse(value: Any, default: int) -> int:
        try:
            parsed = int(str(value).strip())
        except (TypeError, ValueError):
            return default
        return parsed if parsed >= 1 else default

    return _parse(page, DEFAULT_PAGE), min(_parse(limit, default_limit), max_limit)


class StatisticsEngine:
    """
    Deduplicating statistics aggregation over a customer store.

    Example:
        engine = StatisticsEngine(InMemoryCustomerStore(records), current_year=2024)
        genders = await engine.gender_stats(DedupKey.EMAIL)
    """

    def __init__(
        self,
        store: CustomerStore,
        current_year: Optional[int] = None,
        scatter_limit: int = 1000,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: int = MAX_PAGE_SIZE,
        gender_dedup_key: Union[DedupKey, str] = DedupKey.EMAIL,
        summary_dedup_key: Union[DedupKey, str] = DedupKey.EMAIL,
    ):
        self.store = store
        self.current_year = current_year
        self.scatter_limit = scatter_limit
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size
        self.gender_dedup_key = DedupKey(gender_dedup_key)
        self.summary_dedup_key = DedupKey(summary_dedup_key)

    @classmethod
    def from_settings(cls, store: CustomerStore, settings: Any) -> "StatisticsEngine":
        """Build an engine from the ``statistics`` settings section."""
        return cls(
            store,
            current_year=settings.current_year,
            scatter_limit=settings.scatter_limit,
            default_page_size=settings.default_page_size,
            max_page_size=settings.max_page_size,
            gender_dedup_key=settings.gender_dedup_key,
            summary_dedup_key=settings.summary_dedup_key,
        )

    @property
    def year(self) -> int:
        return resolve_current_year(self.current_year)

    async def _run(self, report: str, compute: Callable[[], Awaitable[T]], **context: Any) -> T:
        log = logger.bind(report=report, **context)
        start = time.perf_counter()
        try:
            result = await compute()
        except Exception as e:
            log.error("Report computation failed", error=str(e), error_type=type(e).__name__)
            raise StatisticsError(report) from e
        log.info("Report computed", duration_ms=round((time.perf_counter() - start) * 1000, 2))
        return result

    async def _population(self, strategy: DedupStrategy, *fields: str) -> pl.DataFrame:
        frame = await self.store.load_frame(required_columns(strategy, *fields))
        return deduplicate(frame, strategy)

    async def list_customers(self, page: Any = None, limit: Any = None) -> CustomerPage:
        """Paginated raw records, 1-indexed, in insertion order."""
        page_num, limit_num = normalize_page_params(
            page, limit, self.default_page_size, self.max_page_size
        )

        async def compute() -> CustomerPage:
            total = await self.store.count()
            records = await self.store.find(skip=(page_num - 1) * limit_num, limit=limit_num)
            return CustomerPage(
                page=page_num,
                limit=limit_num,
                total_items=total,
                total_pages=math.ceil(total / limit_num),
                data=[CustomerOut.model_validate(record, from_attributes=True) for record in records],
            )

        return await self._run("customers", compute, page=page_num, limit=limit_num)

    async def gender_stats(self, dedup: KeyParam = None) -> Dict[str, int]:
        strategy = resolve_key(dedup, self.gender_dedup_key)

        async def compute() -> Dict[str, int]:
            return reports.gender_breakdown(await self._population(strategy, "gender"))

        return await self._run("gender", compute, dedup=strategy.name)

    async def age_group_stats(self) -> List[AgeGroupStat]:
        async def compute() -> List[AgeGroupStat]:
            frame = await self.store.load_frame(["birth_year"])
            return reports.age_group_report(frame, self.year)

        return await self._run("age-groups", compute)

    async def digital_interest_stats(self, dedup: KeyParam = None) -> List[InterestStat]:
        strategy = resolve_key(dedup, DedupKey.NONE)

        async def compute() -> List[InterestStat]:
            return reports.digital_interest_report(
                await self._population(strategy, "digital_interest")
            )

        return await self._run("digital-interests", compute, dedup=strategy.name)

    async def device_stats(self, dedup: KeyParam = None) -> List[DeviceStat]:
        strategy = resolve_key(dedup, DedupKey.NONE)

        async def compute() -> List[DeviceStat]:
            return reports.device_report(await self._population(strategy, "device"))

        return await self._run("devices", compute, dedup=strategy.name)

    async def location_stats(self) -> List[LocationStat]:
        async def compute() -> List[LocationStat]:
            frame = await self.store.load_frame(["location_type", "location_name"])
            return reports.location_report(frame)

        return await self._run("locations", compute)

    async def login_hour_stats(self) -> List[LoginHourStat]:
        async def compute() -> List[LoginHourStat]:
            frame = await self.store.load_frame(["login_hour"])
            return reports.login_hour_report(frame)

        return await self._run("login-hours", compute)

    async def correlation_stats(self) -> CorrelationReport:
        async def compute() -> CorrelationReport:
            frame = await self.store.load_frame(
                ["birth_year", "gender", "device", "digital_interest", "location_type"]
            )
            return reports.correlation_report(frame, self.year, self.scatter_limit)

        return await self._run("correlation", compute)

    async def summary_stats(self, dedup: KeyParam = None) -> SummaryReport:
        strategy = resolve_key(dedup, self.summary_dedup_key)

        async def compute() -> SummaryReport:
            frame = await self.store.load_frame(reports.SUMMARY_COLUMNS)
            return reports.summary_report(frame, strategy, self.year)

        return await self._run("summary", compute, dedup=strategy.name)
