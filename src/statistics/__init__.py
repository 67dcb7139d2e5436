"""
Statistics Module

Deduplicating aggregation engine behind the customer reports.
"""
from .dedup import DedupKey, DedupStrategy, STRATEGIES, deduplicate, get_strategy
from .engine import StatisticsEngine, normalize_page_params
from .errors import StatisticsError
from .records import CustomerRecord, records_to_frame
from .reducers import GroupCount, SortMode, group_count, with_percentages
from .store import CustomerStore, InMemoryCustomerStore, SQLAlchemyCustomerStore

__all__ = [
    "DedupKey",
    "DedupStrategy",
    "STRATEGIES",
    "deduplicate",
    "get_strategy",
    "StatisticsEngine",
    "normalize_page_params",
    "StatisticsError",
    "CustomerRecord",
    "records_to_frame",
    "GroupCount",
    "SortMode",
    "group_count",
    "with_percentages",
    "CustomerStore",
    "InMemoryCustomerStore",
    "SQLAlchemyCustomerStore",
]
