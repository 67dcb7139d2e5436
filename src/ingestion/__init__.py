"""
Data Ingestion Module
"""
from .csv_loader import CustomerCsvLoader, LoadResult, LoadStatus

__all__ = [
    "CustomerCsvLoader",
    "LoadResult",
    "LoadStatus",
]
