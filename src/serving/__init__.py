"""
Serving Module
"""
from .cache import init_redis, close_redis, get_redis, is_redis_ready, report_cache

__all__ = [
    "init_redis",
    "close_redis",
    "get_redis",
    "is_redis_ready",
    "report_cache",
]
