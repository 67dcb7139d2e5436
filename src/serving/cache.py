"""
Redis Report Cache

Optional caching of assembled reports:
- Connection pooling
- JSON serialization
- TTL management
- Namespace invalidation after imports

The cache is best-effort. When Redis is disabled, not initialized or
failing, reports are computed from the store.
"""

import json
from datetime import timedelta
from typing import Any, Awaitable, Callable, Optional, Union

import structlog
from fastapi.encoders import jsonable_encoder
from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from src.config import get_settings

logger = structlog.get_logger(__name__)

_redis_pool: Optional[ConnectionPool] = None
_redis_client: Optional[Redis] = None


async def init_redis() -> Redis:
    """Initialize Redis connection pool"""
    global _redis_pool, _redis_client

    if _redis_client is not None:
        return _redis_client

    settings = get_settings()
    _redis_pool = ConnectionPool.from_url(
        settings.redis.get_url(),
        max_connections=settings.redis.max_connections,
        socket_timeout=settings.redis.socket_timeout,
        decode_responses=True,
    )
    _redis_client = Redis(connection_pool=_redis_pool)

    try:
        await _redis_client.ping()
        logger.info("Redis connection established")
    except RedisError as e:
        logger.error("Redis connection failed", error=str(e))
        await close_redis()
        raise

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection pool"""
    global _redis_pool, _redis_client

    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None

    if _redis_pool:
        await _redis_pool.disconnect()
        _redis_pool = None

    logger.info("Redis connection closed")


def get_redis() -> Redis:
    """Get Redis client instance"""
    if _redis_client is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis_client


def is_redis_ready() -> bool:
    return _redis_client is not None


async def cache_get(key: str) -> Optional[Any]:
    """Get a JSON value from cache, None if missing."""
    value = await get_redis().get(key)
    if value is None:
        return None
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


async def cache_set(
    key: str,
    value: Any,
    ttl: Optional[Union[int, timedelta]] = None,
) -> bool:
    """
    Set value in cache.

    Args:
        key: Cache key
        value: Value to cache (will be JSON serialized)
        ttl: Time-to-live in seconds or timedelta
    """
    client = get_redis()

    try:
        serialized = json.dumps(value, default=str)
    except (TypeError, ValueError) as e:
        logger.warning("Failed to serialize value for cache", key=key, error=str(e))
        return False

    if ttl:
        if isinstance(ttl, timedelta):
            ttl = int(ttl.total_seconds())
        await client.setex(key, ttl, serialized)
    else:
        await client.set(key, serialized)

    return True


async def cache_delete_pattern(pattern: str) -> int:
    """Delete all keys matching pattern"""
    client = get_redis()
    keys = [key async for key in client.scan_iter(match=pattern)]
    if not keys:
        return 0
    return await client.delete(*keys)


class CacheManager:
    """
    Cache manager with namespace support.

    Example:
        cache = CacheManager("customer-reports")
        report = await cache.get_or_compute("summary:email", compute_summary)
    """

    def __init__(self, namespace: str, default_ttl: int = 600):
        self.namespace = namespace
        self.default_ttl = default_ttl

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def get(self, key: str) -> Optional[Any]:
        return await cache_get(self._key(key))

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        return await cache_set(self._key(key), value, ttl or self.default_ttl)

    async def invalidate_all(self) -> int:
        """Invalidate all keys in namespace"""
        return await cache_delete_pattern(f"{self.namespace}:*")

    async def get_or_compute(
        self,
        key: str,
        compute: Callable[[], Awaitable[Any]],
    ) -> Any:
        """
        Return the cached payload or compute, encode and store it.

        Cache errors are logged and bypassed; errors from ``compute``
        propagate unchanged.
        """
        if not is_redis_ready():
            return await compute()

        try:
            cached = await self.get(key)
        except RedisError as e:
            logger.warning("Cache read failed", key=key, error=str(e))
            cached = None
        if cached is not None:
            logger.debug("Cache hit", key=key)
            return cached

        payload = jsonable_encoder(await compute())
        try:
            await self.set(key, payload)
        except RedisError as e:
            logger.warning("Cache write failed", key=key, error=str(e))
        return payload


report_cache = CacheManager(
    "customer-reports",
    default_ttl=get_settings().redis.report_ttl_seconds,
)
