"""Redis connection utilities."""

from functools import lru_cache

from redis import ConnectionPool, Redis

from api.config import get_settings


def _redis_url() -> str:
    settings = get_settings()
    if settings.redis_url is None:
        raise RuntimeError("REDIS_URL is not configured")
    return str(settings.redis_url)


@lru_cache
def get_redis_pool() -> ConnectionPool:
    """Get a cached Redis connection pool."""
    return ConnectionPool.from_url(
        _redis_url(),
        decode_responses=True,
        max_connections=10,
    )


def get_redis_connection() -> Redis:
    """Get a Redis connection from the pool."""
    pool = get_redis_pool()
    return Redis(connection_pool=pool)


@lru_cache
def _get_redis_pool_bytes() -> ConnectionPool:
    """Get a cached Redis connection pool for byte-mode (RQ)."""
    return ConnectionPool.from_url(
        _redis_url(),
        decode_responses=False,
        max_connections=10,
    )


def get_redis_connection_bytes() -> Redis:
    """Get a Redis connection without decode_responses for RQ."""
    pool = _get_redis_pool_bytes()
    return Redis(connection_pool=pool)


# Queue names
QUEUE_SCANS = "citable-scans"

# Job result TTL (1 day)
JOB_RESULT_TTL = 60 * 60 * 24

# Scan job timeout; crawl + classification stay well under this
SCAN_JOB_TIMEOUT = 120
