"""Optional Redis pool for rate-limit counters and announcement pub/sub.

The API runs without Redis: when ``redis_url`` is empty the pool is never
created and callers get ``None`` from ``get_redis_or_none``.
"""

import redis.asyncio as redis
import structlog

logger = structlog.get_logger()

_pool: redis.Redis | None = None


async def init_redis(url: str, max_connections: int = 20) -> None:
    global _pool  # noqa: PLW0603
    _pool = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=max_connections,
    )
    logger.info("redis_initialized", max_connections=max_connections)


async def close_redis() -> None:
    global _pool  # noqa: PLW0603
    if _pool:
        await _pool.aclose()
        _pool = None


def get_redis_or_none() -> redis.Redis | None:
    """Return the Redis client, or None when Redis is not configured."""
    return _pool


async def redis_status() -> str:
    """Readiness of Redis: ``ok``, ``disabled`` or ``error: ...``."""
    if _pool is None:
        return "disabled"
    try:
        await _pool.ping()
    except redis.RedisError as exc:
        return f"error: {exc}"
    return "ok"
