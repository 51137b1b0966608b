"""Redis connection management.

When REDIS_URL is configured the record store and reminder service persist
through a shared Redis pool; when it is unset (local dev, tests) every
consumer falls back to the in-memory key-value store and no Redis server
is needed.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import redis.asyncio as aioredis

from revalpro.core.config import SETTINGS

logger = logging.getLogger(__name__)

if SETTINGS.redis_url:
    redis_pool: aioredis.Redis | None = aioredis.from_url(  # type: ignore[type-arg]
        SETTINGS.redis_url,
        decode_responses=True,
        max_connections=20,
    )
else:
    redis_pool = None


@asynccontextmanager
async def lifespan_redis():
    """Verify the pool on startup and close it on shutdown."""
    if redis_pool is None:
        logger.info("No REDIS_URL configured, records are kept in memory")
        yield
        return

    try:
        await redis_pool.ping()  # type: ignore[misc]
        logger.info("Redis connected: %s", SETTINGS.redis_url)
    except Exception:
        logger.exception("Redis connection failed on startup")
        # Start anyway; /health reports redis as degraded.
        yield
        return

    yield

    await redis_pool.aclose()
    logger.info("Redis connection pool closed")
