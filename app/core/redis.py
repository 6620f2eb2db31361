"""
Shared Redis client for the cross-instance broadcast relay
"""

from typing import Optional
import logging

import redis.asyncio as redis
from redis.exceptions import RedisError

from app.config import settings

logger = logging.getLogger(__name__)

redis_client: Optional[redis.Redis] = None


async def get_redis() -> redis.Redis:
    """
    Return the shared client, connecting on first use.
    Raises RuntimeError when REDIS_URL is not configured.
    """
    global redis_client
    if redis_client is not None:
        return redis_client

    if not settings.REDIS_URL:
        raise RuntimeError("REDIS_URL must be set to enable the broadcast relay")

    client = redis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        await client.ping()
    except RedisError as e:
        logger.error(f"Redis at {settings.REDIS_URL} is unreachable: {e}")
        await client.aclose()
        raise

    redis_client = client
    logger.info("Redis connection established")
    return redis_client


async def close_redis():
    """Drop the shared client; the next get_redis() reconnects"""
    global redis_client
    if redis_client is None:
        return
    client, redis_client = redis_client, None
    await client.aclose()
    logger.info("Redis connection closed")
