"""
Redis connection.

Redis only holds the revoked-token list shared by all API workers, so an
outage degrades logout but never blocks bookings.
"""

import logging
import redis.asyncio as redis
from redis.exceptions import RedisError
from omnibus.app.core.config import settings

logger = logging.getLogger("omnibus.redis")


def build_redis_client() -> redis.Redis:
    return redis.from_url(
        settings.redis_url,
        decode_responses=settings.redis_decode_responses,
    )


redis_client = build_redis_client()


async def ping_redis() -> bool:
    """Return True when Redis answers a PING."""
    try:
        return bool(await redis_client.ping())
    except (RedisError, OSError) as e:
        logger.warning("Redis ping failed: %s", e)
        return False
