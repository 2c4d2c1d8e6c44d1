"""
Shared redis-py async client.

Backs the market rate cache and fallback snapshot used by
``MarketRateService``. Values are JSON strings, so responses are decoded.
With ``REDIS_SSL`` set, a plain ``redis://`` URL is upgraded to ``rediss://``.
"""

import redis.asyncio as aioredis

from app.config import settings


def _redis_url() -> str:
    url = settings.REDIS_URL
    if settings.REDIS_SSL and url.startswith("redis://"):
        return "rediss://" + url[len("redis://"):]
    return url


redis = aioredis.from_url(
    _redis_url(),
    decode_responses=True,
    socket_timeout=settings.FX_RATE_TIMEOUT_SECONDS,
)


async def get_redis() -> aioredis.Redis:
    """FastAPI dependency that provides the Redis client."""
    return redis


async def close_redis() -> None:
    """Release pooled connections on shutdown."""
    await redis.aclose()
