"""Redis store for caching.

Handles:
- Generic caching with TTL policies
- Reference metal rate cache

TTL policies:
- Metal rate (GoldAPI): 5 minutes
"""

import json
import logging
from typing import Any

import redis.asyncio as redis

from repricer.settings import get_settings

# TTL constants (in seconds)
TTL_METAL_RATE = 300  # 5 minutes

# Key prefixes
PREFIX_METAL_RATE = "metal:rate:"

# Redis client (initialized on startup)
_redis: redis.Redis | None = None
logger = logging.getLogger("uvicorn.error")


async def init_redis() -> None:
    """Initialize Redis connection."""
    global _redis
    settings = get_settings()
    _redis = redis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
    )
    await _redis.ping()
    logger.info("Redis connected")


async def close_redis() -> None:
    """Close Redis connection."""
    global _redis
    if _redis:
        await _redis.aclose()
        _redis = None


def _get_redis() -> redis.Redis:
    """Get Redis client instance."""
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis


# ============================================================
# Generic cache operations
# ============================================================


async def cache_get(key: str) -> str | None:
    """Get value from cache.

    Args:
        key: Cache key.

    Returns:
        Cached value or None if not found.
    """
    return await _get_redis().get(key)


async def cache_set(key: str, value: str, ttl: int) -> None:
    """Set value in cache with TTL.

    Args:
        key: Cache key.
        value: Value to cache.
        ttl: Time-to-live in seconds.
    """
    await _get_redis().setex(key, ttl, value)


async def cache_get_json(key: str) -> dict[str, Any] | None:
    """Get JSON value from cache."""
    value = await cache_get(key)
    if value:
        return json.loads(value)
    return None


async def cache_set_json(key: str, value: dict[str, Any], ttl: int) -> None:
    """Set JSON value in cache."""
    await cache_set(key, json.dumps(value), ttl)


# ============================================================
# Metal rate cache (GoldAPI)
# ============================================================


async def get_metal_rate_cache(symbol: str, currency: str) -> dict[str, Any] | None:
    """Get cached metal rate payload for a symbol/currency pair."""
    return await cache_get_json(f"{PREFIX_METAL_RATE}{symbol.upper()}:{currency.upper()}")


async def set_metal_rate_cache(symbol: str, currency: str, payload: dict[str, Any]) -> None:
    """Cache metal rate payload for a symbol/currency pair (TTL 5 minutes)."""
    await cache_set_json(f"{PREFIX_METAL_RATE}{symbol.upper()}:{currency.upper()}", payload, TTL_METAL_RATE)
