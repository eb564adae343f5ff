"""Reference metal rate service backed by GoldAPI + Redis cache.

The repricer treats the metal rate as a plain input to
PricingConfig.base_price_per_unit_weight. This module only provides a one-shot
lookup for operators:
- Fetch the latest 24k per-gram price from GoldAPI
- Cache it in Redis for ~5 minutes
- Suggest a base price with the configured premium applied

If Redis is unavailable (e.g. tests / local minimal env), the service still works
but skips caching.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
import time
from typing import Any

import httpx

from repricer.settings import get_settings
from repricer.stores.redis import get_metal_rate_cache, set_metal_rate_cache

logger = logging.getLogger("uvicorn.error")

GOLDAPI_BASE_URL = "https://www.goldapi.io/api"


@dataclass(frozen=True)
class MetalRate:
    symbol: str
    currency: str
    timestamp: int
    price_gram_24k: float


class MetalRateError(RuntimeError):
    pass


async def get_latest_metal_rate(
    symbol: str | None = None,
    currency: str | None = None,
    *,
    force_refresh: bool = False,
) -> MetalRate:
    """Get the latest metal rate, using Redis cache when available.

    Args:
        symbol: Metal symbol (default: settings.metal_rate_symbol, e.g. "XAU").
        currency: Quote currency (default: settings.metal_rate_currency, e.g. "INR").
        force_refresh: If True, bypass Redis cache and fetch from API once.
    """
    settings = get_settings()
    symbol = (symbol or settings.metal_rate_symbol).upper()
    currency = (currency or settings.metal_rate_currency).upper()

    if not force_refresh:
        cached = await _try_get_cached_rate(symbol, currency)
        if cached is not None:
            logger.info(f"Metal rate loaded from cache: {symbol}/{currency}={cached.price_gram_24k}")
            return cached

    logger.info(f"Metal rate cache miss, fetching {symbol}/{currency} from GoldAPI...")
    fetched = await _fetch_goldapi_latest(symbol, currency)
    rate = _parse_goldapi_latest(fetched, symbol=symbol, currency=currency)
    logger.info(f"Metal rate fetched: {symbol}/{currency} price_gram_24k={rate.price_gram_24k}")

    await _try_set_cached_rate(rate)
    return rate


def suggested_base_price(rate: MetalRate, premium: float | None = None) -> float:
    """Per-gram base price with the premium applied (default: settings.metal_rate_premium)."""
    if premium is None:
        premium = get_settings().metal_rate_premium
    return rate.price_gram_24k + premium * rate.price_gram_24k


async def _try_get_cached_rate(symbol: str, currency: str) -> MetalRate | None:
    try:
        payload = await get_metal_rate_cache(symbol, currency)
    except RuntimeError:
        return None
    if not payload:
        return None

    try:
        price = float(payload.get("price_gram_24k", 0))
        if not price > 0:
            return None
        return MetalRate(
            symbol=symbol,
            currency=currency,
            timestamp=int(payload.get("timestamp", 0)),
            price_gram_24k=price,
        )
    except (TypeError, ValueError):
        return None


async def _try_set_cached_rate(rate: MetalRate) -> None:
    payload: dict[str, Any] = {"timestamp": rate.timestamp, "price_gram_24k": rate.price_gram_24k}
    try:
        await set_metal_rate_cache(rate.symbol, rate.currency, payload)
    except RuntimeError:
        # Redis may be unavailable in tests/local minimal env.
        return


async def _fetch_goldapi_latest(symbol: str, currency: str) -> dict[str, Any]:
    settings = get_settings()
    token = settings.goldapi_key
    if not token:
        logger.error("GOLDAPI_KEY is not set - cannot fetch metal rate")
        raise MetalRateError("GOLDAPI_KEY is not set")

    url = f"{GOLDAPI_BASE_URL}/{symbol}/{currency}"
    headers = {"x-access-token": token, "Content-Type": "application/json"}

    async with httpx.AsyncClient(timeout=15.0) as client:
        resp = await client.get(url, headers=headers)
        if resp.status_code != 200:
            logger.error(f"GoldAPI error: {resp.status_code} - {resp.text[:200]}")
            raise MetalRateError(f"Failed to fetch metal rate (HTTP {resp.status_code})")
        data = resp.json()
        if not isinstance(data, dict):
            raise MetalRateError("Unexpected response from GoldAPI")
        return data


def _parse_goldapi_latest(data: dict[str, Any], *, symbol: str, currency: str) -> MetalRate:
    if data.get("error"):
        raise MetalRateError(f"GoldAPI error: {data['error']}")

    raw = data.get("price_gram_24k")
    try:
        price = float(raw)
    except (TypeError, ValueError):
        raise MetalRateError("Missing price_gram_24k in GoldAPI response")
    if math.isnan(price) or not price > 0:
        raise MetalRateError(f"Invalid price_gram_24k in GoldAPI response: {raw!r}")

    timestamp = data.get("timestamp")
    if not isinstance(timestamp, int):
        timestamp = int(time.time())

    return MetalRate(
        symbol=str(data.get("metal", symbol)).upper(),
        currency=str(data.get("currency", currency)).upper(),
        timestamp=timestamp,
        price_gram_24k=price,
    )
