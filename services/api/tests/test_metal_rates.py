import pytest

from repricer.services import metal_rates
from repricer.services.metal_rates import (
    MetalRate,
    MetalRateError,
    _parse_goldapi_latest,
    get_latest_metal_rate,
    suggested_base_price,
)


def test_parse_goldapi_latest_ok():
    rate = _parse_goldapi_latest(
        {"timestamp": 1700000000, "metal": "XAU", "currency": "INR", "price_gram_24k": 6200.5},
        symbol="XAU",
        currency="INR",
    )
    assert rate.symbol == "XAU"
    assert rate.currency == "INR"
    assert rate.timestamp == 1700000000
    assert rate.price_gram_24k == 6200.5


def test_parse_goldapi_latest_missing_timestamp_uses_now():
    rate = _parse_goldapi_latest({"price_gram_24k": "6200"}, symbol="XAU", currency="INR")
    assert rate.timestamp > 0
    assert rate.price_gram_24k == 6200.0


@pytest.mark.parametrize(
    "data",
    [
        {"error": "Invalid API key"},
        {"timestamp": 1},
        {"price_gram_24k": "n/a"},
        {"price_gram_24k": 0},
    ],
)
def test_parse_goldapi_latest_rejects_bad_payloads(data):
    with pytest.raises(MetalRateError):
        _parse_goldapi_latest(data, symbol="XAU", currency="INR")


def test_suggested_base_price_applies_premium():
    rate = MetalRate(symbol="XAU", currency="INR", timestamp=1, price_gram_24k=6000.0)
    assert suggested_base_price(rate, 0.05) == pytest.approx(6300.0)
    assert suggested_base_price(rate, 0) == 6000.0


@pytest.mark.asyncio
async def test_get_latest_metal_rate_without_redis(monkeypatch: pytest.MonkeyPatch):
    calls: list[tuple[str, str]] = []

    async def fake_fetch(symbol: str, currency: str) -> dict:
        calls.append((symbol, currency))
        return {"timestamp": 1700000000, "metal": symbol, "currency": currency, "price_gram_24k": 6100}

    monkeypatch.setattr(metal_rates, "_fetch_goldapi_latest", fake_fetch)

    rate = await get_latest_metal_rate("xau", "inr")
    assert calls == [("XAU", "INR")]
    assert rate.price_gram_24k == 6100.0


@pytest.mark.asyncio
async def test_get_latest_metal_rate_prefers_cache(monkeypatch: pytest.MonkeyPatch):
    async def fake_cache(symbol: str, currency: str) -> dict:
        return {"timestamp": 1, "price_gram_24k": 5900}

    async def fail_fetch(symbol: str, currency: str) -> dict:
        raise AssertionError("should not fetch when cached")

    monkeypatch.setattr(metal_rates, "get_metal_rate_cache", fake_cache)
    monkeypatch.setattr(metal_rates, "_fetch_goldapi_latest", fail_fetch)

    rate = await get_latest_metal_rate("XAU", "INR")
    assert rate.price_gram_24k == 5900.0
