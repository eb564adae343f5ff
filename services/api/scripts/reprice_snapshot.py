#!/usr/bin/env python3
"""Dry-run reprice of a saved catalog snapshot.

Reads a catalog fetch payload (JSON: product list, products connection, or a
full GraphQL response) and prints the computed prices, errors and trace.
Nothing is written to the catalog.

Run (local):
  cd services/api
  python -m scripts.reprice_snapshot snapshot.json

Optional env vars:
  BASE_PRICE=8830            (default: live metal rate + premium)
  MAKING_CHARGE=1200
  GEM_PRICES_FILE=gems.json  (JSON object: gem type -> unit price)
  REPRICE_GROUP_SIZE=5
  SHOW_TRACE=1
"""

import asyncio
import json
import os
import sys


# Ensure imports work when executed as a script/module
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from repricer.services.catalog import DryRunCatalogGateway, parse_products  # noqa: E402
from repricer.services.metal_rates import get_latest_metal_rate, suggested_base_price  # noqa: E402
from repricer.services.pricing import DEFAULT_MAKING_CHARGE_PER_UNIT_WEIGHT, PricingConfig  # noqa: E402
from repricer.services.repricing import run_repricing  # noqa: E402
from repricer.stores.redis import close_redis, init_redis  # noqa: E402


def _load_json(path: str) -> object:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


async def _resolve_base_price() -> float:
    raw = os.getenv("BASE_PRICE", "")
    if raw.strip():
        return float(raw)
    try:
        await init_redis()
    except Exception:
        # Lookup still works without Redis, just uncached.
        pass
    rate = await get_latest_metal_rate()
    return suggested_base_price(rate)


async def main(snapshot_path: str) -> int:
    try:
        products = parse_products(_load_json(snapshot_path))
        base_price = await _resolve_base_price()
        making_charge = float(os.getenv("MAKING_CHARGE", str(DEFAULT_MAKING_CHARGE_PER_UNIT_WEIGHT)))
        gem_prices_file = os.getenv("GEM_PRICES_FILE", "")
        gem_prices = _load_json(gem_prices_file) if gem_prices_file else None
        group_size = int(os.getenv("REPRICE_GROUP_SIZE", "5"))

        config = PricingConfig.with_defaults(
            base_price_per_unit_weight=base_price,
            making_charge_per_unit_weight=making_charge,
            gem_unit_prices=gem_prices,
        )
        gateway = DryRunCatalogGateway()
        outcome = await run_repricing(products, config, gateway, group_size=group_size)
    finally:
        await close_redis()

    if os.getenv("SHOW_TRACE", "1") not in ("0", "false", "no"):
        for line in outcome.trace:
            print(line)

    print(
        {
            "ok": outcome.success,
            "message": outcome.message,
            "base_price": base_price,
            "products": outcome.products_processed,
            "updated_variants": [
                {"id": r.variant_id, "price": r.final_price, "compareAtPrice": r.compare_at_price}
                for r in outcome.updated_variants
            ],
            "gem_costs": {w.product_id: w.value for w in gateway.attribute_writes},
            "errors": outcome.per_product_error,
            "parse_diagnostics": len(outcome.diagnostics),
        }
    )
    return 0 if outcome.success else 1


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("usage: python -m scripts.reprice_snapshot <snapshot.json>", file=sys.stderr)
        sys.exit(2)
    sys.exit(asyncio.run(main(sys.argv[1])))
