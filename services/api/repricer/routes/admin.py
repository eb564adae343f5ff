"""Admin endpoints for repricing previews and the reference metal rate.

These endpoints are intended for operators and manual testing. Repricing here
always runs against the dry-run gateway: computed prices and attribute writes
are returned, never pushed to the catalog.
In production, consider adding authentication (API key or admin token).
"""

import logging

from fastapi import APIRouter, HTTPException

from repricer.schemas import (
    AttributeWrite,
    MetalRateResponse,
    ParseDiagnosticItem,
    RepriceDefaultsResponse,
    RepricePreviewRequest,
    RepricePreviewResponse,
    VariantPrice,
)
from repricer.services.catalog import DryRunCatalogGateway, parse_products
from repricer.services.metal_rates import MetalRateError, get_latest_metal_rate, suggested_base_price
from repricer.services.pricing import (
    DEFAULT_ALLOWED_FINISH_TAGS,
    DEFAULT_DISCOUNT_FACTORS,
    DEFAULT_GEM_UNIT_PRICES,
    DEFAULT_MAKING_CHARGE_PER_UNIT_WEIGHT,
    DEFAULT_PURITY_MULTIPLIERS,
    PricingConfig,
    PricingConfigError,
)
from repricer.services.repricing import run_repricing
from repricer.settings import get_settings

router = APIRouter()
logger = logging.getLogger("uvicorn.error")


@router.post("/reprice/preview", response_model=RepricePreviewResponse)
async def preview_reprice(request: RepricePreviewRequest) -> RepricePreviewResponse:
    """Compute new variant prices for a catalog snapshot without writing them.

    Args:
        request: Snapshot plus pricing inputs.

    Returns:
        Outcome, computed prices, recorded attribute writes and derivation trace.
    """
    try:
        products = parse_products(request.products)
    except (KeyError, TypeError, AttributeError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid product snapshot: {e}")

    base_price = request.base_price_per_unit_weight
    if base_price is None:
        try:
            rate = await get_latest_metal_rate()
        except Exception as e:
            logger.error(f"[reprice] metal rate lookup failed: {e}")
            raise HTTPException(status_code=502, detail=f"Metal rate unavailable: {e}")
        base_price = suggested_base_price(rate)

    config = PricingConfig(
        base_price_per_unit_weight=base_price,
        making_charge_per_unit_weight=(
            DEFAULT_MAKING_CHARGE_PER_UNIT_WEIGHT
            if request.making_charge_per_unit_weight is None
            else request.making_charge_per_unit_weight
        ),
        purity_multipliers=(
            dict(DEFAULT_PURITY_MULTIPLIERS) if request.purity_multipliers is None else request.purity_multipliers
        ),
        discount_factors=(
            dict(DEFAULT_DISCOUNT_FACTORS) if request.discount_factors is None else request.discount_factors
        ),
        allowed_finish_tags=(
            DEFAULT_ALLOWED_FINISH_TAGS if request.allowed_finish_tags is None else tuple(request.allowed_finish_tags)
        ),
        gem_unit_prices=dict(DEFAULT_GEM_UNIT_PRICES) if request.gem_unit_prices is None else request.gem_unit_prices,
    )

    gateway = DryRunCatalogGateway()
    try:
        outcome = await run_repricing(
            products,
            config,
            gateway,
            group_size=request.group_size,
        )
    except PricingConfigError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return RepricePreviewResponse(
        success=outcome.success,
        message=outcome.message,
        run_id=outcome.run_id,
        base_price_per_unit_weight=base_price,
        updated_variants=[
            VariantPrice(variant_id=r.variant_id, price=r.final_price, compare_at_price=r.compare_at_price)
            for r in outcome.updated_variants
        ],
        attribute_writes=[
            AttributeWrite(
                product_id=w.product_id,
                namespace=w.namespace,
                key=w.key,
                value=w.value,
                type=w.value_type,
            )
            for w in gateway.attribute_writes
        ],
        errors=outcome.per_product_error,
        diagnostics=[
            ParseDiagnosticItem(key=d.key, raw_value=d.raw_value, reason=d.reason) for d in outcome.diagnostics
        ],
        trace=outcome.trace if request.include_trace else [],
        stats={
            "products": outcome.products_processed,
            "groups": outcome.groups,
            "updated_variants": len(outcome.updated_variants),
            "failed_products": len(outcome.per_product_error),
            "parse_diagnostics": len(outcome.diagnostics),
        },
    )


@router.get("/reprice/defaults", response_model=RepriceDefaultsResponse)
async def get_reprice_defaults() -> RepriceDefaultsResponse:
    """Get the default pricing tables operators start from."""
    return RepriceDefaultsResponse(
        making_charge_per_unit_weight=DEFAULT_MAKING_CHARGE_PER_UNIT_WEIGHT,
        purity_multipliers=DEFAULT_PURITY_MULTIPLIERS,
        discount_factors=DEFAULT_DISCOUNT_FACTORS,
        allowed_finish_tags=list(DEFAULT_ALLOWED_FINISH_TAGS),
        gem_unit_prices=DEFAULT_GEM_UNIT_PRICES,
        group_size=get_settings().reprice_group_size,
    )


@router.get("/metal-rate", response_model=MetalRateResponse)
async def get_metal_rate(force_refresh: bool = False) -> MetalRateResponse:
    """Get the reference 24k per-gram metal rate and the suggested base price."""
    premium = get_settings().metal_rate_premium
    try:
        rate = await get_latest_metal_rate(force_refresh=force_refresh)
    except MetalRateError as e:
        raise HTTPException(status_code=502, detail=f"Metal rate unavailable: {e}")
    except Exception as e:
        logger.exception("[metal_rate] lookup failed")
        raise HTTPException(status_code=502, detail=f"Metal rate lookup failed: {e}")

    return MetalRateResponse(
        symbol=rate.symbol,
        currency=rate.currency,
        timestamp=rate.timestamp,
        price_gram_24k=rate.price_gram_24k,
        premium=premium,
        suggested_base_price=suggested_base_price(rate, premium),
    )
