"""Repricing orchestrator: product batch -> priced variants -> catalog writes.

Flow per product:
1. Aggregate gem cost from the product's gem slots
2. Classify each variant (finish + purity) and compose its prices
3. Push variant prices through the CatalogGateway
4. Persist the aggregate gem cost back onto the product as an attribute

Concurrency:
- Products are processed in fixed-size groups (default: settings.reprice_group_size).
- Groups run strictly in order; products inside a group run concurrently.
- A group's catalog writes fully resolve before the next group starts.

Failure policy:
- Invalid configuration fails the whole run before any product is touched.
- Any other failure (exception, catalog user error) is recorded for that
  product only; its results are dropped and the batch continues.
- Each product keeps its own trace buffer, merged in input order after its
  group completes.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Sequence
from uuid import uuid4

from repricer.services.attributes import ParseDiagnostic
from repricer.services.catalog import CatalogGateway, Product, UserError
from repricer.services.classifier import VariantClassifier
from repricer.services.pricing import (
    PriceResult,
    PricingConfig,
    PricingConfigError,
    format_money,
    price_product,
)
from repricer.settings import get_settings

logger = logging.getLogger("uvicorn.error")

SUCCESS_MESSAGE = "Product prices updated successfully"
GEM_COST_VALUE_TYPE = "number_decimal"


@dataclass
class ProductReport:
    """Outcome of one product's pipeline."""

    product_id: str
    title: str
    results: list[PriceResult] = field(default_factory=list)
    trace: list[str] = field(default_factory=list)
    diagnostics: list[ParseDiagnostic] = field(default_factory=list)
    error: str | None = None


@dataclass
class PricingOutcome:
    """Aggregated outcome of a repricing run."""

    run_id: str
    updated_variants: list[PriceResult] = field(default_factory=list)
    trace: list[str] = field(default_factory=list)
    per_product_error: dict[str, str] = field(default_factory=dict)
    diagnostics: list[ParseDiagnostic] = field(default_factory=list)
    products_processed: int = 0
    groups: int = 0

    @property
    def success(self) -> bool:
        return not self.per_product_error

    @property
    def message(self) -> str:
        if self.success:
            return SUCCESS_MESSAGE
        return f"Error updating prices: {', '.join(self.per_product_error.values())}"


def chunked(products: Sequence[Product], size: int) -> list[list[Product]]:
    if size < 1:
        raise PricingConfigError(f"Invalid group size: {size} (must be >= 1)")
    return [list(products[i : i + size]) for i in range(0, len(products), size)]


def _join_user_errors(errors: list[UserError]) -> str:
    return ", ".join(e.message for e in errors)


async def reprice_product(
    product: Product,
    config: PricingConfig,
    gateway: CatalogGateway,
    classifier: VariantClassifier | None = None,
) -> ProductReport:
    """Price one product and write the results through the gateway.

    Never raises: failures are captured on the returned report.
    """
    settings = get_settings()
    report = ProductReport(product_id=product.id, title=product.title)

    try:
        pricing = price_product(
            product,
            config,
            classifier=classifier,
            trace=report.trace,
            diagnostics=report.diagnostics,
            namespace=settings.attribute_namespace,
        )
        if not pricing.results:
            return report

        updates = [r.to_update() for r in pricing.results]
        user_errors = await gateway.update_variant_prices(product.id, updates)
        if user_errors:
            report.error = _join_user_errors(user_errors)
            report.trace.append(f'Error updating variants for product "{product.title}": {report.error}')
            return report

        gem_value = format_money(pricing.gem_cost.total)
        attr_errors = await gateway.set_product_attribute(
            product.id,
            settings.attribute_namespace,
            settings.gem_cost_attribute_key,
            gem_value,
            GEM_COST_VALUE_TYPE,
        )
        if attr_errors:
            report.error = _join_user_errors(attr_errors)
            report.trace.append(
                f"Error updating attribute {settings.gem_cost_attribute_key} "
                f'for product "{product.title}": {report.error}'
            )
            return report

        report.results = pricing.results
    except Exception as e:
        logger.exception(f"[reprice] product failed product_id={product.id}")
        report.error = f"Update error: {e}"
        report.trace.append(f'Update error for product "{product.title}": {e}')

    return report


async def run_repricing(
    products: Sequence[Product],
    config: PricingConfig,
    gateway: CatalogGateway,
    group_size: int | None = None,
    classifier: VariantClassifier | None = None,
) -> PricingOutcome:
    """Reprice a product batch in ordered groups of concurrent products.

    Args:
        products: Catalog snapshot to reprice.
        config: Pricing configuration (validated before any work).
        gateway: Catalog write side.
        group_size: Products per concurrent group (default: settings.reprice_group_size).
        classifier: Variant classifier (default: structured tags, title fallback).

    Returns:
        PricingOutcome with results of successful products, merged trace and errors.

    Raises:
        PricingConfigError: if the configuration or group size is invalid.
    """
    config.validate()
    size = group_size if group_size is not None else get_settings().reprice_group_size
    groups = chunked(products, size)

    outcome = PricingOutcome(run_id=str(uuid4()))
    logger.info(
        f"[reprice] start run_id={outcome.run_id} products={len(products)} "
        f"groups={len(groups)} group_size={size}"
    )

    for group in groups:
        reports = await asyncio.gather(
            *(reprice_product(p, config, gateway, classifier=classifier) for p in group)
        )
        outcome.groups += 1
        for report in reports:
            outcome.products_processed += 1
            outcome.trace.extend(report.trace)
            outcome.diagnostics.extend(report.diagnostics)
            if report.error is not None:
                outcome.per_product_error[report.product_id] = report.error
                continue
            outcome.updated_variants.extend(report.results)

    if outcome.success:
        logger.info(
            f"[reprice] done run_id={outcome.run_id} updated_variants={len(outcome.updated_variants)} "
            f"parse_diagnostics={len(outcome.diagnostics)}"
        )
    else:
        logger.warning(
            f"[reprice] done with errors run_id={outcome.run_id} "
            f"failed_products={len(outcome.per_product_error)} updated_variants={len(outcome.updated_variants)}"
        )
    return outcome
