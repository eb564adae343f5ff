"""Variant price composition.

Final price of an eligible variant:

    material       = base_price * purity_multiplier * weight
    making         = making_charge * weight            (0 when weight <= 0)
    gold_and_making = material + making
    compare_at     = gold_and_making + gem_cost         (never discounted)
    final          = gold_and_making + gem_cost * discount_factor

The discount applies to the gem portion only, and only when the variant's
discount token (e.g., "10%") has a configured factor. Both outputs are rounded
half-up to 2 decimals and serialized as fixed-precision strings.

All arithmetic is Decimal built from the string form of each input, so repeated
runs over the same inputs give byte-identical strings.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping

from repricer.services.attributes import CUSTOM_NAMESPACE, ParseDiagnostic, resolve_numeric
from repricer.services.catalog import Product, Variant, VariantPriceUpdate
from repricer.services.classifier import DEFAULT_CLASSIFIER, VariantClassifier
from repricer.services.gems import GemCost, aggregate_gem_cost, to_decimal

_CENTS = Decimal("0.01")


# ============================================================
# Default tables
# ============================================================

# Purity multipliers (order matters - first match in a title wins)
DEFAULT_PURITY_MULTIPLIERS: dict[str, float] = {
    "24k": 1,
    "22k": 0.925,
    "18k": 0.76,
    "14k": 0.6,
    "9k": 0.385,
}

# Discount factors for the gem portion only
DEFAULT_DISCOUNT_FACTORS: dict[str, float] = {
    "10%": 0.9,
    "12%": 0.88,
    "15%": 0.85,
}

DEFAULT_ALLOWED_FINISH_TAGS: tuple[str, ...] = ("yellow gold", "rose gold", "white")

DEFAULT_GEM_UNIT_PRICES: dict[str, float] = {
    "Round Solitaire 5ct+": 30000,
    "Round Solitaire 3ct+": 30000,
    "Round Solitaire 2ct+": 30000,
    "Round Solitaire 0.50ct+": 30000,
    "Fancy Solitaire 5ct+": 30000,
    "Fancy Solitaire 3ct+": 30000,
    "Fancy Solitaire 2ct+": 30000,
    "Fancy Solitaire 0.5ct+": 30000,
    "Small Diamonds": 15000,
    "Gemstones": 15000,
}

DEFAULT_MAKING_CHARGE_PER_UNIT_WEIGHT = 1200.0


class PricingConfigError(ValueError):
    pass


def _is_finite(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return False
    return math.isfinite(value)


@dataclass(frozen=True)
class PricingConfig:
    """Inputs for one pricing run, supplied by the operator each run."""

    base_price_per_unit_weight: float
    making_charge_per_unit_weight: float = 0.0
    purity_multipliers: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_PURITY_MULTIPLIERS))
    discount_factors: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_DISCOUNT_FACTORS))
    allowed_finish_tags: tuple[str, ...] = DEFAULT_ALLOWED_FINISH_TAGS
    gem_unit_prices: Mapping[str, float] = field(default_factory=dict)

    def validate(self) -> None:
        """Raise PricingConfigError if the configuration cannot be priced with."""
        base = self.base_price_per_unit_weight
        if not _is_finite(base) or not base > 0:
            raise PricingConfigError(f"Invalid base price per unit weight: {base!r} (must be finite and > 0)")
        making = self.making_charge_per_unit_weight
        if not _is_finite(making) or not making >= 0:
            raise PricingConfigError(f"Invalid making charge per unit weight: {making!r} (must be finite and >= 0)")
        if not self.purity_multipliers:
            raise PricingConfigError("Purity multiplier table is empty")
        for tag, multiplier in self.purity_multipliers.items():
            if not _is_finite(multiplier) or not multiplier >= 0:
                raise PricingConfigError(
                    f"Invalid purity multiplier for {tag!r}: {multiplier!r} (must be finite and >= 0)"
                )
        if not self.allowed_finish_tags:
            raise PricingConfigError("No allowed finish tags configured")
        # Discounts only ever reduce the gem portion, so final <= compare_at
        for tag, factor in self.discount_factors.items():
            if not _is_finite(factor) or not 0 <= factor <= 1:
                raise PricingConfigError(f"Invalid discount factor for {tag!r}: {factor!r} (must be within [0, 1])")
        for gem_type, unit_price in self.gem_unit_prices.items():
            if not _is_finite(unit_price) or not unit_price >= 0:
                raise PricingConfigError(
                    f"Invalid unit price for gem {gem_type!r}: {unit_price!r} (must be finite and >= 0)"
                )

    @classmethod
    def with_defaults(
        cls,
        base_price_per_unit_weight: float,
        making_charge_per_unit_weight: float = DEFAULT_MAKING_CHARGE_PER_UNIT_WEIGHT,
        gem_unit_prices: Mapping[str, float] | None = None,
    ) -> "PricingConfig":
        return cls(
            base_price_per_unit_weight=base_price_per_unit_weight,
            making_charge_per_unit_weight=making_charge_per_unit_weight,
            gem_unit_prices=dict(DEFAULT_GEM_UNIT_PRICES if gem_unit_prices is None else gem_unit_prices),
        )


@dataclass(frozen=True)
class PriceResult:
    variant_id: str
    final_price: str
    compare_at_price: str

    def to_update(self) -> VariantPriceUpdate:
        return VariantPriceUpdate(
            variant_id=self.variant_id,
            price=self.final_price,
            compare_at_price=self.compare_at_price,
        )


@dataclass(frozen=True)
class ComposedPrice:
    """A PriceResult plus the intermediate amounts it was derived from."""

    result: PriceResult
    weight: Decimal
    material_cost: Decimal
    making_cost: Decimal
    gold_and_making: Decimal
    gem_cost: Decimal
    discounted_gem_cost: Decimal
    discount_tag: str | None
    discount_factor: Decimal | None
    trace_line: str


def format_money(amount: Decimal) -> str:
    """Round half-up to 2 decimals and serialize (Decimal("66400") -> "66400.00")."""
    return str(amount.quantize(_CENTS, rounding=ROUND_HALF_UP))


def compose_variant_price(
    variant: Variant,
    purity_tag: str,
    weight: float,
    total_gem_cost: float | Decimal,
    config: PricingConfig,
    classifier: VariantClassifier | None = None,
) -> ComposedPrice:
    """Compose final and compare-at prices for one eligible variant.

    Args:
        variant: The variant being priced (its title may carry a discount token).
        purity_tag: Purity key returned by the classifier.
        weight: Metal weight of the variant (0 is legal).
        total_gem_cost: Undiscounted gem cost of the product.
        config: Pricing configuration.
        classifier: Source of the discount token (default: structured, title fallback).

    Returns:
        ComposedPrice with the serialized result and a trace line.
    """
    classifier = classifier or DEFAULT_CLASSIFIER
    weight_d = to_decimal(weight)
    gem_cost = to_decimal(total_gem_cost)
    base = to_decimal(config.base_price_per_unit_weight)
    multiplier = to_decimal(config.purity_multipliers.get(purity_tag, 0) or 0)

    material_cost = base * multiplier * weight_d
    making_cost = to_decimal(config.making_charge_per_unit_weight) * weight_d if weight_d > 0 else Decimal("0")
    gold_and_making = material_cost + making_cost
    compare_at = gold_and_making + gem_cost

    line = f'Variant: "{variant.title}"'
    if not weight_d:
        line += " | Warning: weight is missing or zero"
    else:
        line += f" | Weight: {weight_d.normalize():f}"

    discounted_gem_cost = gem_cost
    discount_tag = classifier.discount_tag(variant)
    discount_factor: Decimal | None = None
    if discount_tag is not None:
        factor = config.discount_factors.get(discount_tag)
        if factor:
            discount_factor = to_decimal(factor)
            discounted_gem_cost = gem_cost * discount_factor
            line += f' | Match discount: "{discount_tag}" => factor {discount_factor}'

    final = gold_and_making + discounted_gem_cost
    result = PriceResult(
        variant_id=variant.id,
        final_price=format_money(final),
        compare_at_price=format_money(compare_at),
    )
    line += (
        f" | Gold+Making: {format_money(gold_and_making)}"
        f" | Gem: {format_money(discounted_gem_cost)}"
        f" | Final: {result.final_price}"
        f" | CompareAtPrice: {result.compare_at_price}"
    )

    return ComposedPrice(
        result=result,
        weight=weight_d,
        material_cost=material_cost,
        making_cost=making_cost,
        gold_and_making=gold_and_making,
        gem_cost=gem_cost,
        discounted_gem_cost=discounted_gem_cost,
        discount_tag=discount_tag,
        discount_factor=discount_factor,
        trace_line=line,
    )


# ============================================================
# Per-product pipeline (pure)
# ============================================================


@dataclass
class ProductPricing:
    """Everything derived for one product, before any catalog write."""

    product: Product
    gem_cost: GemCost
    results: list[PriceResult] = field(default_factory=list)
    trace: list[str] = field(default_factory=list)
    diagnostics: list[ParseDiagnostic] = field(default_factory=list)
    skipped_variant_ids: list[str] = field(default_factory=list)


def price_product(
    product: Product,
    config: PricingConfig,
    classifier: VariantClassifier | None = None,
    trace: list[str] | None = None,
    diagnostics: list[ParseDiagnostic] | None = None,
    namespace: str = CUSTOM_NAMESPACE,
) -> ProductPricing:
    """Run gem aggregation, classification and composition for one product.

    `trace` and `diagnostics` may be passed in so a caller keeps the lines
    collected before an exception. Gem slots and variant weights are read
    from `namespace`.
    """
    classifier = classifier or DEFAULT_CLASSIFIER
    trace = trace if trace is not None else []
    diagnostics = diagnostics if diagnostics is not None else []

    seen = len(diagnostics)
    gem_cost = aggregate_gem_cost(product, config.gem_unit_prices, diagnostics, namespace=namespace)
    trace.extend(gem_cost.trace)
    trace.extend(d.describe() for d in diagnostics[seen:])

    pricing = ProductPricing(product=product, gem_cost=gem_cost, trace=trace, diagnostics=diagnostics)

    for variant in product.variants:
        purity_tag = classifier.classify(variant, config.allowed_finish_tags, config.purity_multipliers)
        if purity_tag is None:
            pricing.skipped_variant_ids.append(variant.id)
            trace.append(f'Skipped variant "{variant.title}" of "{product.title}": no recognized finish/purity')
            continue

        seen = len(diagnostics)
        weight = resolve_numeric(variant.attributes, "weight", diagnostics, namespace=namespace)
        trace.extend(d.describe() for d in diagnostics[seen:])

        composed = compose_variant_price(
            variant,
            purity_tag,
            weight,
            gem_cost.total,
            config,
            classifier=classifier,
        )
        trace.append(composed.trace_line)
        pricing.results.append(composed.result)

    if not pricing.results:
        trace.append(f'No recognized variants for product "{product.title}".')

    return pricing
