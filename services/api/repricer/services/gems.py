"""Gem cost aggregation.

A product carries up to three gem slots as attributes:
- diamond_{i}: gem type (free text, matched against the unit-price table)
- diamond_weight_{i}: weight (bare number or {"value", "unit"} object)

A slot is active iff its trimmed type is non-empty. Active slots whose type has
no unit price contribute zero; that is not an error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Mapping

from repricer.services.attributes import CUSTOM_NAMESPACE, ParseDiagnostic, resolve, resolve_numeric
from repricer.services.catalog import Product

GEM_SLOTS = (1, 2, 3)


def to_decimal(value: float | int | str | Decimal) -> Decimal:
    """Decimal from the shortest string form of a number (0.76 -> Decimal("0.76"))."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class GemSelection:
    slot: int
    type: str | None
    weight: float

    @property
    def active(self) -> bool:
        return bool(self.type)


@dataclass
class GemCost:
    total: Decimal
    selections: list[GemSelection]
    trace: list[str] = field(default_factory=list)

    @property
    def active_selections(self) -> list[GemSelection]:
        return [s for s in self.selections if s.active]


def aggregate_gem_cost(
    product: Product,
    gem_unit_prices: Mapping[str, float],
    diagnostics: list[ParseDiagnostic] | None = None,
    namespace: str = CUSTOM_NAMESPACE,
) -> GemCost:
    """Resolve the product's gem slots into a total gem cost.

    Args:
        product: Product whose attributes hold the gem slots.
        gem_unit_prices: Unit price per gem type.
        diagnostics: Optional sink for weight parse failures.
        namespace: Attribute namespace holding the slots.

    Returns:
        GemCost with the total, all three selections, and one trace line.
    """
    selections: list[GemSelection] = []
    for slot in GEM_SLOTS:
        raw_type = resolve(product.attributes, f"diamond_{slot}", namespace=namespace)
        gem_type = raw_type.strip() if raw_type is not None else None
        weight = resolve_numeric(product.attributes, f"diamond_weight_{slot}", diagnostics, namespace=namespace)
        selections.append(GemSelection(slot=slot, type=gem_type or None, weight=weight))

    total = Decimal("0")
    for selection in selections:
        if not selection.active:
            continue
        unit_price = gem_unit_prices.get(selection.type, 0) or 0
        total += to_decimal(unit_price) * to_decimal(selection.weight)

    trace = [f'Product: "{product.title}" | total gem cost: {total.normalize():f}']
    return GemCost(total=total, selections=selections, trace=trace)
