"""Catalog data model and the gateway contract used by the repricer.

The catalog itself (fetching, pagination, pushing updates) lives outside this
service. This module defines:
- the in-memory snapshot types the pricing engine consumes
- parsing of a catalog fetch payload into those types, accepting both plain
  lists and GraphQL connection shapes ({"edges": [{"node": ...}]})
- the CatalogGateway protocol the orchestrator writes through
- DryRunCatalogGateway, which records writes in memory (previews, scripts, tests)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class AttributeRecord:
    namespace: str
    key: str
    value: str


@dataclass(frozen=True)
class Variant:
    """A sellable variant.

    `title` is free text. The optional tags, when populated at ingestion, take
    precedence over anything parsed from the title.
    """

    id: str
    title: str
    attributes: tuple[AttributeRecord, ...] = ()
    purity_tag: str | None = None
    finish_tag: str | None = None
    discount_tag: str | None = None


@dataclass(frozen=True)
class Product:
    id: str
    title: str
    attributes: tuple[AttributeRecord, ...] = ()
    variants: tuple[Variant, ...] = ()


@dataclass(frozen=True)
class VariantPriceUpdate:
    """One variant price write, serialized the way the catalog expects."""

    variant_id: str
    price: str
    compare_at_price: str

    def to_payload(self) -> dict[str, str]:
        return {"id": self.variant_id, "price": self.price, "compareAtPrice": self.compare_at_price}


@dataclass(frozen=True)
class UserError:
    """A per-item validation error reported by the catalog."""

    message: str
    field: list[str] | None = None


class CatalogGateway(Protocol):
    """Write side of the catalog used by the repricing orchestrator."""

    async def update_variant_prices(
        self,
        product_id: str,
        updates: list[VariantPriceUpdate],
    ) -> list[UserError]:
        ...

    async def set_product_attribute(
        self,
        product_id: str,
        namespace: str,
        key: str,
        value: str,
        value_type: str,
    ) -> list[UserError]:
        ...


@dataclass
class RecordedAttributeWrite:
    product_id: str
    namespace: str
    key: str
    value: str
    value_type: str


@dataclass
class DryRunCatalogGateway:
    """Gateway that accepts every write and keeps it in memory."""

    variant_updates: dict[str, list[VariantPriceUpdate]] = field(default_factory=dict)
    attribute_writes: list[RecordedAttributeWrite] = field(default_factory=list)

    async def update_variant_prices(
        self,
        product_id: str,
        updates: list[VariantPriceUpdate],
    ) -> list[UserError]:
        self.variant_updates.setdefault(product_id, []).extend(updates)
        return []

    async def set_product_attribute(
        self,
        product_id: str,
        namespace: str,
        key: str,
        value: str,
        value_type: str,
    ) -> list[UserError]:
        self.attribute_writes.append(
            RecordedAttributeWrite(
                product_id=product_id,
                namespace=namespace,
                key=key,
                value=value,
                value_type=value_type,
            )
        )
        return []


# ============================================================
# Snapshot parsing
# ============================================================


def _nodes(value: Any) -> list[dict[str, Any]]:
    """Unwrap a list or a GraphQL connection into a list of node dicts."""
    if value is None:
        return []
    if isinstance(value, dict):
        edges = value.get("edges")
        if isinstance(edges, list):
            out: list[dict[str, Any]] = []
            for edge in edges:
                node = edge.get("node") if isinstance(edge, dict) else None
                if isinstance(node, dict):
                    out.append(node)
            return out
        nodes = value.get("nodes")
        if isinstance(nodes, list):
            return [n for n in nodes if isinstance(n, dict)]
        return []
    if isinstance(value, list):
        return [n for n in value if isinstance(n, dict)]
    return []


def _optional_tag(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def parse_attributes(value: Any) -> tuple[AttributeRecord, ...]:
    records: list[AttributeRecord] = []
    for node in _nodes(value):
        key = node.get("key")
        if key is None:
            continue
        raw = node.get("value")
        records.append(
            AttributeRecord(
                namespace=str(node.get("namespace") or ""),
                key=str(key),
                value="" if raw is None else str(raw),
            )
        )
    return tuple(records)


def parse_variant(node: dict[str, Any]) -> Variant:
    attrs = node.get("attributes", node.get("metafields"))
    return Variant(
        id=str(node["id"]),
        title=str(node.get("title") or ""),
        attributes=parse_attributes(attrs),
        purity_tag=_optional_tag(node.get("purityTag", node.get("purity_tag"))),
        finish_tag=_optional_tag(node.get("finishTag", node.get("finish_tag"))),
        discount_tag=_optional_tag(node.get("discountTag", node.get("discount_tag"))),
    )


def parse_product(node: dict[str, Any]) -> Product:
    """Build a Product from one catalog node.

    Raises:
        KeyError: if the product or one of its variants has no id.
    """
    attrs = node.get("attributes", node.get("metafields"))
    return Product(
        id=str(node["id"]),
        title=str(node.get("title") or ""),
        attributes=parse_attributes(attrs),
        variants=tuple(parse_variant(v) for v in _nodes(node.get("variants"))),
    )


def parse_products(payload: Any) -> list[Product]:
    """Parse a catalog fetch payload.

    Accepts a list of product nodes, a products connection, or a GraphQL
    response wrapper ({"data": {"products": ...}}).
    """
    if isinstance(payload, dict):
        data = payload.get("data")
        if isinstance(data, dict) and "products" in data:
            payload = data["products"]
        elif "products" in payload:
            payload = payload["products"]
    return [parse_product(node) for node in _nodes(payload)]
