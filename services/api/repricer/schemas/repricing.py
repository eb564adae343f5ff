"""Schemas for the admin repricing endpoints (/v1/admin/reprice/*, /v1/admin/metal-rate)."""

from typing import Any

from pydantic import BaseModel, Field


class RepricePreviewRequest(BaseModel):
    """Request body for a dry-run repricing.

    `products` is the catalog fetch payload: a list of product nodes or a
    GraphQL products connection. Omitted tables fall back to the defaults;
    an omitted base price is taken from the live metal rate.
    """

    products: list[dict[str, Any]] | dict[str, Any]
    base_price_per_unit_weight: float | None = Field(alias="basePricePerUnitWeight", default=None)
    making_charge_per_unit_weight: float | None = Field(alias="makingChargePerUnitWeight", default=None)
    purity_multipliers: dict[str, float] | None = Field(alias="purityMultipliers", default=None)
    discount_factors: dict[str, float] | None = Field(alias="discountFactors", default=None)
    allowed_finish_tags: list[str] | None = Field(alias="allowedFinishTags", default=None)
    gem_unit_prices: dict[str, float] | None = Field(alias="gemUnitPrices", default=None)
    group_size: int | None = Field(alias="groupSize", default=None, ge=1, le=50)
    include_trace: bool = Field(alias="includeTrace", default=True)

    model_config = {"populate_by_name": True}


class VariantPrice(BaseModel):
    """A computed variant price, as it would be written to the catalog."""

    variant_id: str = Field(alias="variantId")
    price: str
    compare_at_price: str = Field(alias="compareAtPrice")

    model_config = {"populate_by_name": True}


class ParseDiagnosticItem(BaseModel):
    key: str
    raw_value: str = Field(alias="rawValue")
    reason: str

    model_config = {"populate_by_name": True}


class AttributeWrite(BaseModel):
    product_id: str = Field(alias="productId")
    namespace: str
    key: str
    value: str
    type: str

    model_config = {"populate_by_name": True}


class RepricePreviewResponse(BaseModel):
    """Response from a dry-run repricing."""

    success: bool
    message: str
    run_id: str = Field(alias="runId")
    base_price_per_unit_weight: float = Field(alias="basePricePerUnitWeight")
    updated_variants: list[VariantPrice] = Field(alias="updatedVariants", default_factory=list)
    attribute_writes: list[AttributeWrite] = Field(alias="attributeWrites", default_factory=list)
    errors: dict[str, str] = Field(default_factory=dict)
    diagnostics: list[ParseDiagnosticItem] = Field(default_factory=list)
    trace: list[str] = Field(default_factory=list)
    stats: dict[str, int] = Field(default_factory=dict)

    model_config = {"populate_by_name": True}


class RepriceDefaultsResponse(BaseModel):
    making_charge_per_unit_weight: float = Field(alias="makingChargePerUnitWeight")
    purity_multipliers: dict[str, float] = Field(alias="purityMultipliers")
    discount_factors: dict[str, float] = Field(alias="discountFactors")
    allowed_finish_tags: list[str] = Field(alias="allowedFinishTags")
    gem_unit_prices: dict[str, float] = Field(alias="gemUnitPrices")
    group_size: int = Field(alias="groupSize")

    model_config = {"populate_by_name": True}


class MetalRateResponse(BaseModel):
    symbol: str
    currency: str
    timestamp: int
    price_gram_24k: float = Field(alias="priceGram24k")
    premium: float
    suggested_base_price: float = Field(alias="suggestedBasePrice")

    model_config = {"populate_by_name": True}
