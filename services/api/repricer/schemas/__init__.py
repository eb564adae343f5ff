"""Pydantic schemas for API request/response validation."""

from repricer.schemas.common import ErrorDetail, ErrorResponse
from repricer.schemas.repricing import (
    AttributeWrite,
    MetalRateResponse,
    ParseDiagnosticItem,
    RepriceDefaultsResponse,
    RepricePreviewRequest,
    RepricePreviewResponse,
    VariantPrice,
)

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "AttributeWrite",
    "MetalRateResponse",
    "ParseDiagnosticItem",
    "RepriceDefaultsResponse",
    "RepricePreviewRequest",
    "RepricePreviewResponse",
    "VariantPrice",
]
