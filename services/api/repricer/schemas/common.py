"""Common schemas used across the API."""

from typing import Any

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    """Structured error detail.

    `code` is a stable machine-readable identifier (e.g. "INTERNAL_ERROR").
    """

    code: str
    message: str
    detail: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Error envelope returned for unhandled failures.

    Format: { "error": { "code": str, "message": str, "detail": object } }
    """

    error: ErrorDetail
