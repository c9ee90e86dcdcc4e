"""Pydantic schemas for API responses.

The quote endpoint speaks camelCase JSON to storefront callers; field
aliases carry the wire names.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class QuoteResponse(BaseModel):
    """Successful quote creation."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    draft_order_id: str = Field(..., alias="draftOrderId")
    invoice_url: str | None = Field(None, alias="invoiceUrl")
    quote_id: str = Field(..., alias="quoteId")


class UserError(BaseModel):
    """Field-level error reported by the Admin API."""

    field: list[str] | None = None
    message: str


class ErrorResponse(BaseModel):
    """Error body returned by the quote and auth endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    error: str
    message: str | None = None
    error_code: str | None = Field(None, alias="errorCode")
    user_errors: list[UserError] | None = Field(None, alias="userErrors")
    details: Any = None


class HealthResponse(BaseModel):
    status: str
    version: str
