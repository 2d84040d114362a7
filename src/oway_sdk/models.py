"""Pydantic models for the Oway SDK.

Token and request-context models are owned by the SDK. The freight models
(addresses, quotes, shipments, tracking, invoices) mirror the external
Oway REST contract: they use camelCase on the wire and keep unknown fields
so new API attributes survive a round trip through the SDK.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Any, Self

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel


class TokenResponse(BaseModel):
    """Token endpoint response.

    Both ``accessToken``/``expiresIn`` and ``access_token``/``expires_in``
    spellings are accepted.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    access_token: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("accessToken", "access_token"),
    )
    expires_in: int = Field(
        ...,
        gt=0,
        validation_alias=AliasChoices("expiresIn", "expires_in"),
    )
    token_type: str = Field(
        default="Bearer",
        validation_alias=AliasChoices("tokenType", "token_type"),
    )


class TokenData(BaseModel):
    """Cached bearer token with expiration tracking."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    expires_at: datetime

    @classmethod
    def from_response(cls, response: TokenResponse) -> Self:
        """Create TokenData from TokenResponse with expiration calculation."""
        return cls(
            access_token=response.access_token,
            expires_at=datetime.now(UTC) + timedelta(seconds=response.expires_in),
        )

    def is_valid(self, margin_seconds: float = 300) -> bool:
        """Check the token stays valid for at least ``margin_seconds``."""
        return datetime.now(UTC) + timedelta(seconds=margin_seconds) < self.expires_at

    def time_until_expiry(self) -> timedelta:
        """Get time remaining until token expires."""
        return self.expires_at - datetime.now(UTC)

    def __repr__(self) -> str:
        return f"TokenData(access_token='***', expires_at={self.expires_at.isoformat()!r})"


class RequestContext(BaseModel):
    """Per-call request description; never outlives the call."""

    model_config = ConfigDict(frozen=True)

    method: str
    path: str
    query: dict[str, Any] | None = None
    body: Any = None
    headers: dict[str, str] | None = None
    tenant_key: str | None = Field(default=None, repr=False)
    request_id: str = Field(default_factory=lambda: str(uuid.uuid4()))

    @field_validator("method")
    @classmethod
    def normalize_method(cls, v: str) -> str:
        return v.upper()

    @property
    def params(self) -> dict[str, str] | None:
        """Query parameters rendered the way the API expects them."""
        if not self.query:
            return None
        return {
            key: _format_query_value(value)
            for key, value in self.query.items()
            if value is not None
        }


def _format_query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# --- Freight API payloads -------------------------------------------------


class ApiModel(BaseModel):
    """Base for Oway wire models (camelCase, unknown fields preserved)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON body expected by the API."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class WeightUnit(StrEnum):
    LBS = "LBS"
    KG = "KG"


class DocumentType(StrEnum):
    """Shipment documents available for download."""

    BOL = "BOL"
    INVOICE = "INVOICE"
    LABEL = "LABEL"


class Address(ApiModel):
    zip_code: str
    country: str
    city: str | None = None
    state: str | None = None
    address_line1: str | None = None
    address_line2: str | None = None
    company_name: str | None = None


class Contact(ApiModel):
    contact_name: str | None = None
    contact_phone: str | None = None
    contact_email: str | None = None


class FreightItem(ApiModel):
    weight: float
    weight_unit: WeightUnit = WeightUnit.LBS
    quantity: int | None = None
    description: str | None = None
    length: float | None = None
    width: float | None = None
    height: float | None = None
    freight_class: str | None = None


class QuoteRequest(ApiModel):
    """Body of ``POST /v1/shipper/quote``."""

    origin: Address
    destination: Address
    items: list[FreightItem]
    pickup_date: str | None = None


class Quote(ApiModel):
    quote_id: str | None = None
    price: float | None = None
    currency: str | None = None
    expires_at: str | None = None


class ShipmentRequest(ApiModel):
    """Body of ``POST /v1/shipper/shipment``."""

    quote_id: str
    pickup: Contact
    delivery: Contact
    reference_number: str | None = None


class Shipment(ApiModel):
    order_number: str | None = None
    status: str | None = None
    quote_id: str | None = None


class TrackingEvent(ApiModel):
    status: str | None = None
    description: str | None = None
    location: str | None = None
    timestamp: str | None = None


class Tracking(ApiModel):
    order_number: str | None = None
    status: str | None = None
    events: list[TrackingEvent] = Field(default_factory=list)


class Invoice(ApiModel):
    order_number: str | None = None
    invoice_number: str | None = None
    amount: float | None = None
    currency: str | None = None
    url: str | None = None


class DocumentLink(ApiModel):
    url: str
