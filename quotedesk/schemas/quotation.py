"""Pydantic schemas for quotation input and output."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from quotedesk.models.enums import QuotationStatus, RateSource


class QuotationItemInput(BaseModel):
    """One requested line. `discount` is a percentage of the line gross."""

    product_id: uuid.UUID
    quantity: int = Field(ge=1)
    unit_price: Decimal = Field(ge=0)
    discount: Decimal = Field(default=Decimal("0"), ge=0, le=100)


class QuotationCreate(BaseModel):
    """Body for creating a quotation."""

    title: str = Field(min_length=1, max_length=200)
    client_id: uuid.UUID
    company_id: uuid.UUID
    seller_id: uuid.UUID | None = Field(default=None, description="Admins without a seller profile must set this")

    description: str | None = None
    valid_until: date | None = None
    notes: str | None = None
    payment_terms: str | None = Field(default=None, max_length=500)
    delivery_terms: str | None = Field(default=None, max_length=500)
    incoterm: str | None = Field(default=None, max_length=10)
    destination_port: str | None = Field(default=None, max_length=200)

    freight: Decimal = Field(default=Decimal("0"), ge=0)
    discount: Decimal = Field(default=Decimal("0"), ge=0)
    status: QuotationStatus = QuotationStatus.SENT

    items: list[QuotationItemInput] = Field(min_length=1)

    @field_validator("status")
    @classmethod
    def initial_status(cls, v: QuotationStatus) -> QuotationStatus:
        if v not in (QuotationStatus.DRAFT, QuotationStatus.SENT):
            msg = "A new quotation starts as DRAFT or SENT"
            raise ValueError(msg)
        return v


class QuotationStatusUpdate(BaseModel):
    status: QuotationStatus


class QuotationItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    product_id: uuid.UUID
    quantity: int
    unit_price: Decimal
    discount: Decimal
    total: Decimal


class ConvertedTotals(BaseModel):
    """Read-time view of the totals in another currency. Never persisted."""

    currency: str
    rate: float
    source: RateSource
    subtotal: Decimal
    discount: Decimal
    freight: Decimal
    total: Decimal


class QuotationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    number: str
    title: str
    status: QuotationStatus
    company_id: uuid.UUID
    seller_id: uuid.UUID
    client_id: uuid.UUID
    description: str | None = None
    valid_until: date | None = None
    notes: str | None = None
    payment_terms: str | None = None
    delivery_terms: str | None = None
    incoterm: str | None = None
    destination_port: str | None = None
    subtotal: Decimal
    discount: Decimal
    freight: Decimal
    total: Decimal
    exchange_rate: Decimal | None = None
    exchange_rate_source: str | None = None
    created_at: datetime | None = None
    items: list[QuotationItemRead] = Field(default_factory=list)

    converted: ConvertedTotals | None = None


class PricedItem(BaseModel):
    product_id: uuid.UUID
    quantity: int
    unit_price: Decimal
    discount: Decimal
    total: Decimal


class QuotationTotals(BaseModel):
    """Base-currency totals, already rounded to cents."""

    items: list[PricedItem]
    subtotal: Decimal
    discount: Decimal
    freight: Decimal
    total: Decimal
