"""
Offer schemas, including the canonical parsed-offer shape every ingestion
path must produce.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from uuid import UUID
from datetime import datetime, date
from typing import Optional, List, Dict, Any
from decimal import Decimal
from offerdesk.models.offer import OfferStatus, OfferSourceType


# Numeric(14, 4) holds at most 10 integer digits
MAX_LINE_VALUE = Decimal("1e10")


class ParsedOfferItem(BaseModel):
    """One canonical line item. Quantity must be strictly positive."""
    model_config = ConfigDict(str_strip_whitespace=True)

    sku: Optional[str] = None
    description: str = Field(min_length=1)
    quantity: Decimal = Field(gt=0, lt=MAX_LINE_VALUE)
    unit: str = "ea"
    unit_price: Decimal = Field(gt=-MAX_LINE_VALUE, lt=MAX_LINE_VALUE)
    moq: Optional[Decimal] = Field(default=None, ge=0, lt=MAX_LINE_VALUE)

    @field_validator("unit", mode="before")
    @classmethod
    def default_unit(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return "ea"
        return value

    @field_validator("sku", mode="before")
    @classmethod
    def blank_sku_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ParsedOffer(BaseModel):
    """Canonical offer payload: vendor/terms metadata plus line items."""
    model_config = ConfigDict(str_strip_whitespace=True)

    vendor_name: Optional[str] = None
    vendor_email: Optional[str] = None
    valid_until: Optional[date] = None
    lead_time_days: Optional[int] = Field(default=None, ge=0)
    terms: Optional[str] = None
    items: List[ParsedOfferItem] = Field(default_factory=list)

    @field_validator("items", mode="before")
    @classmethod
    def null_items_is_empty(cls, value):
        return [] if value is None else value


class OfferCreate(BaseModel):
    source_type: OfferSourceType = OfferSourceType.MANUAL
    raw_content: Optional[str] = None
    document_id: Optional[UUID] = None
    notes: Optional[str] = None


class OfferItemResponse(BaseModel):
    id: UUID
    sku: Optional[str] = None
    description: str
    quantity: Decimal
    unit: str
    unit_price: Decimal
    total_price: Decimal
    moq: Optional[Decimal] = None
    position: int

    class Config:
        from_attributes = True


class OfferResponse(BaseModel):
    id: UUID
    org_id: UUID
    vendor_id: Optional[UUID] = None
    status: OfferStatus
    source_type: OfferSourceType
    raw_content: Optional[str] = None
    document_id: Optional[UUID] = None
    parsed_json: Optional[Dict[str, Any]] = None
    valid_until: Optional[date] = None
    lead_time_days: Optional[int] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    items: List[OfferItemResponse] = []

    class Config:
        from_attributes = True


class SpreadsheetImportRequest(BaseModel):
    document_id: UUID


class ParsedOfferResponse(BaseModel):
    parsed_offer: ParsedOffer


class SpreadsheetImportResponse(BaseModel):
    items: List[OfferItemResponse]
