"""
Order schemas.
"""
from pydantic import BaseModel
from uuid import UUID
from datetime import datetime
from typing import Optional, List
from decimal import Decimal
from offerdesk.models.order import OrderStatus


class ConversionResponse(BaseModel):
    order_id: UUID
    shipment_id: Optional[UUID] = None


class OrderItemResponse(BaseModel):
    id: UUID
    offer_item_id: UUID
    sku: Optional[str] = None
    description: str
    quantity: Decimal
    unit: str
    unit_price: Decimal
    total_price: Decimal
    position: int

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: UUID
    org_id: UUID
    offer_id: UUID
    vendor_id: UUID
    status: OrderStatus
    total_amount: Decimal
    currency: str
    created_at: datetime
    items: List[OrderItemResponse] = []

    class Config:
        from_attributes = True
