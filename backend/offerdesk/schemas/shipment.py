"""
Shipment schemas.
"""
from pydantic import BaseModel
from uuid import UUID
from datetime import datetime
from typing import Optional, List
from offerdesk.models.shipment import ShipmentStatus


class ShipmentAdvanceRequest(BaseModel):
    shipment_id: Optional[UUID] = None
    event_index: Optional[int] = None  # Clamped into the milestone catalog


class ShipmentAdvanceResponse(BaseModel):
    shipment_id: UUID
    event_type: str
    status: ShipmentStatus


class ShipmentEventResponse(BaseModel):
    id: UUID
    sequence: int
    event_type: str
    description: Optional[str] = None
    location_name: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    occurred_at: datetime

    class Config:
        from_attributes = True


class ShipmentResponse(BaseModel):
    id: UUID
    order_id: UUID
    carrier: Optional[str] = None
    tracking_number: Optional[str] = None
    status: ShipmentStatus
    estimated_delivery: Optional[datetime] = None
    last_lat: Optional[float] = None
    last_lng: Optional[float] = None
    last_location_name: Optional[str] = None
    created_at: datetime
    events: List[ShipmentEventResponse] = []

    class Config:
        from_attributes = True
