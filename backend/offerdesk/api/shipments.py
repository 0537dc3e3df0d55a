"""
Shipment tracking API endpoints.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from uuid import UUID
from offerdesk.api.deps import get_org_id
from offerdesk.db.database import get_db
from offerdesk.errors import NotFoundError
from offerdesk.models import Shipment
from offerdesk.schemas.shipment import ShipmentAdvanceRequest, ShipmentAdvanceResponse, ShipmentResponse
from offerdesk.services.shipment_tracker import advance_shipment

router = APIRouter()


@router.post("/advance", response_model=ShipmentAdvanceResponse)
async def advance(
    request: ShipmentAdvanceRequest,
    org_id: UUID = Depends(get_org_id),
    db: Session = Depends(get_db)
):
    """Record the next carrier milestone for a shipment."""
    result = advance_shipment(db, org_id, request.shipment_id, request.event_index)
    return {"shipment_id": result.shipment_id, "event_type": result.event_type, "status": result.status}


@router.get("/{shipment_id}", response_model=ShipmentResponse)
async def get_shipment(
    shipment_id: UUID,
    org_id: UUID = Depends(get_org_id),
    db: Session = Depends(get_db)
):
    """Get a shipment with its event history."""
    shipment = db.query(Shipment).filter(Shipment.id == shipment_id, Shipment.org_id == org_id).first()
    if not shipment:
        raise NotFoundError(f"Shipment {shipment_id} not found")
    return shipment
