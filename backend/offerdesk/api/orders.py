"""
Order API endpoints.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
from offerdesk.api.deps import get_org_id
from offerdesk.db.database import get_db
from offerdesk.errors import NotFoundError
from offerdesk.models import Order
from offerdesk.schemas.order import OrderResponse

router = APIRouter()


@router.get("/", response_model=List[OrderResponse])
async def list_orders(
    org_id: UUID = Depends(get_org_id),
    db: Session = Depends(get_db)
):
    """List the organization's orders, newest first."""
    return db.query(Order).filter(Order.org_id == org_id).order_by(Order.created_at.desc()).all()


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: UUID,
    org_id: UUID = Depends(get_org_id),
    db: Session = Depends(get_db)
):
    """Get an order with its line items."""
    order = db.query(Order).filter(Order.id == order_id, Order.org_id == org_id).first()
    if not order:
        raise NotFoundError(f"Order {order_id} not found")
    return order
