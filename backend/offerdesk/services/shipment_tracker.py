"""
Shipment milestone tracking - appends carrier events and advances status.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from offerdesk.db.unit_of_work import unit_of_work
from offerdesk.errors import ConflictError, NotFoundError
from offerdesk.models import Order, OrderStatus, Shipment, ShipmentEvent, ShipmentStatus
from offerdesk.services.lifecycle import sync_offer_with_shipment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Milestone:
    event_type: str
    description: str
    location_name: str
    lat: float
    lng: float
    status: ShipmentStatus


MILESTONES: List[Milestone] = [
    Milestone("Picked up", "Package picked up from sender", "New York, NY", 40.7128, -74.006, ShipmentStatus.PICKED_UP),
    Milestone("In transit", "In transit to destination", "Philadelphia, PA", 39.9526, -75.1652, ShipmentStatus.IN_TRANSIT),
    Milestone("Out for delivery", "Out for delivery today", "Boston, MA", 42.3601, -71.0589, ShipmentStatus.OUT_FOR_DELIVERY),
    Milestone("Delivered", "Delivered to recipient", "Boston, MA", 42.3601, -71.0589, ShipmentStatus.DELIVERED),
]

# pending sits before the first milestone
STATUS_PROGRESS = {ShipmentStatus.PENDING: -1}
STATUS_PROGRESS.update({milestone.status: index for index, milestone in enumerate(MILESTONES)})

ESTIMATED_TRANSIT = timedelta(days=2)


@dataclass
class AdvanceResult:
    shipment_id: UUID
    event_type: str
    status: ShipmentStatus


def clamp_event_index(event_index: Optional[int]) -> int:
    if event_index is None:
        return 0
    return max(0, min(int(event_index), len(MILESTONES) - 1))


def _select_shipment(db: Session, org_id: UUID, shipment_id: Optional[UUID]) -> Shipment:
    query = db.query(Shipment).filter(Shipment.org_id == org_id)
    if shipment_id:
        shipment = query.filter(Shipment.id == shipment_id).with_for_update().first()
        if not shipment:
            raise NotFoundError(f"Shipment {shipment_id} not found")
        return shipment

    shipment = (
        query.filter(Shipment.status != ShipmentStatus.DELIVERED)
        .order_by(Shipment.created_at.desc())
        .with_for_update()
        .first()
    )
    if not shipment:
        raise NotFoundError("No shipment_id given and no undelivered shipment found")
    return shipment


def _mirror_order_status(order: Order, status: ShipmentStatus) -> None:
    if status == ShipmentStatus.DELIVERED:
        target = OrderStatus.DELIVERED
    else:
        target = OrderStatus.SHIPPED
    if order.status == OrderStatus.CONFIRMED or (
        order.status == OrderStatus.SHIPPED and target == OrderStatus.DELIVERED
    ):
        order.status = target


def advance_shipment(
    db: Session,
    org_id: UUID,
    shipment_id: Optional[UUID] = None,
    event_index: Optional[int] = None,
    now: Optional[datetime] = None,
) -> AdvanceResult:
    """
    Append milestone ``event_index`` to a shipment and move its status.

    Without ``shipment_id`` the organization's newest undelivered shipment is
    used. The index is clamped into the catalog. Progress never goes
    backwards: an index behind the current milestone, or any advance of a
    delivered shipment, raises ConflictError. The linked order and offer are
    moved forward to match.
    """
    index = clamp_event_index(event_index)
    milestone = MILESTONES[index]
    now = now or datetime.utcnow()

    with unit_of_work(db):
        shipment = _select_shipment(db, org_id, shipment_id)
        current = ShipmentStatus(shipment.status)
        if current == ShipmentStatus.DELIVERED:
            raise ConflictError(f"Shipment {shipment.id} is already delivered")
        if index < STATUS_PROGRESS[current]:
            raise ConflictError(
                f"Shipment {shipment.id} is {current.value}; cannot go back to {milestone.status.value}",
                details={"current": current.value, "requested": milestone.status.value},
            )

        sequence = db.query(ShipmentEvent).filter(ShipmentEvent.shipment_id == shipment.id).count()
        db.add(ShipmentEvent(
            shipment_id=shipment.id,
            sequence=sequence,
            event_type=milestone.event_type,
            description=milestone.description,
            location_name=milestone.location_name,
            lat=milestone.lat,
            lng=milestone.lng,
            occurred_at=now,
        ))

        shipment.status = milestone.status
        shipment.last_lat = milestone.lat
        shipment.last_lng = milestone.lng
        shipment.last_location_name = milestone.location_name
        if milestone.status == ShipmentStatus.DELIVERED:
            shipment.estimated_delivery = now
        else:
            shipment.estimated_delivery = now + ESTIMATED_TRANSIT
        db.flush()

        order = shipment.order
        if order is not None:
            _mirror_order_status(order, milestone.status)
            if order.offer is not None:
                sync_offer_with_shipment(db, order.offer, milestone.status)

        result = AdvanceResult(shipment_id=shipment.id, event_type=milestone.event_type, status=milestone.status)

    logger.info(
        "Shipment %s: %s -> %s (%s)",
        result.shipment_id,
        current.value,
        result.status.value,
        result.event_type,
    )
    return result
