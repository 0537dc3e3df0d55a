"""
Offer -> order -> shipment conversion.
"""
import time
import uuid
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from offerdesk.db.database import settings
from offerdesk.db.unit_of_work import unit_of_work
from offerdesk.errors import ConflictError, PreconditionError, ValidationError
from offerdesk.models import (
    Offer, OfferItem, OfferStatus, Order, OrderItem, OrderStatus,
    Organization, Shipment, ShipmentStatus,
)
from offerdesk.services.lifecycle import is_converted, load_offer, write_status

logger = logging.getLogger(__name__)

CONVERTIBLE_STATUSES = {OfferStatus.NEGOTIATING, OfferStatus.ACCEPTED}
DEFAULT_CURRENCY = "USD"
# orders.total_amount is Numeric(24, 8)
MAX_ORDER_TOTAL = Decimal("1e16")


@dataclass
class ConversionResult:
    order_id: UUID
    shipment_id: Optional[UUID]
    total_amount: Decimal


def generate_tracking_number() -> str:
    return f"TL-{uuid.uuid4().hex[:12].upper()}"


def _org_currency(db: Session, org_id: UUID) -> str:
    org = db.query(Organization).filter(Organization.id == org_id).first()
    return org.currency if org and org.currency else DEFAULT_CURRENCY


def convert_offer(db: Session, org_id: UUID, offer_id: UUID) -> ConversionResult:
    """
    Turn an approved offer into a confirmed order plus a pending shipment.

    Runs as one transaction with the offer row locked: either the order, all
    order items, the shipment and the offer status change are committed
    together, or nothing is. At most one conversion per offer ever succeeds;
    later or concurrent attempts raise ConflictError.
    """
    start_time = time.perf_counter()
    with unit_of_work(db):
        offer: Offer = load_offer(db, org_id, offer_id, lock=True)
        if not offer.vendor_id:
            raise PreconditionError("Offer has no vendor; link a vendor first")

        items = (
            db.query(OfferItem)
            .filter(OfferItem.offer_id == offer.id)
            .order_by(OfferItem.position)
            .all()
        )
        if not items:
            raise PreconditionError("No offer items to convert")

        if is_converted(offer.status):
            raise ConflictError(f"Offer {offer_id} has already been converted")
        if offer.status not in CONVERTIBLE_STATUSES:
            raise PreconditionError(
                f"Offer {offer_id} is {OfferStatus(offer.status).value}; approve it before converting"
            )

        total_amount = sum((item.total_price for item in items), Decimal("0"))
        if abs(total_amount) >= MAX_ORDER_TOTAL:
            raise ValidationError(f"Order total {total_amount} is out of range")

        order = Order(
            org_id=offer.org_id,
            offer_id=offer.id,
            vendor_id=offer.vendor_id,
            status=OrderStatus.CONFIRMED,
            total_amount=total_amount,
            currency=_org_currency(db, offer.org_id),
            created_by=offer.created_by,
        )
        db.add(order)
        try:
            db.flush()
        except IntegrityError as e:
            # orders.offer_id is unique; another request converted this offer
            raise ConflictError(f"Offer {offer_id} has already been converted") from e

        for item in items:
            db.add(OrderItem(
                order_id=order.id,
                offer_item_id=item.id,
                sku=item.sku,
                description=item.description,
                quantity=item.quantity,
                unit=item.unit,
                unit_price=item.unit_price,
                total_price=item.total_price,
                position=item.position,
            ))

        shipment = Shipment(
            org_id=offer.org_id,
            order_id=order.id,
            carrier=settings.default_carrier,
            tracking_number=generate_tracking_number(),
            status=ShipmentStatus.PENDING,
        )
        db.add(shipment)
        db.flush()

        write_status(db, offer, OfferStatus.ORDERED)
        result = ConversionResult(order_id=order.id, shipment_id=shipment.id, total_amount=total_amount)

    duration = round(time.perf_counter() - start_time, 3)
    logger.info(
        "Converted offer %s into order %s (%d items, total %s) shipment %s in %.2fs",
        offer_id,
        result.order_id,
        len(items),
        result.total_amount,
        result.shipment_id,
        duration,
    )
    return result
