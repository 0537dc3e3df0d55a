"""
Offer lifecycle state machine.

Offers move strictly forward through

    new -> negotiating -> accepted -> ordered -> in_transit -> delivered

with ``negotiating -> ordered`` as the one allowed shortcut. ``ordered`` is
reached only through the conversion transaction, and ``in_transit`` /
``delivered`` only by mirroring shipment progress; callers can request
``negotiating`` (approve) and ``accepted`` (accept) directly.

Status writes are compare-and-set against the status the caller loaded, so two
requests racing on the same offer cannot both win.
"""
import logging
from datetime import datetime
from typing import Dict, Set
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import set_committed_value

from offerdesk.db.unit_of_work import unit_of_work
from offerdesk.errors import ConflictError, NotFoundError, PreconditionError
from offerdesk.models import Offer, OfferItem, OfferStatus, ShipmentStatus

logger = logging.getLogger(__name__)

OFFER_FLOW = [
    OfferStatus.NEW,
    OfferStatus.NEGOTIATING,
    OfferStatus.ACCEPTED,
    OfferStatus.ORDERED,
    OfferStatus.IN_TRANSIT,
    OfferStatus.DELIVERED,
]

ALLOWED_TRANSITIONS: Dict[OfferStatus, Set[OfferStatus]] = {
    OfferStatus.NEW: {OfferStatus.NEGOTIATING},
    OfferStatus.NEGOTIATING: {OfferStatus.ACCEPTED, OfferStatus.ORDERED},
    OfferStatus.ACCEPTED: {OfferStatus.ORDERED},
    OfferStatus.ORDERED: {OfferStatus.IN_TRANSIT},
    OfferStatus.IN_TRANSIT: {OfferStatus.DELIVERED},
    OfferStatus.DELIVERED: set(),
}

# Statuses only the system may set
SYSTEM_DRIVEN = {OfferStatus.ORDERED, OfferStatus.IN_TRANSIT, OfferStatus.DELIVERED}

# Offers still open for (re-)normalization
EDITABLE_STATUSES = {OfferStatus.NEW, OfferStatus.NEGOTIATING, OfferStatus.ACCEPTED}

SHIPMENT_TO_OFFER_STATUS = {
    ShipmentStatus.PICKED_UP: OfferStatus.IN_TRANSIT,
    ShipmentStatus.IN_TRANSIT: OfferStatus.IN_TRANSIT,
    ShipmentStatus.OUT_FOR_DELIVERY: OfferStatus.IN_TRANSIT,
    ShipmentStatus.DELIVERED: OfferStatus.DELIVERED,
}


def rank(status: OfferStatus) -> int:
    return OFFER_FLOW.index(OfferStatus(status))


def is_converted(status: OfferStatus) -> bool:
    return rank(status) >= rank(OfferStatus.ORDERED)


def check_transition(current: OfferStatus, target: OfferStatus) -> None:
    """
    Raise unless ``current -> target`` is a legal edge.

    Moving to a status at or behind the current one is a ConflictError;
    skipping ahead past the allowed next states is a PreconditionError.
    """
    current, target = OfferStatus(current), OfferStatus(target)
    if target in ALLOWED_TRANSITIONS[current]:
        return
    if rank(target) <= rank(current):
        raise ConflictError(
            f"Offer is already {current.value}; cannot move to {target.value}",
            details={"current": current.value, "target": target.value},
        )
    raise PreconditionError(
        f"Offer cannot move from {current.value} to {target.value}",
        details={"current": current.value, "target": target.value},
    )


def load_offer(db: Session, org_id: UUID, offer_id: UUID, lock: bool = False) -> Offer:
    """Fetch an offer of the organization, optionally locking its row."""
    query = db.query(Offer).filter(Offer.id == offer_id, Offer.org_id == org_id)
    if lock:
        query = query.with_for_update()
    offer = query.first()
    if not offer:
        raise NotFoundError(f"Offer {offer_id} not found")
    return offer


def write_status(db: Session, offer: Offer, target: OfferStatus) -> None:
    """Compare-and-set the offer status; ConflictError if someone moved it first."""
    expected = offer.status
    check_transition(expected, target)
    result = db.execute(
        update(Offer)
        .where(Offer.id == offer.id, Offer.status == expected)
        .values(status=target, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise ConflictError(
            f"Offer {offer.id} changed status concurrently; expected {OfferStatus(expected).value}"
        )
    set_committed_value(offer, "status", target)
    logger.info("Offer %s: %s -> %s", offer.id, OfferStatus(expected).value, target.value)


def transition_offer(db: Session, org_id: UUID, offer_id: UUID, target: OfferStatus) -> Offer:
    """Caller-requested transition (approve / accept)."""
    target = OfferStatus(target)
    if target in SYSTEM_DRIVEN:
        raise PreconditionError(
            f"Offers reach {target.value} through conversion or shipment progress, not directly"
        )

    with unit_of_work(db):
        offer = load_offer(db, org_id, offer_id, lock=True)
        check_transition(offer.status, target)

        if target == OfferStatus.NEGOTIATING:
            item_count = db.query(OfferItem).filter(OfferItem.offer_id == offer.id).count()
            if item_count == 0:
                raise PreconditionError("Offer has no items; normalize it before approving")

        write_status(db, offer, target)

    db.refresh(offer)
    return offer


def approve_offer(db: Session, org_id: UUID, offer_id: UUID) -> Offer:
    return transition_offer(db, org_id, offer_id, OfferStatus.NEGOTIATING)


def accept_offer(db: Session, org_id: UUID, offer_id: UUID) -> Offer:
    return transition_offer(db, org_id, offer_id, OfferStatus.ACCEPTED)


def sync_offer_with_shipment(db: Session, offer: Offer, shipment_status: ShipmentStatus) -> None:
    """
    Mirror shipment progress onto the offer, forward only.

    Runs inside the caller's transaction. Walks the offer one legal step at a
    time so ``ordered`` can reach ``delivered`` in a single call.
    """
    target = SHIPMENT_TO_OFFER_STATUS.get(ShipmentStatus(shipment_status))
    if target is None or rank(offer.status) >= rank(target):
        return
    if not is_converted(offer.status):
        logger.warning("Offer %s has a shipment but status %s", offer.id, offer.status)
        return
    while offer.status != target:
        write_status(db, offer, OFFER_FLOW[rank(offer.status) + 1])
