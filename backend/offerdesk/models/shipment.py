"""
Shipment model and its append-only milestone events.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Float, Integer, Uuid, Enum as SQLEnum, event
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
import enum
from offerdesk.db.database import Base
from offerdesk.errors import PersistenceError


class ShipmentStatus(str, enum.Enum):
    PENDING = "pending"
    PICKED_UP = "picked_up"
    IN_TRANSIT = "in_transit"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"


class Shipment(Base):
    __tablename__ = "shipments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid(as_uuid=True), ForeignKey("organizations.id"), nullable=False, index=True)
    order_id = Column(Uuid(as_uuid=True), ForeignKey("orders.id"), nullable=False, unique=True)
    carrier = Column(String, nullable=True)
    tracking_number = Column(String, nullable=True)
    status = Column(
        SQLEnum(
            ShipmentStatus,
            native_enum=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
        default=ShipmentStatus.PENDING,
    )
    estimated_delivery = Column(DateTime, nullable=True)

    # Last known position, copied from the latest event
    last_lat = Column(Float, nullable=True)
    last_lng = Column(Float, nullable=True)
    last_location_name = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    order = relationship("Order", back_populates="shipment")
    events = relationship(
        "ShipmentEvent",
        back_populates="shipment",
        order_by="ShipmentEvent.sequence",
    )


class ShipmentEvent(Base):
    __tablename__ = "shipment_events"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    shipment_id = Column(Uuid(as_uuid=True), ForeignKey("shipments.id"), nullable=False, index=True)
    sequence = Column(Integer, nullable=False)  # Insertion order within the shipment
    event_type = Column(String, nullable=False)  # e.g., "Picked up"
    description = Column(String, nullable=True)
    location_name = Column(String, nullable=True)
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)
    occurred_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    shipment = relationship("Shipment", back_populates="events")


@event.listens_for(ShipmentEvent, "before_update")
def _reject_event_update(mapper, connection, target):
    raise PersistenceError(f"Shipment event {target.id} is append-only and cannot be modified")


@event.listens_for(ShipmentEvent, "before_delete")
def _reject_event_delete(mapper, connection, target):
    raise PersistenceError(f"Shipment event {target.id} is append-only and cannot be deleted")
