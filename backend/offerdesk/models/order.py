"""
Order and Order Item models - firm commitments created by converting an offer.
"""
from sqlalchemy import (
    Column, String, Text, DateTime, ForeignKey, Integer, Numeric, Uuid, Enum as SQLEnum,
)
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
import enum
from offerdesk.db.database import Base


class OrderStatus(str, enum.Enum):
    DRAFT = "draft"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid(as_uuid=True), ForeignKey("organizations.id"), nullable=False, index=True)
    # unique: at most one order per offer, even under concurrent conversions
    offer_id = Column(Uuid(as_uuid=True), ForeignKey("offers.id"), nullable=False, unique=True)
    vendor_id = Column(Uuid(as_uuid=True), ForeignKey("vendors.id"), nullable=False)
    status = Column(
        SQLEnum(
            OrderStatus,
            native_enum=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
        default=OrderStatus.DRAFT,
    )
    total_amount = Column(Numeric(24, 8), nullable=False)
    currency = Column(String(3), nullable=False)
    notes = Column(Text, nullable=True)
    created_by = Column(Uuid(as_uuid=True), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    offer = relationship("Offer", back_populates="order")
    vendor = relationship("Vendor", back_populates="orders")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
    )
    shipment = relationship("Shipment", back_populates="order", uselist=False)


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id = Column(Uuid(as_uuid=True), ForeignKey("orders.id"), nullable=False, index=True)
    offer_item_id = Column(Uuid(as_uuid=True), ForeignKey("offer_items.id"), nullable=False)  # Traceability
    sku = Column(String, nullable=True)
    description = Column(String, nullable=False)
    quantity = Column(Numeric(14, 4), nullable=False)
    unit = Column(String, nullable=False)
    unit_price = Column(Numeric(14, 4), nullable=False)
    total_price = Column(Numeric(24, 8), nullable=False)
    position = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    order = relationship("Order", back_populates="items")
