"""
Offer and Offer Item models.
"""
from sqlalchemy import (
    Column, String, Text, DateTime, Date, ForeignKey, Integer, Numeric, JSON, Uuid,
    UniqueConstraint, Enum as SQLEnum,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
import enum
from offerdesk.db.database import Base


class OfferStatus(str, enum.Enum):
    NEW = "new"
    NEGOTIATING = "negotiating"
    ACCEPTED = "accepted"
    ORDERED = "ordered"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"


class OfferSourceType(str, enum.Enum):
    FREE_TEXT = "free_text"
    SPREADSHEET = "spreadsheet"
    MANUAL = "manual"


class Offer(Base):
    __tablename__ = "offers"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid(as_uuid=True), ForeignKey("organizations.id"), nullable=False, index=True)
    vendor_id = Column(Uuid(as_uuid=True), ForeignKey("vendors.id"), nullable=True)
    status = Column(
        SQLEnum(
            OfferStatus,
            native_enum=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
        default=OfferStatus.NEW,
    )
    source_type = Column(
        SQLEnum(
            OfferSourceType,
            native_enum=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
        default=OfferSourceType.MANUAL,
    )
    raw_content = Column(Text, nullable=True)  # Email body / pasted text
    document_id = Column(Uuid(as_uuid=True), ForeignKey("documents.id"), nullable=True)
    parsed_json = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=True)  # Canonical payload
    valid_until = Column(Date, nullable=True)
    lead_time_days = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(Uuid(as_uuid=True), nullable=True)  # Set by upstream auth
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    organization = relationship("Organization", back_populates="offers")
    vendor = relationship("Vendor", back_populates="offers")
    items = relationship(
        "OfferItem",
        back_populates="offer",
        cascade="all, delete-orphan",
        order_by="OfferItem.position",
    )
    order = relationship("Order", back_populates="offer", uselist=False)


class OfferItem(Base):
    __tablename__ = "offer_items"
    __table_args__ = (
        UniqueConstraint("offer_id", "position", name="uq_offer_items_offer_position"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    offer_id = Column(Uuid(as_uuid=True), ForeignKey("offers.id"), nullable=False, index=True)
    sku = Column(String, nullable=True)
    description = Column(String, nullable=False)
    quantity = Column(Numeric(14, 4), nullable=False)
    unit = Column(String, nullable=False, default="ea")
    unit_price = Column(Numeric(14, 4), nullable=False)
    total_price = Column(Numeric(24, 8), nullable=False)  # quantity * unit_price, never rounded
    moq = Column(Numeric(14, 4), nullable=True)
    position = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    offer = relationship("Offer", back_populates="items")
