"""
Organization model - the tenant every other record belongs to.
"""
from sqlalchemy import Column, String, DateTime, Uuid
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
from offerdesk.db.database import Base


class Organization(Base):
    __tablename__ = "organizations"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False, unique=True)
    currency = Column(String(3), nullable=False, default="USD")  # Single currency per org
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    vendors = relationship("Vendor", back_populates="organization", cascade="all, delete-orphan")
    offers = relationship("Offer", back_populates="organization", cascade="all, delete-orphan")
