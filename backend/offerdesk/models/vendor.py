"""
Vendor model.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship, validates
import uuid
from datetime import datetime
from offerdesk.db.database import Base


def normalize_vendor_name(name: str) -> str:
    """Matching key for vendor names: trimmed and Unicode case-folded."""
    return (name or "").strip().casefold()


class Vendor(Base):
    __tablename__ = "vendors"
    __table_args__ = (
        # One vendor per case-insensitive name within an organization
        UniqueConstraint("org_id", "normalized_name", name="uq_vendors_org_normalized_name"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid(as_uuid=True), ForeignKey("organizations.id"), nullable=False)
    name = Column(String, nullable=False)
    normalized_name = Column(String, nullable=False)  # Always derived from name
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    organization = relationship("Organization", back_populates="vendors")
    offers = relationship("Offer", back_populates="vendor")
    orders = relationship("Order", back_populates="vendor")

    @validates("name")
    def _sync_normalized_name(self, key, value):
        self.normalized_name = normalize_vendor_name(value)
        return value
