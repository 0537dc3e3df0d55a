"""
Vendor identity resolution within an organization.
"""
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from offerdesk.errors import ConflictError, ValidationError
from offerdesk.models import Vendor
from offerdesk.models.vendor import normalize_vendor_name

logger = logging.getLogger(__name__)


def find_vendor(db: Session, org_id: UUID, name: str) -> Optional[Vendor]:
    """Exact, case-insensitive name lookup. No fuzzy or partial matching."""
    return (
        db.query(Vendor)
        .filter(Vendor.org_id == org_id, Vendor.normalized_name == normalize_vendor_name(name))
        .first()
    )


def resolve_vendor(db: Session, org_id: UUID, name: str, email: Optional[str] = None) -> UUID:
    """
    Return the id of the organization's vendor called ``name``, creating it if absent.

    "Acme" and "ACME" are the same vendor; "Acme" and "Acme." are not.
    Runs inside the caller's transaction and does not commit.
    """
    name = (name or "").strip()
    if not name:
        raise ValidationError("Vendor name cannot be empty")

    existing = find_vendor(db, org_id, name)
    if existing:
        return existing.id

    vendor = Vendor(org_id=org_id, name=name, email=email)
    db.add(vendor)
    try:
        db.flush()
    except IntegrityError as e:
        # Another request created the same vendor between lookup and insert
        raise ConflictError(f"Vendor '{name}' was created concurrently; retry the request") from e

    logger.info("Created vendor %s (%s) for org %s", vendor.id, name, org_id)
    return vendor.id
