"""
Shared API dependencies.
"""
from uuid import UUID
from fastapi import Depends, Header
from sqlalchemy.orm import Session
from offerdesk.db.database import get_db
from offerdesk.errors import NotFoundError, ValidationError
from offerdesk.models import Organization


def get_org_id(
    x_org_id: str = Header(..., alias="X-Org-Id"),
    db: Session = Depends(get_db)
) -> UUID:
    """Resolve the calling organization from the X-Org-Id header."""
    try:
        org_id = UUID(x_org_id)
    except ValueError as e:
        raise ValidationError(f"X-Org-Id '{x_org_id}' is not a valid id") from e
    exists = db.query(Organization.id).filter(Organization.id == org_id).first()
    if not exists:
        raise NotFoundError(f"Organization {org_id} not found")
    return org_id
