"""
Organization API endpoints.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
from offerdesk.db.database import get_db
from offerdesk.db.unit_of_work import unit_of_work
from offerdesk.errors import ConflictError, NotFoundError
from offerdesk.models import Organization
from offerdesk.schemas.organization import OrganizationCreate, OrganizationResponse

router = APIRouter()


@router.post("/", response_model=OrganizationResponse, status_code=status.HTTP_201_CREATED)
async def create_organization(
    org_data: OrganizationCreate,
    db: Session = Depends(get_db)
):
    """Create a new organization."""
    # Check if organization with same name exists
    existing = db.query(Organization).filter(Organization.name == org_data.name).first()
    if existing:
        raise ConflictError(f"Organization with name '{org_data.name}' already exists")

    with unit_of_work(db):
        organization = Organization(
            name=org_data.name,
            currency=org_data.currency.upper(),
        )
        db.add(organization)
    db.refresh(organization)

    return organization


@router.get("/", response_model=List[OrganizationResponse])
async def list_organizations(
    db: Session = Depends(get_db)
):
    """List all organizations."""
    return db.query(Organization).order_by(Organization.name).all()


@router.get("/{org_id}", response_model=OrganizationResponse)
async def get_organization(
    org_id: UUID,
    db: Session = Depends(get_db)
):
    """Get a specific organization."""
    organization = db.query(Organization).filter(Organization.id == org_id).first()
    if not organization:
        raise NotFoundError(f"Organization {org_id} not found")
    return organization
