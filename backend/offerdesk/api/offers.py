"""
Offer API endpoints: intake, normalization, lifecycle and conversion.
"""
from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional
from uuid import UUID
import logging
from offerdesk.api.deps import get_org_id
from offerdesk.db.database import get_db
from offerdesk.db.unit_of_work import unit_of_work
from offerdesk.models import Offer, OfferStatus
from offerdesk.schemas.offer import (
    OfferCreate, OfferResponse, ParsedOfferResponse,
    SpreadsheetImportRequest, SpreadsheetImportResponse,
)
from offerdesk.schemas.order import ConversionResponse
from offerdesk.services.conversion import convert_offer
from offerdesk.services.document_store import LocalDocumentStore, get_document_store
from offerdesk.services.extractor import OpenAIExtractor, get_extractor
from offerdesk.services.lifecycle import accept_offer, approve_offer, load_offer
from offerdesk.services.normalizer import (
    normalize_free_text, normalize_manual, normalize_spreadsheet,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/", response_model=OfferResponse, status_code=status.HTTP_201_CREATED)
async def create_offer(
    offer_data: OfferCreate,
    org_id: UUID = Depends(get_org_id),
    db: Session = Depends(get_db),
    store: LocalDocumentStore = Depends(get_document_store)
):
    """Register a new offer from pasted text, an uploaded document or by hand."""
    if offer_data.document_id:
        store.get(db, org_id, offer_data.document_id)

    with unit_of_work(db):
        offer = Offer(
            org_id=org_id,
            status=OfferStatus.NEW,
            source_type=offer_data.source_type,
            raw_content=offer_data.raw_content,
            document_id=offer_data.document_id,
            notes=offer_data.notes,
        )
        db.add(offer)
    db.refresh(offer)

    logger.info("Created %s offer %s for org %s", offer.source_type.value, offer.id, org_id)
    return offer


@router.get("/", response_model=List[OfferResponse])
async def list_offers(
    status_filter: Optional[OfferStatus] = Query(None, alias="status"),
    org_id: UUID = Depends(get_org_id),
    db: Session = Depends(get_db)
):
    """List the organization's offers, newest first."""
    query = db.query(Offer).filter(Offer.org_id == org_id)
    if status_filter:
        query = query.filter(Offer.status == status_filter)
    return query.order_by(Offer.created_at.desc()).all()


@router.get("/{offer_id}", response_model=OfferResponse)
async def get_offer(
    offer_id: UUID,
    org_id: UUID = Depends(get_org_id),
    db: Session = Depends(get_db)
):
    """Get an offer with its line items."""
    return load_offer(db, org_id, offer_id)


@router.post("/{offer_id}/parse-text", response_model=ParsedOfferResponse)
async def parse_offer_text(
    offer_id: UUID,
    org_id: UUID = Depends(get_org_id),
    db: Session = Depends(get_db),
    extractor: OpenAIExtractor = Depends(get_extractor)
):
    """Extract line items from the offer's raw text."""
    _, parsed = await normalize_free_text(db, org_id, offer_id, extractor)
    return {"parsed_offer": parsed}


@router.post("/{offer_id}/import-sheet", response_model=SpreadsheetImportResponse)
async def import_offer_sheet(
    offer_id: UUID,
    request: SpreadsheetImportRequest,
    org_id: UUID = Depends(get_org_id),
    db: Session = Depends(get_db),
    store: LocalDocumentStore = Depends(get_document_store)
):
    """Import line items from an uploaded price sheet."""
    offer = normalize_spreadsheet(db, org_id, offer_id, request.document_id, store)
    return {"items": offer.items}


@router.put("/{offer_id}/parsed", response_model=ParsedOfferResponse)
async def update_parsed_offer(
    offer_id: UUID,
    payload: Dict[str, Any] = Body(...),
    org_id: UUID = Depends(get_org_id),
    db: Session = Depends(get_db)
):
    """Replace the offer's canonical payload with a hand-edited one."""
    _, parsed = normalize_manual(db, org_id, offer_id, payload)
    return {"parsed_offer": parsed}


@router.post("/{offer_id}/approve", response_model=OfferResponse)
async def approve(
    offer_id: UUID,
    org_id: UUID = Depends(get_org_id),
    db: Session = Depends(get_db)
):
    """Approve a normalized offer (new -> negotiating)."""
    return approve_offer(db, org_id, offer_id)


@router.post("/{offer_id}/accept", response_model=OfferResponse)
async def accept(
    offer_id: UUID,
    org_id: UUID = Depends(get_org_id),
    db: Session = Depends(get_db)
):
    """Accept an offer under negotiation (negotiating -> accepted)."""
    return accept_offer(db, org_id, offer_id)


@router.post("/{offer_id}/convert", response_model=ConversionResponse, status_code=status.HTTP_201_CREATED)
async def convert(
    offer_id: UUID,
    org_id: UUID = Depends(get_org_id),
    db: Session = Depends(get_db)
):
    """Convert an approved offer into an order with a pending shipment."""
    result = convert_offer(db, org_id, offer_id)
    return {"order_id": result.order_id, "shipment_id": result.shipment_id}
