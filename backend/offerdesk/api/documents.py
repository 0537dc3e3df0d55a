"""
Document upload API endpoints.
"""
from fastapi import APIRouter, Depends, status, UploadFile, File as FastAPIFile
from sqlalchemy.orm import Session
from uuid import UUID
import time
import logging
from offerdesk.api.deps import get_org_id
from offerdesk.db.database import get_db
from offerdesk.errors import ValidationError
from offerdesk.schemas.document import DocumentResponse
from offerdesk.services.document_store import LocalDocumentStore, get_document_store

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def upload_document(
    file: UploadFile = FastAPIFile(...),
    org_id: UUID = Depends(get_org_id),
    db: Session = Depends(get_db),
    store: LocalDocumentStore = Depends(get_document_store)
):
    """Upload an offer document (price sheet, PDF, email export)."""
    if not file.filename:
        raise ValidationError("Uploaded file has no name")

    upload_start = time.perf_counter()
    document = store.save(db, org_id, file.filename, file.file)
    logger.info(
        "Uploaded document %s for org %s in %.2fs",
        file.filename,
        org_id,
        time.perf_counter() - upload_start,
    )
    return document


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: UUID,
    org_id: UUID = Depends(get_org_id),
    db: Session = Depends(get_db),
    store: LocalDocumentStore = Depends(get_document_store)
):
    """Get document metadata."""
    return store.get(db, org_id, document_id)
