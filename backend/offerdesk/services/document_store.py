"""
Local document store - uploaded offer files live under UPLOAD_DIR.
"""
import logging
import shutil
from pathlib import Path
from typing import BinaryIO, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from offerdesk.db.database import settings
from offerdesk.db.unit_of_work import unit_of_work
from offerdesk.errors import ExternalServiceError, NotFoundError
from offerdesk.models import Document
from offerdesk.services.file_parser import infer_file_type

logger = logging.getLogger(__name__)


class LocalDocumentStore:
    def __init__(self, root: Optional[str] = None):
        self.root = Path(root or settings.upload_dir)

    def save(self, db: Session, org_id: UUID, filename: str, stream: BinaryIO) -> Document:
        """Persist an uploaded file and register it for the organization."""
        org_dir = self.root / str(org_id)
        org_dir.mkdir(parents=True, exist_ok=True)

        with unit_of_work(db):
            document = Document(
                org_id=org_id,
                original_filename=filename,
                storage_path="",
                file_type=infer_file_type(filename),
            )
            db.add(document)
            db.flush()

            relative_path = Path(str(org_id)) / f"{document.id}_{Path(filename).name}"
            try:
                with open(self.root / relative_path, "wb") as buffer:
                    shutil.copyfileobj(stream, buffer)
            except OSError as e:
                raise ExternalServiceError(f"Could not store document {filename}: {e}") from e
            document.storage_path = str(relative_path)

        db.refresh(document)
        logger.info("Stored document %s (%s) for org %s", document.id, filename, org_id)
        return document

    def get(self, db: Session, org_id: UUID, document_id: UUID) -> Document:
        document = (
            db.query(Document)
            .filter(Document.id == document_id, Document.org_id == org_id)
            .first()
        )
        if not document:
            raise NotFoundError(f"Document {document_id} not found")
        return document

    def fetch(self, db: Session, org_id: UUID, document_id: UUID) -> Tuple[Document, bytes]:
        """Return the document row and its raw bytes."""
        document = self.get(db, org_id, document_id)
        path = self.root / document.storage_path
        try:
            data = path.read_bytes()
        except FileNotFoundError as e:
            raise NotFoundError(f"Stored file for document {document_id} is missing") from e
        except OSError as e:
            raise ExternalServiceError(f"Could not read document {document_id}: {e}") from e
        return document, data


def get_document_store() -> LocalDocumentStore:
    return LocalDocumentStore()
