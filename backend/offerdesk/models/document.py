"""
Document model - an uploaded offer file kept in the document store.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid
import uuid
from datetime import datetime
from offerdesk.db.database import Base


class Document(Base):
    __tablename__ = "documents"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid(as_uuid=True), ForeignKey("organizations.id"), nullable=False, index=True)
    original_filename = Column(String, nullable=False)
    storage_path = Column(String, nullable=False)  # Relative to UPLOAD_DIR
    file_type = Column(String, nullable=False)  # xlsx, xls, csv
    created_at = Column(DateTime, default=datetime.utcnow)
