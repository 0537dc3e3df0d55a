"""
Document schemas.
"""
from pydantic import BaseModel
from uuid import UUID
from datetime import datetime


class DocumentResponse(BaseModel):
    id: UUID
    org_id: UUID
    original_filename: str
    file_type: str
    created_at: datetime

    class Config:
        from_attributes = True
