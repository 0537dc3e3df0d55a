"""
Organization schemas.
"""
from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime


class OrganizationCreate(BaseModel):
    name: str
    currency: str = Field(default="USD", min_length=3, max_length=3)


class OrganizationResponse(BaseModel):
    id: UUID
    name: str
    currency: str
    created_at: datetime

    class Config:
        from_attributes = True
