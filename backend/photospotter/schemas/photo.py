"""Pydantic schemas for photo API"""
from pydantic import BaseModel
from datetime import datetime


class PhotoResponse(BaseModel):
    """Schema for photo response."""
    id: str
    url: str
    event_id: str
    created_at: datetime

    model_config = {"from_attributes": True}
