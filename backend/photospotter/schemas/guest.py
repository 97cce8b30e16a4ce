"""Pydantic schemas for guest API"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class GuestResponse(BaseModel):
    """Schema for guest response."""
    id: str
    name: str
    email: str
    phone: str
    event_id: str
    selfie_url: str
    face_id: Optional[str] = Field(None, description="Face directory id of the indexed selfie")
    created_at: datetime

    model_config = {"from_attributes": True}
