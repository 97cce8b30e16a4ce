"""Pydantic schemas for event API"""
from pydantic import BaseModel, Field
from datetime import datetime


class EventCreate(BaseModel):
    """Schema for creating an event."""
    name: str = Field(..., min_length=1, max_length=200, description="Event display name")
    date: str = Field(..., min_length=1, max_length=50, description="Event date (ISO 8601)")


class EventResponse(BaseModel):
    """Schema for event response."""
    id: str
    name: str
    date: str
    owner_id: str
    created_at: datetime

    model_config = {"from_attributes": True}
