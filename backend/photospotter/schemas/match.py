"""Pydantic schemas for match lookup API"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from photospotter.schemas.photo import PhotoResponse


class MatchResponse(BaseModel):
    """A persisted guest/photo match with its photo."""
    id: str
    photo_id: str
    guest_id: str
    confidence: float = Field(..., ge=0, le=100, description="Similarity score 0-100")
    created_at: Optional[datetime] = None
    photo: PhotoResponse

    model_config = {"from_attributes": True}


class ProbeMatchResponse(BaseModel):
    """An event photo matching a probe image (not persisted)."""
    photo_id: str
    confidence: float = Field(..., ge=0, le=100, description="Similarity score 0-100")
    photo: PhotoResponse

    model_config = {"from_attributes": True}
