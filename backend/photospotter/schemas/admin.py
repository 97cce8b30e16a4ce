"""Pydantic schemas for administrative cleanup API"""
from pydantic import BaseModel, Field
from typing import Dict


class CleanupResponse(BaseModel):
    """Result of a full cleanup."""
    message: str
    objects_deleted: int = Field(..., description="Objects removed from the originals bucket")
    faces_deleted: int = Field(..., description="Faces removed from the collection")
    rows_deleted: Dict[str, int] = Field(..., description="Rows removed per catalog table")


class FaceCleanupResponse(BaseModel):
    """Result of a face collection cleanup."""
    message: str
    faces_deleted: int
