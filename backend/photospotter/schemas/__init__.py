"""Pydantic schemas for request/response validation"""
from photospotter.schemas.event import EventCreate, EventResponse
from photospotter.schemas.guest import GuestResponse
from photospotter.schemas.photo import PhotoResponse
from photospotter.schemas.match import MatchResponse, ProbeMatchResponse
from photospotter.schemas.admin import CleanupResponse, FaceCleanupResponse

__all__ = [
    "EventCreate",
    "EventResponse",
    "GuestResponse",
    "PhotoResponse",
    "MatchResponse",
    "ProbeMatchResponse",
    "CleanupResponse",
    "FaceCleanupResponse",
]
