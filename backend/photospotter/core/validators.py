"""
Validation helpers for FastAPI endpoints.

Reusable type annotations for path parameters with built-in UUID validation.
"""
from uuid import UUID
from fastapi import Path
from typing import Annotated


# Usage: async def get_event(event_id: EventUUID):
EventUUID = Annotated[
    UUID,
    Path(description="Event UUID", examples=["550e8400-e29b-41d4-a716-446655440000"])
]

PhotoUUID = Annotated[
    UUID,
    Path(description="Photo UUID", examples=["550e8400-e29b-41d4-a716-446655440000"])
]
