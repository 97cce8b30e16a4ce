"""Guest registration API endpoints"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from photospotter.api.deps import get_guest_service
from photospotter.core.exceptions import ValidationError
from photospotter.schemas.guest import GuestResponse
from photospotter.services.guest_service import GuestService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/guests", tags=["guests"])


@router.post("", response_model=GuestResponse, status_code=status.HTTP_201_CREATED)
async def register_guest(
    selfie: Optional[UploadFile] = File(None),
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    event_id: Optional[str] = Form(None, alias="eventId"),
    guest_service: GuestService = Depends(get_guest_service),
):
    """
    Register a guest with a selfie

    The selfie is stored, its face indexed, and the guest recorded with the
    resulting face id. All form fields are required.
    """
    if selfie is None:
        raise ValidationError("All fields are required")

    data = await selfie.read()
    return await guest_service.register_guest(
        event_id=event_id,
        name=name,
        email=email,
        phone=phone,
        selfie=data,
        content_type=selfie.content_type or "image/jpeg",
    )


@router.get("", response_model=List[GuestResponse])
async def list_guests(
    event_id: Optional[str] = Query(None, alias="eventId"),
    guest_service: GuestService = Depends(get_guest_service),
):
    return guest_service.list_guests(event_id)
