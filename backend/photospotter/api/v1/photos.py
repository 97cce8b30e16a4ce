"""Photo upload API endpoints"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from photospotter.api.deps import get_current_organizer, get_photo_service
from photospotter.core.exceptions import ValidationError
from photospotter.core.validators import PhotoUUID
from photospotter.schemas.photo import PhotoResponse
from photospotter.services.photo_service import PhotoService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/photos", tags=["photos"])


@router.post("", response_model=PhotoResponse, status_code=status.HTTP_201_CREATED)
async def upload_photo(
    photo: Optional[UploadFile] = File(None),
    event_id: Optional[str] = Form(None, alias="eventId"),
    organizer_id: str = Depends(get_current_organizer),
    photo_service: PhotoService = Depends(get_photo_service),
):
    """
    Upload an event photo

    Only the event's organizer may upload. The response is sent once the
    photo's face has been indexed and is searchable.
    """
    if photo is None or not event_id:
        raise ValidationError("Photo and event ID are required")

    data = await photo.read()
    return await photo_service.upload_photo(
        event_id=event_id,
        owner_id=organizer_id,
        data=data,
        content_type=photo.content_type or "image/jpeg",
    )


@router.get("", response_model=List[PhotoResponse])
async def list_photos(
    event_id: Optional[str] = Query(None, alias="eventId"),
    organizer_id: str = Depends(get_current_organizer),
    photo_service: PhotoService = Depends(get_photo_service),
):
    if not event_id:
        raise ValidationError("Event ID is required")
    return photo_service.list_photos(event_id, organizer_id)


@router.get("/{photo_id}", response_model=PhotoResponse)
async def get_photo(photo_id: PhotoUUID, photo_service: PhotoService = Depends(get_photo_service)):
    return photo_service.get_photo(str(photo_id))
