"""
Match lookup API endpoints

- GET /matches?guestId=: reconcile and return a guest's matched photos.
  Newly found matches trigger an SMS to the guest in the background.
- POST /matches/search: find an event's photos resembling a probe image.
  Read-only and rate limited per client address.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Query, Request, UploadFile
from slowapi import Limiter
from slowapi.util import get_remote_address

from photospotter.api.deps import get_catalog, get_match_engine
from photospotter.core.config import settings
from photospotter.core.exceptions import ValidationError
from photospotter.schemas.match import MatchResponse, ProbeMatchResponse
from photospotter.services.catalog import CatalogStore
from photospotter.services.match_service import MatchReconciliationEngine
from photospotter.services.notification_service import (
    GuestNotificationService,
    get_guest_notification_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/matches", tags=["matches"])

limiter = Limiter(key_func=get_remote_address)


@router.get("", response_model=List[MatchResponse])
async def get_guest_matches(
    background_tasks: BackgroundTasks,
    guest_id: Optional[str] = Query(None, alias="guestId"),
    engine: MatchReconciliationEngine = Depends(get_match_engine),
    catalog: CatalogStore = Depends(get_catalog),
    notifications: GuestNotificationService = Depends(get_guest_notification_service),
):
    """
    Get the photos a guest appears in

    Running the lookup again is safe: persisted matches are returned as-is
    and only genuinely new candidates are added.
    """
    if not guest_id:
        raise ValidationError("Guest ID is required")

    matches = await engine.find_matches_for_guest(guest_id)

    new_count = sum(1 for match in matches if match.created)
    if new_count and notifications.enabled:
        guest = catalog.get_guest(guest_id)
        background_tasks.add_task(
            notifications.notify_new_matches,
            guest_id,
            guest.name,
            guest.phone,
            new_count,
        )

    return [MatchResponse.model_validate(match) for match in matches]


@router.post("/search", response_model=List[ProbeMatchResponse])
@limiter.limit(settings.PROBE_SEARCH_RATE_LIMIT)
async def search_by_image(
    request: Request,
    image: Optional[UploadFile] = File(None),
    event_id: Optional[str] = Form(None, alias="eventId"),
    engine: MatchReconciliationEngine = Depends(get_match_engine),
):
    """Find event photos containing the face in an uploaded image. Nothing is persisted."""
    if image is None or not event_id:
        raise ValidationError("Image and event ID are required")

    data = await image.read()
    results = await engine.find_matches_for_image(data, event_id)
    return [ProbeMatchResponse.model_validate(result) for result in results]
