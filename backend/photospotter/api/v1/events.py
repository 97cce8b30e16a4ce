"""Event API endpoints"""
import logging
from typing import List

from fastapi import APIRouter, Depends, status

from photospotter.api.deps import get_catalog, get_current_organizer
from photospotter.core.exceptions import NotFound
from photospotter.core.validators import EventUUID
from photospotter.schemas.event import EventCreate, EventResponse
from photospotter.services.catalog import CatalogStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["events"])


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    event_data: EventCreate,
    organizer_id: str = Depends(get_current_organizer),
    catalog: CatalogStore = Depends(get_catalog),
):
    """Create an event owned by the calling organizer."""
    return catalog.create_event(event_data.name, event_data.date, organizer_id)


@router.get("", response_model=List[EventResponse])
async def list_events(catalog: CatalogStore = Depends(get_catalog)):
    """List all events, newest first."""
    return catalog.list_events()


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(event_id: EventUUID, catalog: CatalogStore = Depends(get_catalog)):
    event = catalog.get_event(str(event_id))
    if event is None:
        raise NotFound("Event not found", details={"event_id": str(event_id)})
    return event
