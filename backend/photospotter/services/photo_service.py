"""
Photo upload orchestration

Organizer uploads: validate the image, store the original, create the Photo
row, index the face tagged with the photo id, then wait a short settle delay
so the face is searchable before the caller looks for matches.
"""
import asyncio
import logging
import uuid
from typing import Optional

from photospotter.core.config import settings
from photospotter.core.exceptions import Forbidden, IngestionFailed, NotFound, ValidationError
from photospotter.models.event import Event
from photospotter.models.photo import Photo
from photospotter.services.catalog import CatalogStore
from photospotter.services.face_ingestion_service import FaceIngestionPipeline
from photospotter.services.object_store import ObjectStore

logger = logging.getLogger(__name__)


class PhotoService:
    """Photo uploads and owner-scoped photo listing."""

    def __init__(
        self,
        catalog: CatalogStore,
        object_store: ObjectStore,
        pipeline: FaceIngestionPipeline,
        settle_delay: Optional[float] = None,
    ):
        self.catalog = catalog
        self.object_store = object_store
        self.pipeline = pipeline
        self.settle_delay = settings.INDEX_SETTLE_DELAY_SECONDS if settle_delay is None else settle_delay

    def _get_owned_event(self, event_id: str, owner_id: str) -> Event:
        event = self.catalog.get_event(event_id)
        if event is None:
            raise NotFound("Event not found", details={"event_id": event_id})
        if event.owner_id != owner_id:
            logger.warning(
                "Organizer does not own event",
                extra={"event_type": "event_access_denied", "event_id": event_id, "owner_id": owner_id}
            )
            raise Forbidden(details={"event_id": event_id})
        return event

    async def upload_photo(
        self,
        event_id: str,
        owner_id: str,
        data: bytes,
        content_type: str,
    ) -> Photo:
        """
        Upload an event photo and index its face.

        Raises:
            ValidationError: Missing photo or event id, or undecodable image
            NotFound: Event does not exist
            Forbidden: Caller does not own the event
            IngestionFailed: Face indexing failed (the upload is aborted)
        """
        if not data or not event_id:
            raise ValidationError("Photo and event ID are required")

        self._get_owned_event(event_id, owner_id)

        # Nothing is stored for an upload that is not an image
        normalized = await self.pipeline.prepare(data)

        photo_id = str(uuid.uuid4())
        url = await asyncio.wait_for(
            self.object_store.put(data, content_type),
            timeout=settings.EXTERNAL_CALL_TIMEOUT_SECONDS,
        )
        photo = self.catalog.create_photo(url=url, event_id=event_id, photo_id=photo_id)

        try:
            await self.pipeline.index(normalized, correlation_id=photo.id)
        except IngestionFailed as e:
            logger.error(
                f"Photo upload aborted: {e.message}",
                extra={
                    "event_type": "photo_upload_failed",
                    "photo_id": photo.id,
                    "event_id": event_id,
                    "error_type": type(e).__name__,
                }
            )
            raise

        # Directory search is eventually consistent right after indexing
        if self.settle_delay > 0:
            await asyncio.sleep(self.settle_delay)

        logger.info(
            "Photo uploaded",
            extra={"event_type": "photo_uploaded", "photo_id": photo.id, "event_id": event_id}
        )
        return photo

    def list_photos(self, event_id: str, owner_id: str) -> list[Photo]:
        """List an event's photos for its owner."""
        self._get_owned_event(event_id, owner_id)
        return self.catalog.list_event_photos(event_id)

    def get_photo(self, photo_id: str) -> Photo:
        photo = self.catalog.get_photo(photo_id)
        if photo is None:
            raise NotFound("Photo not found", details={"photo_id": photo_id})
        return photo
