"""
Guest registration

Validates the registration form and the selfie image, stores the selfie,
indexes the guest's face (no correlation tag, no PhotoFace row) and records
the guest with the returned external face id.
"""
import asyncio
import logging
import re

from photospotter.core.config import settings
from photospotter.core.exceptions import NotFound, ValidationError
from photospotter.models.guest import Guest
from photospotter.services.catalog import CatalogStore
from photospotter.services.face_ingestion_service import FaceIngestionPipeline
from photospotter.services.object_store import ObjectStore

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PHONE_LENGTH = 10


def validate_registration(name: str, email: str, phone: str, event_id: str, selfie: bytes) -> None:
    """Raise ValidationError naming the first invalid registration field."""
    if not selfie or not name or not email or not phone or not event_id:
        raise ValidationError("All fields are required")
    if not name.strip():
        raise ValidationError("Name is required", details={"field": "name"})
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Invalid email address", details={"field": "email"})
    if len(phone.strip()) < MIN_PHONE_LENGTH:
        raise ValidationError(
            f"Phone number must be at least {MIN_PHONE_LENGTH} characters",
            details={"field": "phone"},
        )


class GuestService:
    """Guest registration and listing."""

    def __init__(
        self,
        catalog: CatalogStore,
        object_store: ObjectStore,
        pipeline: FaceIngestionPipeline,
    ):
        self.catalog = catalog
        self.object_store = object_store
        self.pipeline = pipeline

    async def register_guest(
        self,
        event_id: str,
        name: str,
        email: str,
        phone: str,
        selfie: bytes,
        content_type: str,
    ) -> Guest:
        """
        Register a guest for an event.

        Raises:
            ValidationError: Missing or malformed field, or undecodable selfie
            NotFound: Event does not exist
            IngestionFailed: Selfie could not be indexed
        """
        validate_registration(name, email, phone, event_id, selfie)

        if self.catalog.get_event(event_id) is None:
            raise NotFound("Event not found", details={"event_id": event_id})

        normalized = await self.pipeline.prepare(selfie)
        selfie_url = await asyncio.wait_for(
            self.object_store.put(selfie, content_type),
            timeout=settings.EXTERNAL_CALL_TIMEOUT_SECONDS,
        )
        result = await self.pipeline.index(normalized)

        guest = self.catalog.create_guest(
            name=name.strip(),
            email=email.strip(),
            phone=phone.strip(),
            event_id=event_id,
            selfie_url=selfie_url,
            external_face_id=result.face_id,
        )
        logger.info(
            "Guest registered",
            extra={
                "event_type": "guest_registered",
                "guest_id": guest.id,
                "event_id": event_id,
                "face_id": result.face_id,
            }
        )
        return guest

    def list_guests(self, event_id: str) -> list[Guest]:
        if not event_id:
            raise ValidationError("Event ID is required")
        return self.catalog.list_event_guests(event_id)
