"""
Catalog Store

Authoritative store for the five entity collections (events, guests,
photos, photo faces, photo matches) on top of a SQLAlchemy session.

Writes commit immediately so a reconciliation pass reads its own earlier
writes. PhotoMatch creation is insert-if-absent on (guest_id, photo_id):
the unique constraint decides, so two concurrent reconciliations for the
same guest cannot persist the same pair twice.
"""
import json
import logging
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from photospotter.core.exceptions import InvalidGuestRecord
from photospotter.models.event import Event
from photospotter.models.guest import Guest
from photospotter.models.photo import Photo
from photospotter.models.photo_face import PhotoFace
from photospotter.models.photo_match import PhotoMatch

logger = logging.getLogger(__name__)


class CatalogStore:
    """Create / get / query-by-foreign-key access to the catalog tables."""

    def __init__(self, db: Session):
        self.db = db

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def create_event(self, name: str, date: str, owner_id: str) -> Event:
        event = self._save(Event(name=name, date=date, owner_id=owner_id))
        logger.info(
            "Event created",
            extra={"event_type": "event_created", "event_id": event.id, "owner_id": owner_id}
        )
        return event

    def get_event(self, event_id: str) -> Optional[Event]:
        return self.db.query(Event).filter(Event.id == event_id).first()

    def list_events(self, owner_id: Optional[str] = None) -> list[Event]:
        query = self.db.query(Event)
        if owner_id is not None:
            query = query.filter(Event.owner_id == owner_id)
        return query.order_by(Event.created_at.desc()).all()

    # ------------------------------------------------------------------
    # Guests
    # ------------------------------------------------------------------

    def create_guest(
        self,
        name: str,
        email: str,
        phone: str,
        event_id: str,
        selfie_url: str,
        external_face_id: str,
    ) -> Guest:
        """
        Create a guest.

        Raises:
            InvalidGuestRecord: If external_face_id is empty (the guest could never be matched)
        """
        if not external_face_id:
            raise InvalidGuestRecord(
                "Guest must carry an external face id",
                details={"event_id": event_id},
            )
        guest = self._save(Guest(
            name=name,
            email=email,
            phone=phone,
            event_id=event_id,
            selfie_url=selfie_url,
            external_face_id=external_face_id,
        ))
        logger.info(
            "Guest created",
            extra={"event_type": "guest_created", "guest_id": guest.id, "event_id": event_id}
        )
        return guest

    def get_guest(self, guest_id: str) -> Optional[Guest]:
        return self.db.query(Guest).filter(Guest.id == guest_id).first()

    def list_event_guests(self, event_id: str) -> list[Guest]:
        return self.db.query(Guest).filter(Guest.event_id == event_id).all()

    # ------------------------------------------------------------------
    # Photos
    # ------------------------------------------------------------------

    def create_photo(self, url: str, event_id: str, photo_id: Optional[str] = None) -> Photo:
        photo = Photo(url=url, event_id=event_id)
        if photo_id:
            photo.id = photo_id
        photo = self._save(photo)
        logger.info(
            "Photo created",
            extra={"event_type": "photo_created", "photo_id": photo.id, "event_id": event_id}
        )
        return photo

    def get_photo(self, photo_id: str) -> Optional[Photo]:
        return self.db.query(Photo).filter(Photo.id == photo_id).first()

    def get_photos(self, photo_ids: Iterable[str]) -> dict[str, Photo]:
        """Resolve many photo ids in one query. Missing ids are absent from the result."""
        ids = list(set(photo_ids))
        if not ids:
            return {}
        photos = self.db.query(Photo).filter(Photo.id.in_(ids)).all()
        return {photo.id: photo for photo in photos}

    def list_event_photos(self, event_id: str) -> list[Photo]:
        return self.db.query(Photo).filter(Photo.event_id == event_id).all()

    # ------------------------------------------------------------------
    # Photo faces
    # ------------------------------------------------------------------

    def create_photo_face(
        self,
        photo_id: str,
        external_face_id: str,
        confidence: float,
        bounding_box: dict,
    ) -> PhotoFace:
        return self._save(PhotoFace(
            photo_id=photo_id,
            external_face_id=external_face_id,
            confidence=confidence,
            bounding_box=json.dumps(bounding_box),
        ))

    def list_photo_faces(self, photo_id: str) -> list[PhotoFace]:
        return self.db.query(PhotoFace).filter(PhotoFace.photo_id == photo_id).all()

    def find_faces_by_face_id(self, external_face_id: str) -> list[PhotoFace]:
        return self.db.query(PhotoFace).filter(
            PhotoFace.external_face_id == external_face_id
        ).all()

    # ------------------------------------------------------------------
    # Photo matches
    # ------------------------------------------------------------------

    def create_photo_match_if_absent(
        self,
        photo_id: str,
        guest_id: str,
        confidence: float,
    ) -> tuple[PhotoMatch, bool]:
        """
        Insert a PhotoMatch unless one already exists for (guest_id, photo_id).

        Returns:
            Tuple of (match, created). created is False when another writer
            persisted the pair first; the existing row is returned unchanged.
        """
        match = PhotoMatch(photo_id=photo_id, guest_id=guest_id, confidence=confidence)
        try:
            return self._save(match), True
        except IntegrityError:
            self.db.rollback()
            existing = self.db.query(PhotoMatch).filter(
                PhotoMatch.guest_id == guest_id,
                PhotoMatch.photo_id == photo_id,
            ).first()
            if existing is None:
                raise
            logger.info(
                "Photo match already persisted by a concurrent writer",
                extra={
                    "event_type": "photo_match_conflict",
                    "guest_id": guest_id,
                    "photo_id": photo_id,
                }
            )
            return existing, False

    def list_guest_matches(self, guest_id: str) -> list[PhotoMatch]:
        return self.db.query(PhotoMatch).filter(
            PhotoMatch.guest_id == guest_id
        ).order_by(PhotoMatch.created_at).all()

    # ------------------------------------------------------------------
    # Bulk cleanup
    # ------------------------------------------------------------------

    def wipe(self) -> dict[str, int]:
        """Delete every row of every catalog table (children first)."""
        counts = {}
        try:
            for model in (PhotoMatch, PhotoFace, Photo, Guest, Event):
                counts[model.__tablename__] = self.db.query(model).delete(synchronize_session=False)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info(
            "Catalog wiped",
            extra={"event_type": "catalog_wiped", **counts}
        )
        return counts
