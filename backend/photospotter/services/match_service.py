"""
Match Reconciliation Engine

Turns raw similarity candidates from the face directory into validated,
deduplicated, event-scoped PhotoMatch records.

Guest lookup (find_matches_for_guest):
    1. Load the guest and resolve its external face id (InvalidGuestRecord
       before any external call if there is none)
    2. search_faces(face_id) on the directory
    3. For each candidate, in directory order: skip missing tags, tags seen
       earlier in this pass, tags already persisted for the guest, and photos
       that are missing or belong to another event; otherwise insert the
       PhotoMatch if absent
    4. Merge persisted and new matches, re-check each photo's event, return

Probe lookup (find_matches_for_image) searches by image and filters the
candidates down to the event's photos. It never writes.

Cross-event candidates are dropped silently. Directory, timeout and
database failures surface as MatchLookupFailed; matches created before the
failure stay persisted, and a re-run picks up where it left off.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError

from photospotter.core.config import settings
from photospotter.core.exceptions import (
    FaceDirectoryError,
    InvalidGuestRecord,
    MatchLookupFailed,
    NotFound,
    ValidationError,
)
from photospotter.core.metrics import (
    record_candidate_skipped,
    record_match_created,
    record_match_lookup,
)
from photospotter.models.photo import Photo
from photospotter.models.photo_match import PhotoMatch
from photospotter.services.catalog import CatalogStore
from photospotter.services.face_directory import FaceDirectory
from photospotter.services.image_normalizer import ImageNormalizer

logger = logging.getLogger(__name__)

LOOKUP_ERRORS = (FaceDirectoryError, asyncio.TimeoutError, SQLAlchemyError)


@dataclass
class MatchWithPhoto:
    """
    A persisted PhotoMatch joined with its Photo.

    Attributes:
        created: True when this lookup inserted the row
    """
    id: str
    photo_id: str
    guest_id: str
    confidence: float
    created_at: Optional[datetime]
    photo: Photo
    created: bool = False

    @classmethod
    def from_match(cls, match: PhotoMatch, photo: Photo, created: bool = False) -> "MatchWithPhoto":
        return cls(
            id=match.id,
            photo_id=match.photo_id,
            guest_id=match.guest_id,
            confidence=match.confidence,
            created_at=match.created_at,
            photo=photo,
            created=created,
        )


@dataclass
class ProbeMatch:
    """An event photo whose face resembles the probe image."""
    photo_id: str
    photo: Photo
    confidence: float


class MatchReconciliationEngine:
    """Reconciles face directory candidates against the catalog."""

    def __init__(
        self,
        catalog: CatalogStore,
        face_directory: FaceDirectory,
        normalizer: Optional[ImageNormalizer] = None,
        match_threshold: Optional[float] = None,
        max_faces: Optional[int] = None,
        probe_threshold: Optional[float] = None,
        probe_max_faces: Optional[int] = None,
        resolve_batch_size: Optional[int] = None,
        call_timeout: Optional[float] = None,
    ):
        self.catalog = catalog
        self.face_directory = face_directory
        self.normalizer = normalizer or ImageNormalizer()
        self.match_threshold = settings.FACE_MATCH_THRESHOLD if match_threshold is None else match_threshold
        self.max_faces = settings.FACE_SEARCH_MAX_FACES if max_faces is None else max_faces
        self.probe_threshold = settings.PROBE_MATCH_THRESHOLD if probe_threshold is None else probe_threshold
        self.probe_max_faces = settings.PROBE_SEARCH_MAX_FACES if probe_max_faces is None else probe_max_faces
        self.resolve_batch_size = (
            settings.MATCH_RESOLVE_BATCH_SIZE if resolve_batch_size is None else resolve_batch_size
        )
        self.call_timeout = settings.EXTERNAL_CALL_TIMEOUT_SECONDS if call_timeout is None else call_timeout

    def _resolve_photos(self, photo_ids: Iterable[str], known: Optional[dict] = None) -> dict[str, Photo]:
        """Resolve photo ids in batches of resolve_batch_size, reusing already-known photos."""
        resolved = dict(known or {})
        pending = [pid for pid in dict.fromkeys(photo_ids) if pid not in resolved]
        for i in range(0, len(pending), self.resolve_batch_size):
            resolved.update(self.catalog.get_photos(pending[i:i + self.resolve_batch_size]))
        return resolved

    async def find_matches_for_guest(self, guest_id: str) -> list[MatchWithPhoto]:
        """
        Find, persist, and return the photos matching a guest's face.

        Raises:
            NotFound: Guest does not exist
            InvalidGuestRecord: Guest carries no external face id
            MatchLookupFailed: Face directory or catalog failure
        """
        try:
            results = await self._reconcile_guest(guest_id)
        except LOOKUP_ERRORS as e:
            record_match_lookup("guest", "failed")
            logger.error(
                f"Match lookup failed for guest {guest_id}: {e}",
                extra={
                    "event_type": "match_lookup_failed",
                    "guest_id": guest_id,
                    "error_type": type(e).__name__,
                }
            )
            raise MatchLookupFailed(details={"guest_id": guest_id}) from e

        record_match_lookup("guest", "success")
        return results

    async def _reconcile_guest(self, guest_id: str) -> list[MatchWithPhoto]:
        guest = self.catalog.get_guest(guest_id)
        if guest is None:
            raise NotFound("Guest not found", details={"guest_id": guest_id})

        event_id = guest.event_id
        face_id = guest.face_id
        if not face_id:
            logger.warning(
                "Guest has no external face id",
                extra={"event_type": "guest_face_id_missing", "guest_id": guest_id}
            )
            raise InvalidGuestRecord(details={"guest_id": guest_id})

        candidates = await asyncio.wait_for(
            self.face_directory.search_faces(
                face_id,
                threshold=self.match_threshold,
                max_faces=self.max_faces,
            ),
            timeout=self.call_timeout,
        )

        persisted = self.catalog.list_guest_matches(guest_id)
        claimed = {match.photo_id for match in persisted}

        photos = self._resolve_photos(
            c.external_image_id for c in candidates
            if c.external_image_id and c.external_image_id not in claimed
        )

        processed: set[str] = set()
        new_matches: list[tuple[PhotoMatch, bool]] = []
        for candidate in candidates:
            photo_id = candidate.external_image_id
            if not photo_id:
                record_candidate_skipped("missing_tag")
                continue
            if photo_id in processed:
                record_candidate_skipped("duplicate")
                continue
            if photo_id in claimed:
                record_candidate_skipped("already_matched")
                continue

            photo = photos.get(photo_id)
            if photo is None:
                record_candidate_skipped("photo_missing")
                continue
            if photo.event_id != event_id:
                record_candidate_skipped("other_event")
                logger.debug(
                    "Dropping cross-event candidate",
                    extra={
                        "event_type": "match_candidate_other_event",
                        "guest_id": guest_id,
                        "photo_id": photo_id,
                    }
                )
                continue

            match, created = self.catalog.create_photo_match_if_absent(
                photo_id=photo_id,
                guest_id=guest_id,
                confidence=candidate.similarity or 0.0,
            )
            processed.add(photo_id)
            new_matches.append((match, created))

        created_count = sum(1 for _, created in new_matches if created)
        record_match_created(created_count)

        merged = [(match, False) for match in persisted] + new_matches
        photos = self._resolve_photos((match.photo_id for match, _ in merged), known=photos)

        results = []
        for match, created in merged:
            photo = photos.get(match.photo_id)
            if photo is None or photo.event_id != event_id:
                continue
            results.append(MatchWithPhoto.from_match(match, photo, created=created))

        logger.info(
            f"Resolved {len(results)} matches for guest",
            extra={
                "event_type": "guest_matches_resolved",
                "guest_id": guest_id,
                "event_id": event_id,
                "candidate_count": len(candidates),
                "created_count": created_count,
                "match_count": len(results),
            }
        )
        return results

    async def find_matches_for_image(self, image_bytes: bytes, event_id: str) -> list[ProbeMatch]:
        """
        Find event photos containing the face in a probe image. Read-only.

        Raises:
            ValidationError: Missing or undecodable image
            MatchLookupFailed: Face directory or catalog failure
        """
        if not image_bytes:
            raise ValidationError("Image is required")

        try:
            results = await self._search_probe(image_bytes, event_id)
        except LOOKUP_ERRORS as e:
            record_match_lookup("probe", "failed")
            logger.error(
                f"Probe search failed for event {event_id}: {e}",
                extra={
                    "event_type": "probe_search_failed",
                    "event_id": event_id,
                    "error_type": type(e).__name__,
                }
            )
            raise MatchLookupFailed(details={"event_id": event_id}) from e

        record_match_lookup("probe", "success")
        return results

    async def _search_probe(self, image_bytes: bytes, event_id: str) -> list[ProbeMatch]:
        event_photos = {photo.id: photo for photo in self.catalog.list_event_photos(event_id)}
        if not event_photos:
            return []

        normalized = await self.normalizer.normalize(image_bytes)
        candidates = await asyncio.wait_for(
            self.face_directory.search_faces_by_image(
                normalized,
                threshold=self.probe_threshold,
                max_faces=self.probe_max_faces,
            ),
            timeout=self.call_timeout,
        )

        seen: set[str] = set()
        results = []
        for candidate in candidates:
            photo_id = candidate.external_image_id
            if not photo_id or photo_id in seen or photo_id not in event_photos:
                continue
            seen.add(photo_id)
            results.append(ProbeMatch(
                photo_id=photo_id,
                photo=event_photos[photo_id],
                confidence=candidate.similarity or 0.0,
            ))

        logger.info(
            f"Probe search found {len(results)} photos",
            extra={
                "event_type": "probe_search_completed",
                "event_id": event_id,
                "candidate_count": len(candidates),
                "match_count": len(results),
            }
        )
        return results
