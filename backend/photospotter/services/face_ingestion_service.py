"""
Face Ingestion Pipeline

Indexes a guest selfie or an event photo into the face directory:

1. Normalize the image (bounded dimensions, JPEG)
2. index_face with MaxFaces=1 and the configured quality filter, tagging the
   face with the correlation id (photo id) when one is given
3. Retry per the injected RetryConfig; every attempt is bounded by
   EXTERNAL_CALL_TIMEOUT_SECONDS
4. On success with a correlation id, persist a PhotoFace row

A retry is triggered by a directory error, a timeout, or zero face records.
Once attempts are exhausted the pipeline raises NoFaceDetected (last attempt
found no face) or IngestionFailed, and nothing is written.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from photospotter.core.config import Settings, settings as app_settings
from photospotter.core.exceptions import (
    FaceDirectoryError,
    IngestionFailed,
    NoFaceDetected,
    ValidationError,
)
from photospotter.core.metrics import record_index_attempt, record_ingestion
from photospotter.core.retry import RetryConfig, retry_async
from photospotter.models.photo_face import PhotoFace
from photospotter.services.catalog import CatalogStore
from photospotter.services.face_directory import FaceDirectory, IndexedFace
from photospotter.services.image_normalizer import ImageNormalizer

logger = logging.getLogger(__name__)

INGESTION_RETRYABLE_EXCEPTIONS = (FaceDirectoryError, NoFaceDetected, asyncio.TimeoutError)


def build_ingestion_retry_config(config: Settings = app_settings) -> RetryConfig:
    """Build the index retry policy from INGESTION_* settings."""
    if config.INGESTION_BACKOFF == "exponential":
        return RetryConfig(
            max_attempts=config.INGESTION_MAX_ATTEMPTS,
            base_delay=config.INGESTION_RETRY_DELAY_SECONDS,
            max_delay=config.INGESTION_RETRY_DELAY_SECONDS * 8,
            retryable_exceptions=INGESTION_RETRYABLE_EXCEPTIONS,
        )
    return RetryConfig.fixed(
        max_attempts=config.INGESTION_MAX_ATTEMPTS,
        delay=config.INGESTION_RETRY_DELAY_SECONDS,
        retryable_exceptions=INGESTION_RETRYABLE_EXCEPTIONS,
    )


@dataclass
class IngestionResult:
    """
    Outcome of a successful ingestion.

    Attributes:
        face_id: External face id assigned by the face directory
        face: The indexed face record (confidence, bounding box)
        photo_face: PhotoFace row, only when a correlation id was supplied
    """
    face_id: str
    face: IndexedFace
    photo_face: Optional[PhotoFace] = None


class FaceIngestionPipeline:
    """Normalize, index with bounded retries, and record photo faces."""

    def __init__(
        self,
        catalog: CatalogStore,
        face_directory: FaceDirectory,
        retry_config: Optional[RetryConfig] = None,
        normalizer: Optional[ImageNormalizer] = None,
        quality_filter: Optional[str] = None,
        call_timeout: Optional[float] = None,
    ):
        """
        Initialize FaceIngestionPipeline.

        Args:
            catalog: Catalog store receiving PhotoFace rows
            face_directory: Face directory client
            retry_config: Index retry policy (built from settings if None)
            normalizer: Image normalizer (default limits from settings if None)
            quality_filter: Index quality filter (settings.INDEX_QUALITY_FILTER if None)
            call_timeout: Per-attempt timeout in seconds
        """
        self.catalog = catalog
        self.face_directory = face_directory
        self.retry_config = retry_config or build_ingestion_retry_config()
        self.normalizer = normalizer or ImageNormalizer()
        self.quality_filter = app_settings.INDEX_QUALITY_FILTER if quality_filter is None else quality_filter
        self.call_timeout = app_settings.EXTERNAL_CALL_TIMEOUT_SECONDS if call_timeout is None else call_timeout

    async def _index_once(self, image_bytes: bytes, correlation_id: Optional[str]) -> IndexedFace:
        try:
            faces = await asyncio.wait_for(
                self.face_directory.index_face(
                    image_bytes,
                    external_image_id=correlation_id,
                    max_faces=1,
                    quality_filter=self.quality_filter,
                ),
                timeout=self.call_timeout,
            )
        except asyncio.TimeoutError:
            record_index_attempt("timeout")
            raise
        except FaceDirectoryError:
            record_index_attempt("error")
            raise

        if not faces:
            record_index_attempt("no_face")
            raise NoFaceDetected(details={"correlation_id": correlation_id})

        record_index_attempt("success")
        return faces[0]

    async def prepare(self, image_bytes: bytes) -> bytes:
        """
        Validate and normalize an image ahead of indexing.

        Callers that persist anything for the image run this first, so an
        undecodable upload is rejected before it is stored.

        Raises:
            ValidationError: Empty or undecodable image
        """
        if not image_bytes:
            raise ValidationError("Image is required")
        return await self.normalizer.normalize(image_bytes)

    async def ingest(self, image_bytes: bytes, correlation_id: Optional[str] = None) -> IngestionResult:
        """
        Ingest one image into the face directory.

        Args:
            image_bytes: Raw uploaded image
            correlation_id: Photo id to tag the face with; None for guest selfies

        Returns:
            IngestionResult carrying the external face id

        Raises:
            ValidationError: Empty or undecodable image
            NoFaceDetected: No face found on the final attempt
            IngestionFailed: Directory errors or timeouts on every attempt
        """
        normalized = await self.prepare(image_bytes)
        return await self.index(normalized, correlation_id=correlation_id)

    async def index(self, normalized: bytes, correlation_id: Optional[str] = None) -> IngestionResult:
        """Index an image already returned by prepare(). See ingest() for the errors raised."""
        kind = "photo" if correlation_id else "selfie"

        try:
            face = await retry_async(
                self._index_once,
                normalized,
                correlation_id,
                config=self.retry_config,
                operation_name="index_face",
            )
        except NoFaceDetected:
            record_ingestion(kind, "no_face")
            logger.warning(
                "No face detected after all index attempts",
                extra={
                    "event_type": "ingestion_no_face",
                    "correlation_id": correlation_id,
                    "attempts": self.retry_config.max_attempts,
                }
            )
            raise
        except (FaceDirectoryError, asyncio.TimeoutError) as e:
            record_ingestion(kind, "failed")
            logger.error(
                f"Face ingestion failed: {e}",
                extra={
                    "event_type": "ingestion_failed",
                    "correlation_id": correlation_id,
                    "attempts": self.retry_config.max_attempts,
                    "error_type": type(e).__name__,
                }
            )
            raise IngestionFailed(
                details={"correlation_id": correlation_id, "error_type": type(e).__name__}
            ) from e

        photo_face = None
        if correlation_id:
            photo_face = self.catalog.create_photo_face(
                photo_id=correlation_id,
                external_face_id=face.face_id,
                confidence=face.confidence,
                bounding_box=face.bounding_box.to_dict(),
            )

        record_ingestion(kind, "success")
        logger.info(
            "Face ingested",
            extra={
                "event_type": "face_ingested",
                "kind": kind,
                "face_id": face.face_id,
                "correlation_id": correlation_id,
                "confidence": face.confidence,
            }
        )
        return IngestionResult(face_id=face.face_id, face=face, photo_face=photo_face)
