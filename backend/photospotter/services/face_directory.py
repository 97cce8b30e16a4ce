"""
Face Directory client

Wraps the external face search/index service (AWS Rekognition collections).
The rest of the application only sees the FaceDirectory interface and the
IndexedFace / FaceCandidate value objects, so tests can substitute a fake.

Rekognition semantics relied on:
    - IndexFaces with ExternalImageId tags the face with a correlation token
      (the photo id) that SearchFaces/SearchFacesByImage return later
    - MaxFaces=1 with QualityFilter=AUTO keeps only the most prominent,
      usable face
    - Zero FaceRecords means no face was detected
"""
import asyncio
import functools
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from photospotter.core.config import settings
from photospotter.core.exceptions import FaceDirectoryError
from photospotter.core.metrics import record_face_directory_call

logger = logging.getLogger(__name__)

# Rekognition DeleteFaces accepts at most 1000 ids per call
DELETE_BATCH_SIZE = 1000
LIST_PAGE_SIZE = 4096
NO_FACE_ERROR_CODE = "InvalidParameterException"


@dataclass
class BoundingBox:
    """Face bounding box as ratios of the image dimensions."""
    width: float = 0.0
    height: float = 0.0
    left: float = 0.0
    top: float = 0.0

    def to_dict(self) -> dict:
        return {"width": self.width, "height": self.height, "left": self.left, "top": self.top}


@dataclass
class IndexedFace:
    """A face record created by an index call."""
    face_id: str
    confidence: float = 0.0
    bounding_box: BoundingBox = field(default_factory=BoundingBox)
    external_image_id: Optional[str] = None


@dataclass
class FaceCandidate:
    """
    A similarity search hit.

    Attributes:
        face_id: Face directory id of the matched face
        external_image_id: Correlation tag attached at index time (photo id), if any
        similarity: Similarity score 0-100, None if the directory omitted it
    """
    face_id: Optional[str]
    external_image_id: Optional[str]
    similarity: Optional[float]


class FaceDirectory(ABC):
    """Interface to an external face index/search service."""

    @abstractmethod
    async def index_face(
        self,
        image_bytes: bytes,
        external_image_id: Optional[str] = None,
        max_faces: int = 1,
        quality_filter: str = "AUTO",
    ) -> list[IndexedFace]:
        """Index faces in an image. Returns an empty list when no face is detected."""

    @abstractmethod
    async def search_faces(
        self,
        face_id: str,
        threshold: float,
        max_faces: int,
    ) -> list[FaceCandidate]:
        """Find faces similar to an already indexed face, in directory order."""

    @abstractmethod
    async def search_faces_by_image(
        self,
        image_bytes: bytes,
        threshold: float,
        max_faces: int,
    ) -> list[FaceCandidate]:
        """Find faces similar to the largest face in a probe image."""

    @abstractmethod
    async def delete_faces(self, face_ids: list[str]) -> int:
        """Delete faces by id. Returns the number of faces deleted."""

    @abstractmethod
    async def list_face_ids(self) -> list[str]:
        """List every face id in the collection."""


def _parse_candidate(match: dict) -> FaceCandidate:
    face = match.get("Face") or {}
    return FaceCandidate(
        face_id=face.get("FaceId"),
        external_image_id=face.get("ExternalImageId"),
        similarity=match.get("Similarity"),
    )


def _parse_face_record(record: dict) -> Optional[IndexedFace]:
    face = (record or {}).get("Face") or {}
    face_id = face.get("FaceId")
    if not face_id:
        return None
    box = face.get("BoundingBox") or {}
    return IndexedFace(
        face_id=face_id,
        confidence=face.get("Confidence") or 0.0,
        bounding_box=BoundingBox(
            width=box.get("Width", 0.0),
            height=box.get("Height", 0.0),
            left=box.get("Left", 0.0),
            top=box.get("Top", 0.0),
        ),
        external_image_id=face.get("ExternalImageId"),
    )


class RekognitionFaceDirectory(FaceDirectory):
    """
    FaceDirectory backed by a single AWS Rekognition collection.

    boto3 is synchronous, so every call runs in the default executor.
    """

    def __init__(self, collection_id: str, client=None):
        """
        Initialize RekognitionFaceDirectory.

        Args:
            collection_id: Rekognition collection holding guest and photo faces
            client: Optional boto3 rekognition client (created from settings if None)
        """
        self.collection_id = collection_id
        self.client = client or boto3.client(
            "rekognition",
            region_name=settings.AWS_REGION,
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
            config=Config(
                connect_timeout=5,
                read_timeout=settings.EXTERNAL_CALL_TIMEOUT_SECONDS,
                retries={"max_attempts": 1},
            ),
        )

    async def _call(self, operation: str, **kwargs) -> dict:
        method = getattr(self.client, operation)
        loop = asyncio.get_running_loop()
        start_time = time.perf_counter()
        try:
            return await loop.run_in_executor(None, functools.partial(method, **kwargs))
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.warning(
                f"Rekognition {operation} failed: {code}",
                extra={
                    "event_type": "face_directory_error",
                    "operation": operation,
                    "error_code": code,
                    "collection_id": self.collection_id,
                }
            )
            raise FaceDirectoryError(
                f"Rekognition {operation} failed",
                details={"error_code": code, "operation": operation},
            ) from e
        except BotoCoreError as e:
            logger.warning(
                f"Rekognition {operation} unreachable: {e}",
                extra={
                    "event_type": "face_directory_unreachable",
                    "operation": operation,
                    "error_type": type(e).__name__,
                }
            )
            raise FaceDirectoryError(
                f"Rekognition {operation} failed",
                details={"error_type": type(e).__name__, "operation": operation},
            ) from e
        finally:
            record_face_directory_call(operation, time.perf_counter() - start_time)

    async def index_face(
        self,
        image_bytes: bytes,
        external_image_id: Optional[str] = None,
        max_faces: int = 1,
        quality_filter: str = "AUTO",
    ) -> list[IndexedFace]:
        kwargs = {
            "CollectionId": self.collection_id,
            "Image": {"Bytes": image_bytes},
            "MaxFaces": max_faces,
            "QualityFilter": quality_filter,
            "DetectionAttributes": ["DEFAULT"],
        }
        if external_image_id:
            kwargs["ExternalImageId"] = external_image_id

        response = await self._call("index_faces", **kwargs)
        faces = [
            face for face in
            (_parse_face_record(r) for r in response.get("FaceRecords") or [])
            if face is not None
        ]

        logger.debug(
            f"Indexed {len(faces)} face(s)",
            extra={
                "event_type": "faces_indexed",
                "external_image_id": external_image_id,
                "face_count": len(faces),
                "unindexed_count": len(response.get("UnindexedFaces") or []),
            }
        )
        return faces

    async def search_faces(
        self,
        face_id: str,
        threshold: float,
        max_faces: int,
    ) -> list[FaceCandidate]:
        response = await self._call(
            "search_faces",
            CollectionId=self.collection_id,
            FaceId=face_id,
            FaceMatchThreshold=threshold,
            MaxFaces=max_faces,
        )
        return [_parse_candidate(m) for m in response.get("FaceMatches") or []]

    async def search_faces_by_image(
        self,
        image_bytes: bytes,
        threshold: float,
        max_faces: int,
    ) -> list[FaceCandidate]:
        try:
            response = await self._call(
                "search_faces_by_image",
                CollectionId=self.collection_id,
                Image={"Bytes": image_bytes},
                FaceMatchThreshold=threshold,
                MaxFaces=max_faces,
            )
        except FaceDirectoryError as e:
            # Rekognition rejects a probe image with no detectable face
            if (e.details or {}).get("error_code") == NO_FACE_ERROR_CODE:
                logger.info(
                    "Probe image has no detectable face",
                    extra={"event_type": "probe_no_face", "collection_id": self.collection_id}
                )
                return []
            raise
        return [_parse_candidate(m) for m in response.get("FaceMatches") or []]

    async def delete_faces(self, face_ids: list[str]) -> int:
        deleted = 0
        for i in range(0, len(face_ids), DELETE_BATCH_SIZE):
            batch = face_ids[i:i + DELETE_BATCH_SIZE]
            response = await self._call(
                "delete_faces",
                CollectionId=self.collection_id,
                FaceIds=batch,
            )
            deleted += len(response.get("DeletedFaces") or [])
            logger.info(
                f"Deleted batch of {len(batch)} faces",
                extra={
                    "event_type": "faces_deleted",
                    "collection_id": self.collection_id,
                    "batch_size": len(batch),
                }
            )
        return deleted

    async def list_face_ids(self) -> list[str]:
        face_ids: list[str] = []
        next_token = None
        while True:
            kwargs = {"CollectionId": self.collection_id, "MaxResults": LIST_PAGE_SIZE}
            if next_token:
                kwargs["NextToken"] = next_token
            response = await self._call("list_faces", **kwargs)
            face_ids.extend(
                f["FaceId"] for f in response.get("Faces") or [] if f.get("FaceId")
            )
            next_token = response.get("NextToken")
            if not next_token:
                break
        return face_ids


# Global singleton instance
_face_directory: Optional[FaceDirectory] = None


def get_face_directory() -> FaceDirectory:
    """
    Get the global FaceDirectory instance.

    Creates a RekognitionFaceDirectory for settings.REKOG_COLLECTION on first
    call. Used as a FastAPI dependency; tests override it.
    """
    global _face_directory

    if _face_directory is None:
        _face_directory = RekognitionFaceDirectory(settings.REKOG_COLLECTION)
        logger.info(
            "Global FaceDirectory instance created",
            extra={
                "event_type": "face_directory_singleton_created",
                "collection_id": settings.REKOG_COLLECTION,
            }
        )

    return _face_directory
