"""Administrative cleanup API endpoints"""
import logging

from fastapi import APIRouter, Depends

from photospotter.api.deps import get_admin_organizer, get_cleanup_service
from photospotter.schemas.admin import CleanupResponse, FaceCleanupResponse
from photospotter.services.cleanup_service import CleanupService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/cleanup", response_model=CleanupResponse)
async def cleanup_all(
    organizer_id: str = Depends(get_admin_organizer),
    cleanup_service: CleanupService = Depends(get_cleanup_service),
):
    """Delete every stored object, indexed face, and catalog row."""
    logger.warning(
        "Full cleanup requested",
        extra={"event_type": "cleanup_requested", "organizer_id": organizer_id}
    )
    stats = await cleanup_service.cleanup_all()
    return CleanupResponse(message="Cleanup completed successfully", **stats)


@router.post("/faces/cleanup", response_model=FaceCleanupResponse)
async def cleanup_faces(
    organizer_id: str = Depends(get_admin_organizer),
    cleanup_service: CleanupService = Depends(get_cleanup_service),
):
    """Delete every face from the face collection."""
    logger.warning(
        "Face collection cleanup requested",
        extra={"event_type": "face_cleanup_requested", "organizer_id": organizer_id}
    )
    deleted = await cleanup_service.cleanup_face_collection()
    return FaceCleanupResponse(
        message="Successfully cleaned up face collection",
        faces_deleted=deleted,
    )
