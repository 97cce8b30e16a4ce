"""
FastAPI dependency providers

Builds request-scoped services from the database session and the global
client singletons, and resolves the calling organizer from the bearer token.
Tests replace any of these through app.dependency_overrides.
"""
import logging

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from photospotter.core.config import settings
from photospotter.core.database import get_db
from photospotter.services.catalog import CatalogStore
from photospotter.services.cleanup_service import CleanupService
from photospotter.services.face_directory import FaceDirectory, get_face_directory
from photospotter.services.face_ingestion_service import FaceIngestionPipeline
from photospotter.services.guest_service import GuestService
from photospotter.services.match_service import MatchReconciliationEngine
from photospotter.services.object_store import ObjectStore, get_object_store
from photospotter.services.photo_service import PhotoService
from photospotter.utils.jwt import TokenError, decode_access_token

logger = logging.getLogger(__name__)


def get_current_organizer(request: Request) -> str:
    """
    Dependency returning the organizer id (token ``sub``) of the caller

    Raises:
        HTTPException: 401 if the bearer token is missing or invalid
    """
    token = None
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header[7:]

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_access_token(token)
    except TokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )

    organizer_id = payload.get("organizer_id")
    if not organizer_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return organizer_id


def get_catalog(db: Session = Depends(get_db)) -> CatalogStore:
    return CatalogStore(db)


def get_ingestion_pipeline(
    catalog: CatalogStore = Depends(get_catalog),
    face_directory: FaceDirectory = Depends(get_face_directory),
) -> FaceIngestionPipeline:
    return FaceIngestionPipeline(catalog, face_directory)


def get_photo_service(
    catalog: CatalogStore = Depends(get_catalog),
    object_store: ObjectStore = Depends(get_object_store),
    pipeline: FaceIngestionPipeline = Depends(get_ingestion_pipeline),
) -> PhotoService:
    return PhotoService(catalog, object_store, pipeline)


def get_guest_service(
    catalog: CatalogStore = Depends(get_catalog),
    object_store: ObjectStore = Depends(get_object_store),
    pipeline: FaceIngestionPipeline = Depends(get_ingestion_pipeline),
) -> GuestService:
    return GuestService(catalog, object_store, pipeline)


def get_match_engine(
    catalog: CatalogStore = Depends(get_catalog),
    face_directory: FaceDirectory = Depends(get_face_directory),
) -> MatchReconciliationEngine:
    return MatchReconciliationEngine(catalog, face_directory)


def get_cleanup_service(
    catalog: CatalogStore = Depends(get_catalog),
    face_directory: FaceDirectory = Depends(get_face_directory),
    object_store: ObjectStore = Depends(get_object_store),
) -> CleanupService:
    return CleanupService(catalog, face_directory, object_store)


def get_admin_organizer(organizer_id: str = Depends(get_current_organizer)) -> str:
    """
    Dependency restricting a route to organizers listed in ADMIN_ORGANIZER_IDS

    Raises:
        HTTPException: 403 if the caller is not an admin organizer
    """
    if organizer_id not in settings.admin_organizer_ids_list:
        logger.warning(
            "Admin route denied",
            extra={"event_type": "admin_access_denied", "organizer_id": organizer_id}
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return organizer_id
