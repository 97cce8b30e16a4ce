"""
Bulk Cleanup Service

Administrative reset of a PhotoSpotter deployment.

Features:
    - Empty the originals bucket (batched S3 deletes)
    - Delete every face from the Rekognition collection (batches of 1000)
    - Wipe the five catalog tables, children first

Usage:
    cleanup_service = CleanupService(catalog, face_directory, object_store)
    stats = await cleanup_service.cleanup_all()
"""
import logging
from typing import Any, Dict

from photospotter.services.catalog import CatalogStore
from photospotter.services.face_directory import FaceDirectory
from photospotter.services.object_store import ObjectStore

logger = logging.getLogger(__name__)


class CleanupService:
    """Empties the object store, the face collection, and the catalog."""

    def __init__(
        self,
        catalog: CatalogStore,
        face_directory: FaceDirectory,
        object_store: ObjectStore,
    ):
        self.catalog = catalog
        self.face_directory = face_directory
        self.object_store = object_store

    async def cleanup_face_collection(self) -> int:
        """
        Delete every face from the collection.

        Returns:
            Number of faces deleted
        """
        face_ids = await self.face_directory.list_face_ids()
        if not face_ids:
            logger.info("Face collection already empty", extra={"event_type": "face_collection_empty"})
            return 0

        deleted = await self.face_directory.delete_faces(face_ids)
        logger.info(
            f"Deleted {deleted} faces from collection",
            extra={"event_type": "face_collection_cleaned", "listed": len(face_ids), "deleted": deleted}
        )
        return deleted

    async def cleanup_all(self) -> Dict[str, Any]:
        """
        Reset all stored state.

        Returns:
            Dict with deletion statistics:
            {
                "objects_deleted": int,
                "faces_deleted": int,
                "rows_deleted": {"photo_matches": int, ...},
            }
        """
        logger.warning("Starting full cleanup", extra={"event_type": "cleanup_started"})

        objects_deleted = await self.object_store.delete_all()
        faces_deleted = await self.cleanup_face_collection()
        rows_deleted = self.catalog.wipe()

        stats = {
            "objects_deleted": objects_deleted,
            "faces_deleted": faces_deleted,
            "rows_deleted": rows_deleted,
        }
        logger.warning(
            "Full cleanup completed",
            extra={"event_type": "cleanup_completed", "objects_deleted": objects_deleted, "faces_deleted": faces_deleted}
        )
        return stats
