"""
Domain exceptions for PhotoSpotter.

Every error raised by the catalog, ingestion, and reconciliation layers
derives from PhotoSpotterError and carries the HTTP status the API layer
maps it to.

Usage:
    from photospotter.core.exceptions import NotFound

    if guest is None:
        raise NotFound("Guest not found", details={"guest_id": guest_id})
"""
from typing import Any, Optional


class PhotoSpotterError(Exception):
    """
    Base exception for all PhotoSpotter errors.

    Attributes:
        message: Human-readable error message (returned to API clients)
        details: Optional structured context (entity ids) for logging
        status_code: HTTP status the API layer responds with
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "PhotoSpotter error occurred",
        details: Optional[Any] = None,
    ):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ValidationError(PhotoSpotterError):
    """Missing or malformed required field."""

    status_code = 400

    def __init__(self, message: str = "Invalid request", details: Optional[Any] = None):
        super().__init__(message, details)


class NotFound(PhotoSpotterError):
    """Referenced event, guest, or photo does not exist."""

    status_code = 404

    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(message, details)


class Forbidden(PhotoSpotterError):
    """Caller does not own the event."""

    status_code = 403

    def __init__(self, message: str = "Forbidden", details: Optional[Any] = None):
        super().__init__(message, details)


class InvalidGuestRecord(PhotoSpotterError):
    """Stored guest carries no external face id, so it cannot be matched."""

    status_code = 400

    def __init__(self, message: str = "Guest face ID not found", details: Optional[Any] = None):
        super().__init__(message, details)


class IngestionFailed(PhotoSpotterError):
    """Face indexing produced no usable face after the retry bound."""

    status_code = 500

    def __init__(
        self,
        message: str = "Failed to index face after multiple attempts",
        details: Optional[Any] = None,
    ):
        super().__init__(message, details)


class NoFaceDetected(IngestionFailed):
    """The face directory reported zero face records for the image."""

    def __init__(self, message: str = "No face detected in the image", details: Optional[Any] = None):
        super().__init__(message, details)


class MatchLookupFailed(PhotoSpotterError):
    """Face directory search or catalog read failed during reconciliation."""

    status_code = 500

    def __init__(self, message: str = "Failed to fetch matches", details: Optional[Any] = None):
        super().__init__(message, details)


class FaceDirectoryError(PhotoSpotterError):
    """The external face directory rejected or failed a request."""

    status_code = 500

    def __init__(self, message: str = "Face directory request failed", details: Optional[Any] = None):
        super().__init__(message, details)


class ObjectStoreError(PhotoSpotterError):
    """The object store rejected or failed a request."""

    status_code = 500

    def __init__(self, message: str = "Object store request failed", details: Optional[Any] = None):
        super().__init__(message, details)


class NotificationError(PhotoSpotterError):
    """SMS delivery failed. Surfaced to the caller, never retried."""

    status_code = 500

    def __init__(self, message: str = "Failed to send SMS notification", details: Optional[Any] = None):
        super().__init__(message, details)
