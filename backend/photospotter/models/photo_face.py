"""PhotoFace SQLAlchemy ORM model

One row per face successfully indexed in the face directory for a photo.
Rows are append-only.

Attributes:
    id: UUID primary key
    photo_id: Foreign key to photos table
    external_face_id: Face directory id returned by IndexFaces
    confidence: Detection confidence reported by the directory (0-100)
    bounding_box: JSON object with width, height, left, top (ratios of the image)
    created_at: Timestamp when the face was indexed (UTC)
"""
from datetime import datetime, timezone
import json
import uuid

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from photospotter.core.database import Base


class PhotoFace(Base):
    """Face observation recorded after a photo is indexed."""

    __tablename__ = "photo_faces"

    id = Column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        doc="UUID primary key"
    )
    photo_id = Column(
        String(36),
        ForeignKey("photos.id"),
        nullable=False,
        doc="Photo the face was indexed from"
    )
    external_face_id = Column(
        String(64),
        nullable=False,
        doc="Face directory id"
    )
    confidence = Column(
        Float,
        nullable=False,
        doc="Face detection confidence (0-100)"
    )
    bounding_box = Column(
        Text,
        nullable=False,
        doc="JSON object with width, height, left, top"
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    photo = relationship("Photo", back_populates="faces")

    __table_args__ = (
        Index("idx_photo_faces_photo_id", "photo_id"),
        Index("idx_photo_faces_external_face_id", "external_face_id"),
    )

    @property
    def bounding_box_dict(self) -> dict:
        return json.loads(self.bounding_box) if self.bounding_box else {}

    def __repr__(self):
        return (
            f"<PhotoFace(id={self.id}, photo_id={self.photo_id}, "
            f"external_face_id={self.external_face_id}, confidence={self.confidence:.2f})>"
        )
