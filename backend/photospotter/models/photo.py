"""Photo SQLAlchemy ORM model"""
from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from photospotter.core.database import Base


class Photo(Base):
    """
    A photographer-uploaded event photo.

    The id is generated before the photo is indexed so it can be used as the
    face directory correlation tag (ExternalImageId).
    """

    __tablename__ = "photos"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    url = Column(String(1024), nullable=False)
    event_id = Column(
        String(36),
        ForeignKey("events.id"),
        nullable=False,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    event = relationship("Event", back_populates="photos")
    faces = relationship("PhotoFace", back_populates="photo")

    def __repr__(self):
        return f"<Photo(id={self.id}, event_id={self.event_id})>"
