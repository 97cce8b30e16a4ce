"""Guest SQLAlchemy ORM model"""
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urldefrag
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from photospotter.core.database import Base


class Guest(Base):
    """
    A guest registered to an event with a selfie.

    Attributes:
        id: UUID primary key
        name: Guest name
        email: Contact email
        phone: Contact phone (SMS notifications)
        event_id: Foreign key to events table
        selfie_url: Public URL of the stored selfie
        external_face_id: Face directory id of the indexed selfie
        created_at: Record creation timestamp (UTC)

    Older records stored the face id as a fragment of the selfie URL
    (``https://cdn/key.jpeg#<faceId>``); ``face_id`` reads either form.
    """

    __tablename__ = "guests"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), nullable=False)
    email = Column(String(320), nullable=False)
    phone = Column(String(32), nullable=False)
    event_id = Column(
        String(36),
        ForeignKey("events.id"),
        nullable=False,
        index=True,
    )
    selfie_url = Column(String(1024), nullable=False)
    external_face_id = Column(
        String(64),
        nullable=True,
        doc="Face directory id; NULL only on records that carry it in selfie_url",
    )
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    event = relationship("Event", back_populates="guests")

    @property
    def face_id(self) -> Optional[str]:
        """External face id from the explicit column, else the selfie_url fragment."""
        if self.external_face_id:
            return self.external_face_id
        if self.selfie_url:
            fragment = urldefrag(self.selfie_url).fragment
            if fragment:
                return fragment
        return None

    def __repr__(self):
        return f"<Guest(id={self.id}, event_id={self.event_id}, face_id={self.face_id})>"
