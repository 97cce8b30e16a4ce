"""Event SQLAlchemy ORM model"""
from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship

from photospotter.core.database import Base


class Event(Base):
    """
    An organizer's event.

    Attributes:
        id: UUID primary key
        name: Display name
        date: Event date as supplied by the organizer (ISO 8601 string)
        owner_id: Identity of the organizer (bearer token subject)
        created_at: Record creation timestamp (UTC)

    Events are immutable after creation. Guests and photos reference them
    by event_id.
    """

    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), nullable=False)
    date = Column(String(50), nullable=False)
    owner_id = Column(String(128), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    guests = relationship("Guest", back_populates="event")
    photos = relationship("Photo", back_populates="event")

    def __repr__(self):
        return f"<Event(id={self.id}, name={self.name}, owner_id={self.owner_id})>"
