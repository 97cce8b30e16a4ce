"""PhotoMatch SQLAlchemy ORM model

"This guest appears in this photo." Created by match reconciliation and
never updated: confidence is the similarity reported when the match was
discovered.

The (guest_id, photo_id) unique constraint is what keeps concurrent
reconciliations for the same guest from persisting the same pair twice.
"""
from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, String, UniqueConstraint

from photospotter.core.database import Base


class PhotoMatch(Base):
    """Persisted guest-to-photo match."""

    __tablename__ = "photo_matches"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    photo_id = Column(String(36), ForeignKey("photos.id"), nullable=False)
    guest_id = Column(String(36), ForeignKey("guests.id"), nullable=False)
    confidence = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    __table_args__ = (
        UniqueConstraint("guest_id", "photo_id", name="uq_photo_matches_guest_photo"),
        Index("idx_photo_matches_guest_id", "guest_id"),
    )

    def __repr__(self):
        return (
            f"<PhotoMatch(id={self.id}, guest_id={self.guest_id}, "
            f"photo_id={self.photo_id}, confidence={self.confidence})>"
        )
