"""Pytest fixtures and configuration for test suite

This module provides:
1. Database session fixtures for test isolation
2. Factory functions for creating test objects with sensible defaults
3. Pytest fixtures that use the factory functions

Factory Functions:
    - make_event(**overrides) -> Event
    - make_guest(**overrides) -> Guest
    - make_photo(**overrides) -> Photo
    - make_photo_face(**overrides) -> PhotoFace
    - make_photo_match(**overrides) -> PhotoMatch

Each factory accepts an optional db_session parameter to persist objects.
"""
import json
import pytest
import uuid
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from photospotter.core.database import Base
from photospotter.models.event import Event
from photospotter.models.guest import Guest
from photospotter.models.photo import Photo
from photospotter.models.photo_face import PhotoFace
from photospotter.models.photo_match import PhotoMatch


# =============================================================================
# Factory Functions for Test Objects
# =============================================================================

def make_event(
    db_session=None,
    id: str = None,
    name: str = "Test Wedding",
    date: str = "2025-06-14",
    owner_id: str = "organizer-001",
    **overrides
) -> Event:
    """
    Factory function to create Event instances for testing.

    Args:
        db_session: Optional SQLAlchemy session. If provided, adds and commits the event.
        id: UUID string. If None, generates a new UUID.
        name: Event display name.
        date: Event date string.
        owner_id: Organizer identity owning the event.
        **overrides: Any additional Event model fields.

    Returns:
        Event instance (persisted if db_session provided).

    Example:
        event = make_event(name="Company Picnic")
        event = make_event(db_session=session, owner_id="organizer-002")
    """
    if id is None:
        id = str(uuid.uuid4())

    event = Event(id=id, name=name, date=date, owner_id=owner_id, **overrides)

    if db_session:
        db_session.add(event)
        db_session.commit()

    return event


def make_guest(
    db_session=None,
    id: str = None,
    event_id: str = None,
    name: str = "Ada Guest",
    email: str = "ada@example.com",
    phone: str = "+15555550100",
    selfie_url: str = "https://cdn.example.com/selfie.jpeg",
    external_face_id: str = "face-guest-001",
    **overrides
) -> Guest:
    """
    Factory function to create Guest instances for testing.

    Pass external_face_id=None with a ``#faceId`` selfie_url to build a
    legacy record.

    Example:
        guest = make_guest(db_session=session, event_id=event.id)
    """
    if id is None:
        id = str(uuid.uuid4())

    guest = Guest(
        id=id,
        event_id=event_id,
        name=name,
        email=email,
        phone=phone,
        selfie_url=selfie_url,
        external_face_id=external_face_id,
        **overrides
    )

    if db_session:
        db_session.add(guest)
        db_session.commit()

    return guest


def make_photo(
    db_session=None,
    id: str = None,
    event_id: str = None,
    url: str = None,
    **overrides
) -> Photo:
    """
    Factory function to create Photo instances for testing.

    Example:
        photo = make_photo(db_session=session, event_id=event.id)
    """
    if id is None:
        id = str(uuid.uuid4())
    if url is None:
        url = f"https://cdn.example.com/{id}.jpeg"

    photo = Photo(id=id, event_id=event_id, url=url, **overrides)

    if db_session:
        db_session.add(photo)
        db_session.commit()

    return photo


def make_photo_face(
    db_session=None,
    id: str = None,
    photo_id: str = None,
    external_face_id: str = "face-photo-001",
    confidence: float = 99.5,
    bounding_box: dict = None,
    **overrides
) -> PhotoFace:
    """Factory function to create PhotoFace instances for testing."""
    if id is None:
        id = str(uuid.uuid4())
    if bounding_box is None:
        bounding_box = {"width": 0.2, "height": 0.3, "left": 0.4, "top": 0.1}

    face = PhotoFace(
        id=id,
        photo_id=photo_id,
        external_face_id=external_face_id,
        confidence=confidence,
        bounding_box=json.dumps(bounding_box),
        **overrides
    )

    if db_session:
        db_session.add(face)
        db_session.commit()

    return face


def make_photo_match(
    db_session=None,
    id: str = None,
    photo_id: str = None,
    guest_id: str = None,
    confidence: float = 90.0,
    **overrides
) -> PhotoMatch:
    """Factory function to create PhotoMatch instances for testing."""
    if id is None:
        id = str(uuid.uuid4())

    match = PhotoMatch(id=id, photo_id=photo_id, guest_id=guest_id, confidence=confidence, **overrides)

    if db_session:
        db_session.add(match)
        db_session.commit()

    return match


# =============================================================================
# Pytest Fixtures Using Factory Functions
# =============================================================================

@pytest.fixture
def sample_event(db_session):
    """Create a sample event for testing using factory function."""
    return make_event(db_session=db_session)


@pytest.fixture
def sample_guest(db_session, sample_event):
    """Create a sample guest in sample_event."""
    return make_guest(db_session=db_session, event_id=sample_event.id)


@pytest.fixture
def sample_photo(db_session, sample_event):
    """Create a sample photo in sample_event."""
    return make_photo(db_session=db_session, event_id=sample_event.id)


# =============================================================================
# Database Session Fixtures
# =============================================================================

@pytest.fixture(scope="session", autouse=True)
def clear_app_overrides():
    """
    Session-scoped fixture to ensure app.dependency_overrides is cleared
    at the start and end of the test session.
    """
    from main import app

    app.dependency_overrides.clear()
    yield
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def db_session():
    """
    Create an in-memory SQLite database for testing

    Yields:
        SQLAlchemy Session for test database

    Cleanup:
        Drops all tables after test completes
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False}
    )

    Base.metadata.create_all(engine)

    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
