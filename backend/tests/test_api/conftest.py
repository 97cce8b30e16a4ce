"""
Shared pytest fixtures for API tests.

Each test module gets its own temp-file SQLite database. The AWS and Twilio
collaborators are replaced with in-memory fakes through
app.dependency_overrides, so requests never leave the process.
"""
import os
import tempfile

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from main import app
from photospotter.api.deps import get_catalog, get_ingestion_pipeline
from photospotter.core.config import settings
from photospotter.core.database import Base, get_db
from photospotter.core.retry import RetryConfig
from photospotter.services.catalog import CatalogStore
from photospotter.services.face_directory import FaceDirectory, get_face_directory
from photospotter.services.face_ingestion_service import (
    INGESTION_RETRYABLE_EXCEPTIONS,
    FaceIngestionPipeline,
)
from photospotter.services.notification_service import (
    GuestNotificationService,
    get_guest_notification_service,
)
from photospotter.services.object_store import get_object_store
from photospotter.utils.jwt import create_access_token
from tests.mocks import FakeFaceDirectory, FakeNotifier, FakeObjectStore

ORGANIZER_ID = "organizer-001"


def auth_headers(organizer_id: str = ORGANIZER_ID) -> dict:
    return {"Authorization": f"Bearer {create_access_token(organizer_id)}"}


@pytest.fixture(scope="module")
def test_db():
    """
    Create a test database for the module.

    Tables are created at the start of the module and dropped at the end.
    """
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    engine = create_engine(f"sqlite:///{path}", connect_args={"check_same_thread": False})
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    yield {"engine": engine, "SessionLocal": SessionLocal, "db_path": path}

    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    if os.path.exists(path):
        os.remove(path)


@pytest.fixture(scope="function")
def db_session(test_db):
    """Fresh session on the module database for arranging test data."""
    session = test_db["SessionLocal"]()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def face_directory():
    return FakeFaceDirectory()


@pytest.fixture
def object_store():
    return FakeObjectStore()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture(scope="function")
def api_client(test_db, face_directory, object_store, notifier, monkeypatch):
    """
    API test client wired to the module database and the fakes.

    Ingestion retries without delay and uploads skip the settle delay.
    All rows are deleted after each test.
    """
    SessionLocal = test_db["SessionLocal"]

    def override_get_db():
        db = SessionLocal()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def override_get_ingestion_pipeline(
        catalog: CatalogStore = Depends(get_catalog),
        directory: FaceDirectory = Depends(get_face_directory),
    ) -> FaceIngestionPipeline:
        return FaceIngestionPipeline(
            catalog,
            directory,
            retry_config=RetryConfig.fixed(3, 0, retryable_exceptions=INGESTION_RETRYABLE_EXCEPTIONS),
        )

    monkeypatch.setattr(settings, "INDEX_SETTLE_DELAY_SECONDS", 0.0)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_face_directory] = lambda: face_directory
    app.dependency_overrides[get_object_store] = lambda: object_store
    app.dependency_overrides[get_ingestion_pipeline] = override_get_ingestion_pipeline
    app.dependency_overrides[get_guest_notification_service] = lambda: GuestNotificationService(notifier)

    yield TestClient(app)

    app.dependency_overrides.clear()

    db = SessionLocal()
    try:
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(table.delete())
        db.commit()
    finally:
        db.close()
