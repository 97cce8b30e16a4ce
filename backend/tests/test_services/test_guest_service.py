"""Unit tests for GuestService"""
import pytest

from photospotter.core.exceptions import NoFaceDetected, NotFound, ValidationError
from photospotter.core.retry import RetryConfig
from photospotter.models.guest import Guest
from photospotter.models.photo_face import PhotoFace
from photospotter.services.catalog import CatalogStore
from photospotter.services.face_ingestion_service import (
    INGESTION_RETRYABLE_EXCEPTIONS,
    FaceIngestionPipeline,
)
from photospotter.services.guest_service import GuestService, validate_registration
from tests.conftest import make_guest
from tests.mocks import FakeFaceDirectory, FakeObjectStore, create_image_bytes, indexed_face


@pytest.fixture
def catalog(db_session):
    return CatalogStore(db_session)


@pytest.fixture
def directory():
    return FakeFaceDirectory()


@pytest.fixture
def object_store():
    return FakeObjectStore()


@pytest.fixture
def service(catalog, directory, object_store):
    pipeline = FaceIngestionPipeline(
        catalog,
        directory,
        retry_config=RetryConfig.fixed(3, 0, retryable_exceptions=INGESTION_RETRYABLE_EXCEPTIONS),
    )
    return GuestService(catalog, object_store, pipeline)


class TestValidateRegistration:

    @pytest.mark.parametrize("field", ["name", "email", "phone", "event_id", "selfie"])
    def test_missing_field(self, field):
        values = {
            "name": "Ada",
            "email": "ada@example.com",
            "phone": "+15555550100",
            "event_id": "e1",
            "selfie": b"img",
        }
        values[field] = b"" if field == "selfie" else ""

        with pytest.raises(ValidationError, match="All fields are required"):
            validate_registration(**values)

    @pytest.mark.parametrize("email", ["ada", "ada@", "ada@example", "a da@example.com"])
    def test_invalid_email(self, email):
        with pytest.raises(ValidationError, match="email"):
            validate_registration("Ada", email, "+15555550100", "e1", b"img")

    def test_short_phone(self):
        with pytest.raises(ValidationError, match="Phone"):
            validate_registration("Ada", "ada@example.com", "12345", "e1", b"img")

    def test_blank_name(self):
        with pytest.raises(ValidationError, match="Name"):
            validate_registration("   ", "ada@example.com", "+15555550100", "e1", b"img")


class TestRegisterGuest:

    @pytest.mark.asyncio
    async def test_registers_with_face_id(self, db_session, service, directory, object_store, sample_event):
        directory.index_outcomes = [[indexed_face("F-selfie")]]

        guest = await service.register_guest(
            sample_event.id, " Ada ", "ada@example.com", "+15555550100", create_image_bytes(), "image/jpeg",
        )

        assert guest.name == "Ada"
        assert guest.external_face_id == "F-selfie"
        assert guest.face_id == "F-selfie"
        assert guest.selfie_url in object_store.objects
        assert directory.calls[0][1]["external_image_id"] is None
        assert db_session.query(PhotoFace).count() == 0

    @pytest.mark.asyncio
    async def test_unknown_event(self, service, object_store):
        with pytest.raises(NotFound):
            await service.register_guest(
                "missing", "Ada", "ada@example.com", "+15555550100", create_image_bytes(), "image/jpeg",
            )

        assert object_store.objects == {}

    @pytest.mark.asyncio
    async def test_no_face_creates_no_guest(self, db_session, service, directory, sample_event):
        directory.index_outcomes = [[], [], []]

        with pytest.raises(NoFaceDetected):
            await service.register_guest(
                sample_event.id, "Ada", "ada@example.com", "+15555550100", create_image_bytes(), "image/jpeg",
            )

        assert db_session.query(Guest).count() == 0

    @pytest.mark.asyncio
    async def test_undecodable_selfie_is_not_stored(self, db_session, service, directory, object_store, sample_event):
        with pytest.raises(ValidationError):
            await service.register_guest(
                sample_event.id, "Ada", "ada@example.com", "+15555550100", b"not an image", "image/jpeg",
            )

        assert object_store.objects == {}
        assert directory.calls == []
        assert db_session.query(Guest).count() == 0


class TestListGuests:

    def test_lists_event_guests(self, db_session, service, sample_event):
        make_guest(db_session=db_session, event_id=sample_event.id)

        assert len(service.list_guests(sample_event.id)) == 1

    def test_requires_event_id(self, service):
        with pytest.raises(ValidationError):
            service.list_guests("")
