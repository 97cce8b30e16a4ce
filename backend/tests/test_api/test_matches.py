"""API tests for /api/v1/matches"""
import pytest

from photospotter.api.v1.matches import limiter
from photospotter.core.exceptions import FaceDirectoryError
from photospotter.models.photo_match import PhotoMatch
from tests.conftest import make_event, make_guest, make_photo, make_photo_match
from tests.mocks import candidate, create_image_bytes


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def wedding(db_session):
    event = make_event(db_session=db_session)
    guest = make_guest(db_session=db_session, event_id=event.id, external_face_id="F1", phone="+15555550100")
    return event, guest


class TestGuestMatches:

    def test_returns_matches_with_photos(self, api_client, db_session, face_directory, wedding):
        event, guest = wedding
        photo = make_photo(db_session=db_session, event_id=event.id)
        face_directory.search_results = [candidate(photo.id, 93.5)]

        response = api_client.get("/api/v1/matches", params={"guestId": guest.id})

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["photo_id"] == photo.id
        assert data[0]["guest_id"] == guest.id
        assert data[0]["confidence"] == 93.5
        assert data[0]["photo"]["url"] == photo.url

    def test_repeat_lookup_is_idempotent(self, api_client, db_session, face_directory, wedding):
        event, guest = wedding
        photo = make_photo(db_session=db_session, event_id=event.id)
        face_directory.search_results = [candidate(photo.id, 93.5)]

        first = api_client.get("/api/v1/matches", params={"guestId": guest.id}).json()
        second = api_client.get("/api/v1/matches", params={"guestId": guest.id}).json()

        assert [m["id"] for m in first] == [m["id"] for m in second]
        assert db_session.query(PhotoMatch).filter(PhotoMatch.guest_id == guest.id).count() == 1

    def test_other_event_photos_never_returned(self, api_client, db_session, face_directory, wedding):
        _, guest = wedding
        other = make_event(db_session=db_session, owner_id="organizer-002")
        foreign = make_photo(db_session=db_session, event_id=other.id)
        face_directory.search_results = [candidate(foreign.id, 99.0)]

        response = api_client.get("/api/v1/matches", params={"guestId": guest.id})

        assert response.status_code == 200
        assert response.json() == []

    def test_new_matches_notify_guest(self, api_client, db_session, face_directory, notifier, wedding):
        event, guest = wedding
        photos = [make_photo(db_session=db_session, event_id=event.id) for _ in range(2)]
        face_directory.search_results = [candidate(p.id) for p in photos]

        api_client.get("/api/v1/matches", params={"guestId": guest.id})
        api_client.get("/api/v1/matches", params={"guestId": guest.id})

        assert len(notifier.sent) == 1
        phone, message = notifier.sent[0]
        assert phone == "+15555550100"
        assert "2 new photos" in message

    def test_notification_failure_does_not_fail_lookup(self, api_client, db_session, face_directory, notifier, wedding):
        event, guest = wedding
        photo = make_photo(db_session=db_session, event_id=event.id)
        face_directory.search_results = [candidate(photo.id)]
        notifier.fail = True

        response = api_client.get("/api/v1/matches", params={"guestId": guest.id})

        assert response.status_code == 200
        assert len(response.json()) == 1

    def test_existing_matches_only_send_nothing(self, api_client, db_session, face_directory, notifier, wedding):
        event, guest = wedding
        photo = make_photo(db_session=db_session, event_id=event.id)
        make_photo_match(db_session=db_session, photo_id=photo.id, guest_id=guest.id)
        face_directory.search_results = [candidate(photo.id)]

        response = api_client.get("/api/v1/matches", params={"guestId": guest.id})

        assert len(response.json()) == 1
        assert notifier.sent == []

    def test_requires_guest_id(self, api_client):
        response = api_client.get("/api/v1/matches")

        assert response.status_code == 400
        assert response.json() == {"detail": "Guest ID is required"}

    def test_unknown_guest(self, api_client):
        response = api_client.get("/api/v1/matches", params={"guestId": "missing"})

        assert response.status_code == 404

    def test_guest_without_face_id(self, api_client, db_session, face_directory):
        event = make_event(db_session=db_session)
        guest = make_guest(db_session=db_session, event_id=event.id, external_face_id=None)

        response = api_client.get("/api/v1/matches", params={"guestId": guest.id})

        assert response.status_code == 400
        assert response.json() == {"detail": "Guest face ID not found"}
        assert face_directory.calls == []

    def test_directory_failure(self, api_client, face_directory, wedding):
        _, guest = wedding
        face_directory.search_results = FaceDirectoryError()

        response = api_client.get("/api/v1/matches", params={"guestId": guest.id})

        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to fetch matches"}


class TestProbeSearch:

    def probe(self, api_client, event_id):
        return api_client.post(
            "/api/v1/matches/search",
            data={"eventId": event_id},
            files={"image": ("probe.jpg", create_image_bytes(), "image/jpeg")},
        )

    def test_search_returns_event_photos(self, api_client, db_session, face_directory):
        event = make_event(db_session=db_session)
        photo = make_photo(db_session=db_session, event_id=event.id)
        face_directory.image_search_results = [candidate(photo.id, 88.0)]

        response = self.probe(api_client, event.id)

        assert response.status_code == 200
        results = response.json()
        assert [(r["photo_id"], r["confidence"]) for r in results] == [(photo.id, 88.0)]
        assert results[0]["photo"]["id"] == photo.id
        assert db_session.query(PhotoMatch).count() == 0

    def test_missing_image(self, api_client):
        response = api_client.post("/api/v1/matches/search", data={"eventId": "e1"})

        assert response.status_code == 400
        assert response.json() == {"detail": "Image and event ID are required"}

    def test_rate_limited(self, api_client, db_session):
        event = make_event(db_session=db_session)

        statuses = [self.probe(api_client, event.id).status_code for _ in range(31)]

        assert statuses[:30] == [200] * 30
        assert statuses[30] == 429
