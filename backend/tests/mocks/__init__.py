"""
Mock Factories Package

Provides factory functions and in-memory fakes for the AWS and Twilio
collaborators so services can be tested without network access.
"""
from tests.mocks.aws_mocks import (
    create_face_record,
    create_index_faces_response,
    create_face_match,
    create_search_faces_response,
    create_list_faces_response,
    create_client_error,
)
from tests.mocks.fakes import (
    FakeFaceDirectory,
    FakeObjectStore,
    FakeNotifier,
    candidate,
    indexed_face,
)
from tests.mocks.image_mocks import create_image_bytes, create_noise_image_bytes

__all__ = [
    # AWS response factories
    "create_face_record",
    "create_index_faces_response",
    "create_face_match",
    "create_search_faces_response",
    "create_list_faces_response",
    "create_client_error",
    # Fakes
    "FakeFaceDirectory",
    "FakeObjectStore",
    "FakeNotifier",
    "candidate",
    "indexed_face",
    # Images
    "create_image_bytes",
    "create_noise_image_bytes",
]
