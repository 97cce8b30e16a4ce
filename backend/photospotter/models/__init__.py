"""SQLAlchemy ORM models"""
from photospotter.models.event import Event
from photospotter.models.guest import Guest
from photospotter.models.photo import Photo
from photospotter.models.photo_face import PhotoFace
from photospotter.models.photo_match import PhotoMatch

__all__ = [
    "Event",
    "Guest",
    "Photo",
    "PhotoFace",
    "PhotoMatch",
]
