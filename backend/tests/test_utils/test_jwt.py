"""Tests for JWT bearer token utilities"""
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from photospotter.core.config import settings
from photospotter.utils.jwt import TokenError, create_access_token, decode_access_token


class TestAccessTokens:

    def test_round_trip_claims(self):
        payload = decode_access_token(create_access_token("organizer-123", email="host@example.com"))

        assert payload["organizer_id"] == "organizer-123"
        assert payload["email"] == "host@example.com"
        assert payload["exp"] > datetime.now(timezone.utc).timestamp()

    def test_email_is_optional(self):
        assert decode_access_token(create_access_token("organizer-123"))["email"] is None

    def test_expired_token(self):
        token = jwt.encode(
            {"sub": "organizer-123", "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
            settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
        )

        with pytest.raises(TokenError, match="expired"):
            decode_access_token(token)

    def test_wrong_signature(self):
        token = jwt.encode({"sub": "organizer-123"}, "some-other-secret", algorithm="HS256")

        with pytest.raises(TokenError, match="Invalid token"):
            decode_access_token(token)

    def test_garbage_token(self):
        with pytest.raises(TokenError):
            decode_access_token("not.a.token")
