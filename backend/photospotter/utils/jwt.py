"""JWT bearer token utilities for organizer identity"""
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import jwt, JWTError
from photospotter.core.config import settings
import logging

logger = logging.getLogger(__name__)


class TokenError(Exception):
    """Custom exception for token-related errors"""
    pass


def create_access_token(organizer_id: str, email: Optional[str] = None) -> str:
    """
    Create a JWT access token for an organizer

    Args:
        organizer_id: Organizer identity (becomes the ``sub`` claim)
        email: Optional organizer email

    Returns:
        Encoded JWT token string

    Example:
        >>> token = create_access_token("organizer-123")
        >>> isinstance(token, str)
        True
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": organizer_id,
        "exp": now + timedelta(hours=settings.JWT_EXPIRATION_HOURS),
        "iat": now,
    }
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Decode and validate a JWT access token

    Returns:
        Decoded payload dict with organizer_id, email, exp

    Raises:
        TokenError: If token is invalid or expired

    Example:
        >>> payload = decode_access_token(create_access_token("organizer-123"))
        >>> payload["organizer_id"]
        'organizer-123'
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
        return {
            "organizer_id": payload.get("sub"),
            "email": payload.get("email"),
            "exp": payload.get("exp"),
        }
    except jwt.ExpiredSignatureError:
        logger.debug("Token has expired")
        raise TokenError("Token has expired")
    except JWTError as e:
        logger.warning(f"Invalid token: {e}")
        raise TokenError("Invalid token")
