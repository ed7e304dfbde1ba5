"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
The token carries only the subject id plus issue/expiry claims;
everything else about the principal is loaded from the database
on each request. Default lifetime is 7 days (STOREFRONT_JWT_EXPIRES).
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

import jwt

from storefront.config import settings


class InvalidOrExpiredToken(Exception):
    """Raised when a token is malformed, forged, expired or incomplete."""


def create_token(
    subject_id: Union[str, uuid.UUID],
    expires: Optional[timedelta] = None,
) -> str:
    """Create a signed token for a user or shop id."""
    now = datetime.now(timezone.utc)
    payload = {
        "id": str(subject_id),
        "iat": now,
        "exp": now + (expires if expires is not None else settings.token_ttl),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> str:
    """Verify a token and return the subject id it was issued for.

    Raises InvalidOrExpiredToken on failure.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "id"]},
        )
    except jwt.ExpiredSignatureError:
        raise InvalidOrExpiredToken("Token has expired")
    except jwt.InvalidTokenError as e:
        raise InvalidOrExpiredToken(f"Invalid token: {e}")

    subject_id = payload["id"]
    if not isinstance(subject_id, str) or not subject_id:
        raise InvalidOrExpiredToken("Invalid token: bad subject id")
    return subject_id
