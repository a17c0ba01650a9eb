"""Bearer token helpers.

Identity is owned by an external provider; this service only needs to read
the user id out of a signed JWT. ``create_access_token`` is kept for tooling
and tests that need to mint tokens locally.
"""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

from jose import jwt

from townsquare.core.settings import settings


def create_access_token(user_id: int, extra_claims: dict[str, str] | None = None) -> str:
    """Create a JWT access token whose subject is the user id."""
    to_encode: dict[str, object] = {"sub": str(user_id)}
    if extra_claims:
        to_encode.update(extra_claims)
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode["exp"] = expire
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_subject(token: str) -> str | None:
    """Return the ``sub`` claim of a token, raising ``JWTError`` if invalid."""
    payload = jwt.decode(
        token,
        settings.secret_key,
        algorithms=[settings.jwt_algorithm],
    )
    return payload.get("sub")
