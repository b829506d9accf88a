"""JWT helpers for the bearer tokens issued by the identity provider."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from pulsevote.core.settings import settings

__all__ = ["JWTError", "create_access_token", "decode_subject"]


def create_access_token(subject: str, extra_claims: dict[str, str] | None = None) -> str:
    """Create a JWT access token whose subject is a profile id."""
    to_encode: dict[str, object] = {"sub": subject}
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
    """Return the `sub` claim of a valid token.

    Raises:
        JWTError: If the token signature or expiry is invalid.
    """
    payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    subject = payload.get("sub")
    return str(subject) if subject is not None else None
