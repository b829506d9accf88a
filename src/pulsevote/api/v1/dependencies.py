"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from pulsevote.core.security import JWTError, decode_subject
from pulsevote.db.session import get_db
from pulsevote.models import AppRole, Profile
from pulsevote.repositories import ProfileRepository, StoreError

# HTTP Bearer scheme; optional so anonymous viewers can read the feed
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
CredentialsDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def _credentials_error(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _resolve_profile(credentials: HTTPAuthorizationCredentials, db: Session) -> Profile:
    try:
        subject = decode_subject(credentials.credentials)
    except JWTError as err:
        raise _credentials_error() from err
    if subject is None:
        raise _credentials_error()

    try:
        profile = ProfileRepository(db).get(subject)
    except StoreError as err:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Data store unavailable",
        ) from err
    if profile is None:
        raise _credentials_error("User not found")
    return profile


def get_current_user(credentials: CredentialsDep, db: SessionDep) -> Profile:
    """Get the signed-in profile from the bearer token.

    Raises:
        HTTPException: 401 if the token is missing, invalid or unknown.
    """
    if credentials is None:
        raise _credentials_error("Not authenticated")
    return _resolve_profile(credentials, db)


def get_optional_user(credentials: CredentialsDep, db: SessionDep) -> Profile | None:
    """Return the signed-in profile, or None for anonymous viewers.

    A token that is present but invalid is still rejected.
    """
    if credentials is None:
        return None
    return _resolve_profile(credentials, db)


CurrentUserDep = Annotated[Profile, Depends(get_current_user)]
OptionalUserDep = Annotated[Profile | None, Depends(get_optional_user)]


def require_admin(current_user: CurrentUserDep, db: SessionDep) -> Profile:
    """Allow only profiles holding the admin role."""
    if not ProfileRepository(db).has_role(current_user.id, AppRole.ADMIN):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Admin privileges required.",
        )
    return current_user


AdminUserDep = Annotated[Profile, Depends(require_admin)]
