"""Data access helpers for profiles and application roles."""
from __future__ import annotations

from sqlalchemy import func, select

from pulsevote.models import AppRole, Profile, UserRole

from .base import Repository

__all__ = ["ProfileRepository"]


class ProfileRepository(Repository):
    """Lookups over the profile catalog."""

    def get(self, user_id: str) -> Profile | None:
        """Return a profile by identifier."""
        with self._guard("load profile"):
            return self.session.get(Profile, user_id)

    def find_by_email(self, email: str) -> Profile | None:
        """Return the profile whose email matches case-insensitively."""
        normalized = email.strip().lower()
        with self._guard("find profile by email"):
            return self.session.scalars(
                select(Profile).where(func.lower(Profile.email) == normalized)
            ).first()

    def has_role(self, user_id: str, role: AppRole) -> bool:
        """Return True if the user holds the given application role."""
        with self._guard("check role"):
            found = self.session.scalar(
                select(UserRole.id).where(UserRole.user_id == user_id, UserRole.role == role)
            )
        return found is not None

    def first_with_role(self, role: AppRole) -> str | None:
        """Return the id of some user holding ``role``."""
        with self._guard("find role holder"):
            return self.session.scalar(
                select(UserRole.user_id).where(UserRole.role == role).limit(1)
            )
