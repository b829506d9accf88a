"""Data access helpers for the tag catalog and user tag selections."""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import delete, func, select

from pulsevote.models import Preference, UserPreference

from .base import RecordNotFoundError, Repository

__all__ = ["PreferenceRepository"]


class PreferenceRepository(Repository):
    """Catalog reads plus membership-row CRUD."""

    def list_preferences(self) -> list[Preference]:
        """Return every tag sorted by name."""
        with self._guard("list preferences"):
            return list(self.session.scalars(select(Preference).order_by(Preference.name)))

    def find_by_name(self, name: str) -> Preference | None:
        """Return the tag whose name matches case-insensitively."""
        with self._guard("find preference"):
            return self.session.scalars(
                select(Preference).where(func.lower(Preference.name) == name.strip().lower())
            ).first()

    def unknown_ids(self, preference_ids: Iterable[str]) -> set[str]:
        """Return the ids in ``preference_ids`` that are not in the catalog."""
        wanted = set(preference_ids)
        if not wanted:
            return set()
        with self._guard("check preference ids"):
            found = set(self.session.scalars(select(Preference.id).where(Preference.id.in_(wanted))))
        return wanted - found

    def list_user_preference_ids(self, user_id: str) -> set[str]:
        """Return the ids of the tags selected by ``user_id``."""
        with self._guard("list user preferences"):
            rows = self.session.scalars(
                select(UserPreference.preference_id).where(UserPreference.user_id == user_id)
            )
            return set(rows)

    def _require_known(self, preference_ids: Iterable[str]) -> None:
        missing = self.unknown_ids(preference_ids)
        if missing:
            raise RecordNotFoundError(f"Unknown preference ids: {sorted(missing)}")

    def insert_user_preference(self, user_id: str, preference_id: str) -> None:
        """Insert one membership row."""
        with self._guard("insert user preference"):
            self._require_known([preference_id])
            self.session.add(UserPreference(user_id=user_id, preference_id=preference_id))
            self.session.commit()

    def delete_user_preference(self, user_id: str, preference_id: str) -> None:
        """Delete one membership row if present."""
        with self._guard("delete user preference"):
            self.session.execute(
                delete(UserPreference).where(
                    UserPreference.user_id == user_id,
                    UserPreference.preference_id == preference_id,
                )
            )
            self.session.commit()

    def replace_user_preferences(self, user_id: str, preference_ids: Iterable[str]) -> None:
        """Swap the user's whole selection inside one transaction.

        Either every old row is replaced or nothing changes.
        """
        with self._guard("replace user preferences"):
            ids = list(dict.fromkeys(preference_ids))
            self._require_known(ids)
            self.session.execute(delete(UserPreference).where(UserPreference.user_id == user_id))
            for preference_id in ids:
                self.session.add(UserPreference(user_id=user_id, preference_id=preference_id))
            self.session.commit()

    def ensure_preferences(self, names: Iterable[str]) -> list[Preference]:
        """Insert any catalog names that are missing and return the created rows."""
        with self._guard("seed preferences"):
            existing = {name.lower() for name in self.session.scalars(select(Preference.name))}
            created = [Preference(name=name) for name in names if name.lower() not in existing]
            self.session.add_all(created)
            self.session.commit()
            return created
