"""Per-viewer view of the topic tag catalog and the viewer's selections."""
from __future__ import annotations

import logging
from collections.abc import Iterable

from pulsevote.repositories import PreferenceRepository, RecordNotFoundError, StoreError
from pulsevote.schemas.preference import PreferenceResponse

logger = logging.getLogger(__name__)

__all__ = ["PreferenceStore"]


class PreferenceStore:
    """Catalog reads plus the viewer's selected-tags set.

    ``selected`` mirrors the viewer's membership rows. It is only changed after
    the store confirms a write, so a failed write leaves it as it was.
    """

    def __init__(self, repo: PreferenceRepository, user_id: str | None = None) -> None:
        self.repo = repo
        self.user_id = user_id
        self.selected: set[str] = set()

    def list_preferences(self) -> list[PreferenceResponse]:
        """Return the whole catalog sorted by name; empty on store failure."""
        try:
            rows = self.repo.list_preferences()
        except StoreError:
            logger.exception("Error fetching preferences")
            return []
        return [PreferenceResponse.model_validate(row) for row in rows]

    def list_user_preferences(self) -> set[str]:
        """Load and return the viewer's selected tag ids.

        Anonymous viewers always get an empty set.
        """
        if self.user_id is None:
            self.selected = set()
            return set()
        try:
            self.selected = self.repo.list_user_preference_ids(self.user_id)
        except StoreError:
            logger.exception("Error fetching user preferences for %s", self.user_id)
        return set(self.selected)

    def toggle(self, preference_id: str) -> bool:
        """Flip membership of one tag.

        Returns:
            True if the tag is selected afterwards, False otherwise.
        """
        if self.user_id is None:
            return False
        is_selected = preference_id in self.selected
        try:
            if is_selected:
                self.repo.delete_user_preference(self.user_id, preference_id)
            else:
                self.repo.insert_user_preference(self.user_id, preference_id)
        except RecordNotFoundError:
            logger.warning("Unknown preference %s", preference_id)
            return is_selected
        except StoreError:
            logger.exception("Error toggling preference %s", preference_id)
            return is_selected

        if is_selected:
            self.selected.discard(preference_id)
        else:
            self.selected.add(preference_id)
        return not is_selected

    def replace_all(self, selected_ids: Iterable[str]) -> bool:
        """Replace the viewer's whole selection.

        Returns:
            True when the store accepted the new selection.
        """
        if self.user_id is None:
            return False
        ids = list(dict.fromkeys(selected_ids))
        try:
            self.repo.replace_user_preferences(self.user_id, ids)
        except RecordNotFoundError as exc:
            logger.warning("Rejected selection for %s: %s", self.user_id, exc)
            return False
        except StoreError:
            logger.exception("Error saving preferences for %s", self.user_id)
            return False
        self.selected = set(ids)
        return True
