"""Topic tag catalog and the viewer's tag selection."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from pulsevote.repositories import PreferenceRepository, StoreError
from pulsevote.schemas.preference import (
    PreferenceResponse,
    PreferenceSelection,
    UserPreferencesResponse,
)
from pulsevote.services.preferences import PreferenceStore

from ..dependencies import CurrentUserDep, SessionDep

router = APIRouter(prefix="/preferences", tags=["preferences"])


def _selection(store: PreferenceStore) -> UserPreferencesResponse:
    return UserPreferencesResponse(preference_ids=sorted(store.selected))


def _unknown_ids(repo: PreferenceRepository, preference_ids: list[str]) -> set[str]:
    try:
        return repo.unknown_ids(preference_ids)
    except StoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Data store unavailable"
        ) from exc


@router.get("/", response_model=list[PreferenceResponse])
async def list_preferences(db: SessionDep) -> list[PreferenceResponse]:
    """List every topic tag, sorted by name."""
    return PreferenceStore(PreferenceRepository(db)).list_preferences()


@router.get("/me", response_model=UserPreferencesResponse)
async def get_my_preferences(
    current_user: CurrentUserDep,
    db: SessionDep,
) -> UserPreferencesResponse:
    """Return the tag ids the signed-in user selected."""
    store = PreferenceStore(PreferenceRepository(db), current_user.id)
    store.list_user_preferences()
    return _selection(store)


@router.post("/me/{preference_id}/toggle", response_model=UserPreferencesResponse)
async def toggle_preference(
    preference_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> UserPreferencesResponse:
    """Select the tag if unselected, otherwise unselect it."""
    repo = PreferenceRepository(db)
    if _unknown_ids(repo, [preference_id]):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Preference not found")
    store = PreferenceStore(repo, current_user.id)
    store.list_user_preferences()
    was_selected = preference_id in store.selected
    if store.toggle(preference_id) == was_selected:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Failed to update preference",
        )
    return _selection(store)


@router.put("/me", response_model=UserPreferencesResponse)
async def replace_preferences(
    selection: PreferenceSelection,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> UserPreferencesResponse:
    """Replace the signed-in user's whole selection."""
    repo = PreferenceRepository(db)
    unknown = _unknown_ids(repo, selection.preference_ids)
    if unknown:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown preference ids: {', '.join(sorted(unknown))}",
        )
    store = PreferenceStore(repo, current_user.id)
    if not store.replace_all(selection.preference_ids):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Failed to save preferences",
        )
    return _selection(store)
