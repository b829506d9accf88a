"""Data store access layer."""

from .base import DuplicateVoteError, RecordNotFoundError, Repository, StoreError
from .group_repo import GroupRepository
from .preference_repo import PreferenceRepository
from .profile_repo import ProfileRepository
from .survey_repo import SurveyRepository

__all__ = [
    "DuplicateVoteError", "RecordNotFoundError", "Repository", "StoreError",
    "GroupRepository",
    "PreferenceRepository",
    "ProfileRepository",
    "SurveyRepository",
]
