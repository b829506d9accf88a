"""SQLAlchemy models for the PulseVote application."""

from .enums import AppRole, GroupRole, GroupType, ReactionKind
from .group import Group, GroupMember
from .preference import Preference, UserPreference
from .profile import Profile, UserRole
from .survey import Comment, Reaction, Survey, SurveyOption, UserVote

__all__ = [
    "AppRole", "GroupRole", "GroupType", "ReactionKind",
    "Group", "GroupMember",
    "Preference", "UserPreference",
    "Profile", "UserRole",
    "Comment", "Reaction", "Survey", "SurveyOption", "UserVote",
]
