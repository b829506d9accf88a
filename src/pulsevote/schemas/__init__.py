"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .group import GroupCreate, GroupMemberResponse, GroupResponse, GroupWithDetails, MemberInvite
from .preference import PreferenceResponse, PreferenceSelection, UserPreferencesResponse
from .profile import MemberProfileResponse, ProfileResponse
from .suggestion import (
    ImageRequest,
    ImageResponse,
    PublishSuggestionRequest,
    SuggestionBatch,
    SuggestionCategory,
    SuggestionRequest,
    SurveySuggestion,
)
from .survey import (
    CommentCreate,
    CommentResponse,
    MutationResponse,
    ReactionCreate,
    ReactionResponse,
    SurveyCreate,
    SurveyOptionResponse,
    SurveyResponse,
    SurveyWithDetails,
    VoteCreate,
)

__all__ = [
    "GroupCreate", "GroupMemberResponse", "GroupResponse", "GroupWithDetails", "MemberInvite",
    "PreferenceResponse", "PreferenceSelection", "UserPreferencesResponse",
    "MemberProfileResponse", "ProfileResponse",
    "ImageRequest", "ImageResponse", "PublishSuggestionRequest", "SuggestionBatch",
    "SuggestionCategory", "SuggestionRequest", "SurveySuggestion",
    "CommentCreate", "CommentResponse", "MutationResponse", "ReactionCreate",
    "ReactionResponse", "SurveyCreate", "SurveyOptionResponse", "SurveyResponse",
    "SurveyWithDetails", "VoteCreate",
]
