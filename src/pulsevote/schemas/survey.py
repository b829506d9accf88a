"""Survey-related Pydantic schemas, including the per-viewer feed projection."""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field

from pulsevote.models.enums import ReactionKind

from .preference import PreferenceResponse
from .profile import ProfileResponse


class SurveyOptionResponse(BaseModel):
    """One selectable answer and its mirrored vote tally."""

    id: str
    survey_id: str
    option_text: str
    vote_count: int = 0
    position: int = 0

    model_config = ConfigDict(from_attributes=True)


class ReactionResponse(BaseModel):
    """A reaction row as stored."""

    id: str
    user_id: str
    survey_id: str
    reaction: ReactionKind
    created_at: datetime.datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class CommentResponse(BaseModel):
    """A comment row as stored."""

    id: str
    user_id: str
    survey_id: str
    content: str
    created_at: datetime.datetime | None = None
    updated_at: datetime.datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class SurveyResponse(BaseModel):
    """Plain survey record."""

    id: str
    author_id: str
    title: str
    description: str | None = None
    image_url: str | None = None
    preference_id: str | None = None
    target_country: str | None = None
    allow_multiple_answers: bool = False
    is_published: bool = False
    group_id: str | None = None
    is_public_link: bool = False
    created_at: datetime.datetime | None = None
    updated_at: datetime.datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class SurveyWithDetails(SurveyResponse):
    """Survey joined with its children plus the viewer-derived fields.

    This is a disposable projection of store state. ``options[*].vote_count``,
    ``user_votes`` and ``user_reaction`` are mirrors that go stale as soon as
    another viewer writes; callers refresh the feed to resynchronise.
    """

    options: list[SurveyOptionResponse] = Field(default_factory=list)
    reactions: list[ReactionResponse] = Field(default_factory=list)
    comments: list[CommentResponse] = Field(default_factory=list)
    preference: PreferenceResponse | None = None
    author: ProfileResponse | None = None
    user_votes: list[str] = Field(default_factory=list)
    user_reaction: ReactionKind | None = None

    def option(self, option_id: str) -> SurveyOptionResponse | None:
        """Return the option with ``option_id`` if it belongs to this survey."""
        return next((o for o in self.options if o.id == option_id), None)


class SurveyCreate(BaseModel):
    """Schema for authoring a survey together with its options."""

    title: str = Field(..., max_length=500)
    description: str | None = Field(None, max_length=5000)
    options: list[str] = Field(default_factory=list)
    preference_id: str | None = None
    target_country: str | None = None
    image_url: str | None = None
    allow_multiple_answers: bool = False
    is_public_link: bool = False


class VoteCreate(BaseModel):
    """Schema for casting a vote on an option."""

    option_id: str


class ReactionCreate(BaseModel):
    """Schema for toggling a reaction."""

    reaction: ReactionKind


class CommentCreate(BaseModel):
    """Schema for appending a comment."""

    content: str = Field(..., max_length=2000)


class MutationResponse(BaseModel):
    """Outcome of a vote/reaction/comment with the reconciled projection."""

    status: str
    level: str | None = None
    message: str | None = None
    survey: SurveyWithDetails | None = None


class ShareLinkResponse(BaseModel):
    """Public link for a company-group survey."""

    survey_id: str
    url: str
