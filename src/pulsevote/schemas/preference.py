"""Preference (topic tag) Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field


class PreferenceResponse(BaseModel):
    """Schema for a topic tag in the global catalog."""

    id: str
    name: str
    icon: str | None = None
    color: str | None = None

    model_config = ConfigDict(from_attributes=True)


class PreferenceSelection(BaseModel):
    """Full replacement of a user's selected tags."""

    preference_ids: list[str] = Field(default_factory=list)


class UserPreferencesResponse(BaseModel):
    """The set of tag ids a user has selected."""

    preference_ids: list[str]
