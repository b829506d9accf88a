"""Schemas for drafts produced by the hosted language model.

Model output is untrusted: every draft is validated here before it can be
shown to an admin or published.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

SUGGESTION_COUNT = 5


class SuggestionCategory(str, Enum):
    """Categories the generator may assign; mirrors the default tag catalog."""

    COOKING = "cooking"
    SPORTS = "sports"
    POLITICS = "politics"
    RELATIONSHIPS = "relationships"
    SCANDALS = "scandals"
    MUSIC = "music"
    SPIRITUALITY = "spirituality"
    SCIENCE = "science"
    FUN = "fun"

    @property
    def preference_name(self) -> str:
        """Display name of the matching topic tag."""
        return self.value.capitalize()


class SurveySuggestion(BaseModel):
    """A single generated survey draft."""

    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field("", max_length=5000)
    options: list[str] = Field(..., min_length=2, max_length=4)
    image_prompt: str = Field(..., alias="imagePrompt", min_length=1)
    category: SuggestionCategory

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("title", "image_prompt", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("options", mode="before")
    @classmethod
    def _clean_options(cls, value: object) -> object:
        if not isinstance(value, list):
            return value
        cleaned = [str(item).strip() for item in value]
        if any(not item for item in cleaned):
            raise ValueError("options must not be blank")
        return cleaned

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value: object) -> object:
        return value.strip().lower() if isinstance(value, str) else value


class SuggestionBatch(BaseModel):
    """Exactly five drafts, as returned by the generation call."""

    suggestions: list[SurveySuggestion] = Field(
        ..., min_length=SUGGESTION_COUNT, max_length=SUGGESTION_COUNT
    )


class SuggestionRequest(BaseModel):
    """Admin request for a fresh batch of drafts."""

    region: str | None = Field(None, description="Country code, or 'all' for global")
    topic: str | None = Field(None, description="Optional category focus")


class ImageRequest(BaseModel):
    """Request to illustrate a draft."""

    prompt: str = Field(..., min_length=1, max_length=2000)


class ImageResponse(BaseModel):
    """Reference to a generated image."""

    image_url: str = Field(..., alias="imageUrl")

    model_config = ConfigDict(populate_by_name=True)


class PublishSuggestionRequest(BaseModel):
    """Publish one draft, optionally with the image generated for it."""

    suggestion: SurveySuggestion
    region: str | None = None
    image_url: str | None = Field(None, alias="imageUrl")

    model_config = ConfigDict(populate_by_name=True)


class AutoPublishResponse(BaseModel):
    """Summary of an auto-publish run."""

    published_count: int
    survey_ids: list[str]
