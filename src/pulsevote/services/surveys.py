"""Survey authoring and publishing of generated drafts."""
from __future__ import annotations

import logging
from collections.abc import Sequence

from pulsevote.core.settings import settings
from pulsevote.models import Survey
from pulsevote.repositories import PreferenceRepository, SurveyRepository
from pulsevote.schemas.suggestion import SurveySuggestion

logger = logging.getLogger(__name__)

__all__ = ["SurveyValidationError", "create_survey", "normalize_region", "publish_suggestion"]

GLOBAL_REGION = "all"


class SurveyValidationError(ValueError):
    """Raised when a survey draft is rejected before any store call."""


def normalize_region(region: str | None) -> str | None:
    """Map the "all regions" marker and blanks to no target region."""
    if region is None:
        return None
    cleaned = region.strip()
    if not cleaned or cleaned.lower() == GLOBAL_REGION:
        return None
    return cleaned


def _clean_options(options: Sequence[str]) -> list[str]:
    cleaned = [option.strip() for option in options if option and option.strip()]
    if len(cleaned) < settings.survey_min_options:
        raise SurveyValidationError(
            f"Please provide at least {settings.survey_min_options} options"
        )
    if len(cleaned) > settings.survey_max_options:
        raise SurveyValidationError(
            f"A survey can have at most {settings.survey_max_options} options"
        )
    return cleaned


def create_survey(
    repo: SurveyRepository,
    *,
    author_id: str,
    title: str,
    options: Sequence[str],
    description: str | None = None,
    preference_id: str | None = None,
    target_region: str | None = None,
    image_url: str | None = None,
    allow_multiple_answers: bool = False,
    group_id: str | None = None,
    is_public_link: bool = False,
) -> Survey:
    """Validate and publish a survey with its options in one transaction.

    Blank options are dropped before the count check.

    Raises:
        SurveyValidationError: If the title is blank or the option count is
            outside the allowed range, or the tag id is unknown.
        StoreError: If the store rejects the write.
    """
    cleaned_title = title.strip()
    if not cleaned_title:
        raise SurveyValidationError("Please enter a survey title")
    cleaned_options = _clean_options(options)
    if preference_id and not repo.preference_exists(preference_id):
        raise SurveyValidationError("Unknown topic tag")

    survey = repo.create(
        options=cleaned_options,
        author_id=author_id,
        title=cleaned_title,
        description=(description or "").strip() or None,
        preference_id=preference_id or None,
        target_country=normalize_region(target_region),
        image_url=image_url or None,
        allow_multiple_answers=allow_multiple_answers,
        is_published=True,
        group_id=group_id,
        is_public_link=is_public_link,
    )
    logger.info("Survey %s published by %s", survey.id, author_id)
    return survey


def publish_suggestion(
    surveys: SurveyRepository,
    preferences: PreferenceRepository,
    *,
    author_id: str,
    suggestion: SurveySuggestion,
    region: str | None = None,
    image_url: str | None = None,
) -> Survey:
    """Publish a generated draft, tagging it with the matching preference."""
    preference = preferences.find_by_name(suggestion.category.preference_name)
    if preference is None:
        logger.info("No preference for category %s; publishing untagged", suggestion.category)
    return create_survey(
        surveys,
        author_id=author_id,
        title=suggestion.title,
        options=suggestion.options,
        description=suggestion.description,
        preference_id=preference.id if preference else None,
        target_region=region,
        image_url=image_url,
    )
