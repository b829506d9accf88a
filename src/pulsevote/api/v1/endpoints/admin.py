"""Admin surface: generated survey drafts, images and publishing."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from pulsevote.repositories import PreferenceRepository, StoreError, SurveyRepository
from pulsevote.schemas.suggestion import (
    AutoPublishResponse,
    ImageRequest,
    ImageResponse,
    PublishSuggestionRequest,
    SuggestionBatch,
    SuggestionRequest,
)
from pulsevote.schemas.survey import SurveyCreate, SurveyWithDetails
from pulsevote.scripts.auto_publish import NoAdminError, auto_publish
from pulsevote.services.feed import build_projection
from pulsevote.services.suggestions import (
    GeneratorDisabledError,
    MalformedSuggestionError,
    QuotaExceededError,
    RateLimitedError,
    SuggestionBridge,
    SuggestionError,
    get_suggestion_bridge,
)
from pulsevote.services.surveys import create_survey, publish_suggestion

from ..dependencies import AdminUserDep, SessionDep

router = APIRouter(prefix="/admin", tags=["admin"])
BridgeDep = Annotated[SuggestionBridge, Depends(get_suggestion_bridge)]

_SUGGESTION_CODES: dict[type[SuggestionError], int] = {
    RateLimitedError: status.HTTP_429_TOO_MANY_REQUESTS,
    QuotaExceededError: status.HTTP_402_PAYMENT_REQUIRED,
    MalformedSuggestionError: status.HTTP_502_BAD_GATEWAY,
    GeneratorDisabledError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@contextmanager
def _admin_errors() -> Iterator[None]:
    """Map generation and store failures onto HTTP responses."""
    try:
        yield
    except SuggestionError as exc:
        code = _SUGGESTION_CODES.get(type(exc), status.HTTP_502_BAD_GATEWAY)
        raise HTTPException(status_code=code, detail=exc.user_message) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    except StoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Data store unavailable"
        ) from exc


@router.post("/suggestions", response_model=SuggestionBatch)
async def generate_suggestions(
    request: SuggestionRequest,
    _admin: AdminUserDep,
    bridge: BridgeDep,
) -> SuggestionBatch:
    """Ask the generator for five survey drafts."""
    with _admin_errors():
        suggestions = await bridge.generate_suggestions(request.region, request.topic)
    return SuggestionBatch(suggestions=suggestions)


@router.post("/suggestions/image", response_model=ImageResponse)
async def generate_image(
    request: ImageRequest,
    _admin: AdminUserDep,
    bridge: BridgeDep,
) -> ImageResponse:
    """Illustrate one draft."""
    with _admin_errors():
        image_url = await bridge.generate_image(request.prompt)
    return ImageResponse(image_url=image_url)


@router.post(
    "/suggestions/publish",
    response_model=SurveyWithDetails,
    status_code=status.HTTP_201_CREATED,
)
async def publish_draft(
    request: PublishSuggestionRequest,
    admin: AdminUserDep,
    db: SessionDep,
) -> SurveyWithDetails:
    """Publish one generated draft."""
    with _admin_errors():
        survey = publish_suggestion(
            SurveyRepository(db),
            PreferenceRepository(db),
            author_id=admin.id,
            suggestion=request.suggestion,
            region=request.region,
            image_url=request.image_url,
        )
    return build_projection(survey, admin.id)


@router.post("/surveys", response_model=SurveyWithDetails, status_code=status.HTTP_201_CREATED)
async def publish_manual_survey(
    survey_data: SurveyCreate,
    admin: AdminUserDep,
    db: SessionDep,
) -> SurveyWithDetails:
    """Publish a hand-written survey to the public feed."""
    with _admin_errors():
        survey = create_survey(
            SurveyRepository(db),
            author_id=admin.id,
            title=survey_data.title,
            options=survey_data.options,
            description=survey_data.description,
            preference_id=survey_data.preference_id,
            target_region=survey_data.target_country,
            image_url=survey_data.image_url,
            allow_multiple_answers=survey_data.allow_multiple_answers,
            is_public_link=survey_data.is_public_link,
        )
    return build_projection(survey, admin.id)


@router.post("/auto-publish", response_model=AutoPublishResponse)
async def run_auto_publish(
    _admin: AdminUserDep,
    db: SessionDep,
    bridge: BridgeDep,
) -> AutoPublishResponse:
    """Generate and publish a batch of global surveys now."""
    try:
        with _admin_errors():
            survey_ids = await auto_publish(db, bridge)
    except NoAdminError as exc:  # pragma: no cover - caller is an admin
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return AutoPublishResponse(published_count=len(survey_ids), survey_ids=survey_ids)
