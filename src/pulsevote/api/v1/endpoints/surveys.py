"""Survey feed reads and the reconciled vote/reaction/comment writes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from pulsevote.models import Profile
from pulsevote.repositories import PreferenceRepository, SurveyRepository
from pulsevote.schemas.survey import (
    CommentCreate,
    MutationResponse,
    ReactionCreate,
    SurveyWithDetails,
    VoteCreate,
)
from pulsevote.services.feed import SurveyFeed
from pulsevote.services.preferences import PreferenceStore
from pulsevote.services.reconciler import MutationReconciler, MutationResult, MutationStatus

from ..dependencies import CurrentUserDep, OptionalUserDep, SessionDep

router = APIRouter(prefix="/surveys", tags=["surveys"])

_STATUS_CODES = {
    MutationStatus.APPLIED: status.HTTP_200_OK,
    MutationStatus.REJECTED: status.HTTP_409_CONFLICT,
    MutationStatus.AUTH_REQUIRED: status.HTTP_401_UNAUTHORIZED,
    MutationStatus.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    MutationStatus.SKIPPED: status.HTTP_422_UNPROCESSABLE_ENTITY,
    MutationStatus.FAILED: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _survey_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Survey not found")


def _visible(survey: SurveyWithDetails | None) -> bool:
    """Drafts stay hidden; every published survey is open, as in the feed."""
    return survey is not None and survey.is_published


def _reconciler(db: Session, viewer: Profile, survey_id: str) -> MutationReconciler:
    repo = SurveyRepository(db)
    feed = SurveyFeed(repo, viewer.id)
    if not _visible(feed.fetch_survey(survey_id)):
        raise _survey_not_found()
    return MutationReconciler(repo, feed)


def _respond(result: MutationResult, response: Response, created: bool = False) -> MutationResponse:
    code = _STATUS_CODES[result.status]
    if created and result.applied:
        code = status.HTTP_201_CREATED
    response.status_code = code
    return MutationResponse(
        status=result.status.value,
        level=result.notice.level.value if result.notice else None,
        message=result.notice.message if result.notice else None,
        survey=result.survey,
    )


@router.get("/feed", response_model=list[SurveyWithDetails])
async def get_feed(
    db: SessionDep,
    viewer: OptionalUserDep,
    preference_id: Annotated[list[str] | None, Query()] = None,
) -> list[SurveyWithDetails]:
    """Published surveys, newest first.

    Without an explicit ``preference_id`` filter a signed-in viewer's own
    selection is used; an empty selection shows everything.
    """
    viewer_id = viewer.id if viewer else None
    tag_filter = set(preference_id or ())
    if not tag_filter and viewer_id:
        tag_filter = PreferenceStore(PreferenceRepository(db), viewer_id).list_user_preferences()
    return SurveyFeed(SurveyRepository(db), viewer_id).fetch_feed(tag_filter)


@router.get("/{survey_id}", response_model=SurveyWithDetails)
async def get_survey(
    survey_id: str,
    db: SessionDep,
    viewer: OptionalUserDep,
) -> SurveyWithDetails:
    """One published survey as seen by the current viewer."""
    viewer_id = viewer.id if viewer else None
    survey = SurveyFeed(SurveyRepository(db), viewer_id).fetch_survey(survey_id)
    if not _visible(survey):
        raise _survey_not_found()
    return survey


@router.get("/{survey_id}/public", response_model=SurveyWithDetails)
async def get_public_survey(
    survey_id: str,
    db: SessionDep,
    viewer: OptionalUserDep,
) -> SurveyWithDetails:
    """A survey shared by public link, readable without signing in."""
    feed = SurveyFeed(SurveyRepository(db), viewer.id if viewer else None)
    survey = feed.fetch_survey(survey_id)
    if survey is None or not (survey.is_published and survey.is_public_link):
        raise _survey_not_found()
    return survey


@router.post("/{survey_id}/votes", response_model=MutationResponse)
async def cast_vote(
    survey_id: str,
    vote: VoteCreate,
    response: Response,
    db: SessionDep,
    viewer: CurrentUserDep,
) -> MutationResponse:
    """Cast a vote for one option."""
    reconciler = _reconciler(db, viewer, survey_id)
    return _respond(reconciler.vote(survey_id, vote.option_id), response, created=True)


@router.post("/{survey_id}/reactions", response_model=MutationResponse)
async def toggle_reaction(
    survey_id: str,
    reaction: ReactionCreate,
    response: Response,
    db: SessionDep,
    viewer: CurrentUserDep,
) -> MutationResponse:
    """Set, replace or clear the viewer's reaction."""
    reconciler = _reconciler(db, viewer, survey_id)
    return _respond(reconciler.react(survey_id, reaction.reaction), response)


@router.post("/{survey_id}/comments", response_model=MutationResponse)
async def add_comment(
    survey_id: str,
    comment: CommentCreate,
    response: Response,
    db: SessionDep,
    viewer: CurrentUserDep,
) -> MutationResponse:
    """Append a comment."""
    reconciler = _reconciler(db, viewer, survey_id)
    return _respond(reconciler.comment(survey_id, comment.content), response, created=True)
