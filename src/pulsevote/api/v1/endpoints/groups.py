"""Family/company groups, their members and their surveys."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import APIRouter, HTTPException, Response, status
from sqlalchemy.orm import Session

from pulsevote.models import Group, GroupMember, Profile, Survey
from pulsevote.repositories import (
    GroupRepository,
    ProfileRepository,
    StoreError,
    SurveyRepository,
)
from pulsevote.schemas.group import (
    GroupCreate,
    GroupMemberResponse,
    GroupResponse,
    GroupWithDetails,
    MemberInvite,
)
from pulsevote.schemas.survey import ShareLinkResponse, SurveyCreate, SurveyWithDetails
from pulsevote.services.feed import build_projection
from pulsevote.services.groups import (
    AlreadyMemberError,
    GroupError,
    GroupManager,
    GroupNotFoundError,
    GroupPermissionError,
    UserNotFoundError,
)

from ..dependencies import CurrentUserDep, SessionDep

router = APIRouter(prefix="/groups", tags=["groups"])

_ERROR_CODES: dict[type[GroupError], int] = {
    GroupNotFoundError: status.HTTP_404_NOT_FOUND,
    UserNotFoundError: status.HTTP_404_NOT_FOUND,
    AlreadyMemberError: status.HTTP_409_CONFLICT,
    GroupPermissionError: status.HTTP_403_FORBIDDEN,
}


def _manager(db: Session, user: Profile) -> GroupManager:
    return GroupManager(
        GroupRepository(db), ProfileRepository(db), SurveyRepository(db), user.id
    )


@contextmanager
def _group_errors() -> Iterator[None]:
    """Map service failures onto HTTP responses."""
    try:
        yield
    except GroupError as exc:
        code = _ERROR_CODES.get(type(exc), status.HTTP_400_BAD_REQUEST)
        raise HTTPException(status_code=code, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    except StoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Data store unavailable"
        ) from exc


@router.get("/", response_model=list[GroupWithDetails])
async def list_groups(current_user: CurrentUserDep, db: SessionDep) -> list[GroupWithDetails]:
    """Groups the signed-in user belongs to."""
    with _group_errors():
        return _manager(db, current_user).list_groups()


@router.post("/", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(
    group_data: GroupCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> Group:
    """Create a group owned by the signed-in user."""
    with _group_errors():
        return _manager(db, current_user).create_group(
            group_data.name, group_data.description, group_data.type
        )


@router.delete("/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_group(group_id: str, current_user: CurrentUserDep, db: SessionDep) -> Response:
    """Delete a group and its surveys; owner only."""
    with _group_errors():
        _manager(db, current_user).delete_group(group_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{group_id}/members",
    response_model=GroupMemberResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_member(
    group_id: str,
    invite: MemberInvite,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> GroupMember:
    """Add an existing account to the group by email."""
    with _group_errors():
        return _manager(db, current_user).add_member(group_id, invite.email)


@router.delete("/{group_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
    group_id: str,
    user_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> Response:
    """Remove a member; owners and admins only."""
    with _group_errors():
        _manager(db, current_user).remove_member(group_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{group_id}/surveys", response_model=list[SurveyWithDetails])
async def list_group_surveys(
    group_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> list[SurveyWithDetails]:
    """The group's surveys, newest first."""
    with _group_errors():
        surveys = _manager(db, current_user).list_surveys(group_id)
        votes = SurveyRepository(db).votes_by_survey(current_user.id)
    return [build_projection(s, current_user.id, votes.get(s.id, ())) for s in surveys]


@router.post(
    "/{group_id}/surveys",
    response_model=SurveyWithDetails,
    status_code=status.HTTP_201_CREATED,
)
async def create_group_survey(
    group_id: str,
    survey_data: SurveyCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> SurveyWithDetails:
    """Publish a survey inside the group."""
    with _group_errors():
        survey: Survey = _manager(db, current_user).create_survey(
            group_id,
            title=survey_data.title,
            options=survey_data.options,
            description=survey_data.description,
            preference_id=survey_data.preference_id,
            allow_multiple_answers=survey_data.allow_multiple_answers,
            is_public_link=survey_data.is_public_link,
        )
    return build_projection(survey, current_user.id)


@router.get("/{group_id}/surveys/{survey_id}/share-link", response_model=ShareLinkResponse)
async def get_share_link(
    group_id: str,
    survey_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ShareLinkResponse:
    """Public link for a company survey flagged for sharing."""
    with _group_errors():
        url = _manager(db, current_user).share_link(group_id, survey_id)
    return ShareLinkResponse(survey_id=survey_id, url=url)
