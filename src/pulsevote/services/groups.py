"""Group management: membership roles, group surveys and share links."""
from __future__ import annotations

import logging
from collections.abc import Sequence

from pulsevote.core.settings import settings
from pulsevote.models import Group, GroupMember, GroupRole, GroupType, Survey
from pulsevote.repositories import GroupRepository, ProfileRepository, SurveyRepository
from pulsevote.schemas.group import GroupWithDetails

from .surveys import create_survey

logger = logging.getLogger(__name__)

__all__ = [
    "AlreadyMemberError",
    "GroupError",
    "GroupManager",
    "GroupNotFoundError",
    "GroupPermissionError",
    "UserNotFoundError",
]

MANAGER_ROLES = frozenset({GroupRole.OWNER, GroupRole.ADMIN})


class GroupError(RuntimeError):
    """Base exception for group operations."""


class GroupNotFoundError(GroupError):
    """Raised when a group does not exist or the caller cannot see it."""


class UserNotFoundError(GroupError):
    """Raised when no account matches an invite email."""


class AlreadyMemberError(GroupError):
    """Raised when the invited account already belongs to the group."""


class GroupPermissionError(GroupError):
    """Raised when the caller's role does not allow the operation."""


class GroupManager:
    """Group operations performed on behalf of ``user_id``."""

    def __init__(
        self,
        groups: GroupRepository,
        profiles: ProfileRepository,
        surveys: SurveyRepository,
        user_id: str,
    ) -> None:
        self.groups = groups
        self.profiles = profiles
        self.surveys = surveys
        self.user_id = user_id

    def _membership(self, group_id: str) -> tuple[Group, GroupMember]:
        group = self.groups.get(group_id)
        membership = self.groups.get_membership(group_id, self.user_id) if group else None
        if group is None or membership is None:
            raise GroupNotFoundError("Group not found")
        return group, membership

    def _require_manager(self, group_id: str) -> Group:
        group, membership = self._membership(group_id)
        if membership.role not in MANAGER_ROLES:
            raise GroupPermissionError("Only the owner or an admin can manage members")
        return group

    def list_groups(self) -> list[GroupWithDetails]:
        """Groups the user belongs to, with members and survey counts."""
        details = []
        for group in self.groups.list_for_user(self.user_id):
            item = GroupWithDetails.model_validate(group)
            item.survey_count = self.surveys.count_for_group(group.id)
            details.append(item)
        return details

    def get_group(self, group_id: str) -> Group:
        group, _ = self._membership(group_id)
        return group

    def create_group(
        self, name: str, description: str | None = None, group_type: GroupType = GroupType.FAMILY
    ) -> Group:
        """Create a group owned by the user."""
        cleaned = name.strip()
        if not cleaned:
            raise ValueError("Please enter a group name")
        group = self.groups.create(
            owner_id=self.user_id,
            name=cleaned,
            description=(description or "").strip() or None,
            group_type=group_type,
        )
        logger.info("Group %s created by %s", group.id, self.user_id)
        return group

    def add_member(self, group_id: str, email: str) -> GroupMember:
        """Add an existing account, matched by email, as a plain member."""
        if not email.strip():
            raise ValueError("Please enter an email address")
        self._require_manager(group_id)
        profile = self.profiles.find_by_email(email)
        if profile is None:
            raise UserNotFoundError("User not found. They must have an account first.")
        if self.groups.get_membership(group_id, profile.id) is not None:
            raise AlreadyMemberError("User is already a member")
        member = self.groups.add_member(group_id, profile.id, GroupRole.MEMBER)
        logger.info("Added %s to group %s", profile.id, group_id)
        return member

    def remove_member(self, group_id: str, member_id: str) -> None:
        """Remove a member; the owner can never be removed."""
        group = self._require_manager(group_id)
        if member_id == group.owner_id:
            raise GroupPermissionError("The group owner cannot be removed")
        if self.groups.get_membership(group_id, member_id) is None:
            raise UserNotFoundError("Member not found")
        self.groups.remove_member(group_id, member_id)
        logger.info("Removed %s from group %s", member_id, group_id)

    def delete_group(self, group_id: str) -> None:
        """Delete a group together with its surveys; owner only."""
        group, _ = self._membership(group_id)
        if group.owner_id != self.user_id:
            raise GroupPermissionError("Only the owner can delete a group")
        self.groups.delete(group)
        logger.info("Group %s deleted", group_id)

    def list_surveys(self, group_id: str) -> list[Survey]:
        """The group's surveys, newest first."""
        self._membership(group_id)
        return self.surveys.list_for_group(group_id)

    def create_survey(
        self,
        group_id: str,
        *,
        title: str,
        options: Sequence[str],
        description: str | None = None,
        preference_id: str | None = None,
        allow_multiple_answers: bool = False,
        is_public_link: bool = False,
    ) -> Survey:
        """Publish a survey inside the group."""
        self._membership(group_id)
        return create_survey(
            self.surveys,
            author_id=self.user_id,
            title=title,
            options=options,
            description=description,
            preference_id=preference_id,
            allow_multiple_answers=allow_multiple_answers,
            group_id=group_id,
            is_public_link=is_public_link,
        )

    def share_link(self, group_id: str, survey_id: str) -> str:
        """Public URL for a company-group survey flagged for link sharing."""
        group, _ = self._membership(group_id)
        survey = self.surveys.get(survey_id)
        if survey is None or survey.group_id != group_id:
            raise GroupNotFoundError("Survey not found")
        if group.type is not GroupType.COMPANY or not survey.is_public_link:
            raise GroupPermissionError("Public links are only available for company surveys")
        return f"{settings.public_base_url.rstrip('/')}/#/survey/{survey.id}"
