"""Group-related Pydantic schemas."""

import datetime

from pydantic import BaseModel, ConfigDict, Field

from pulsevote.models.enums import GroupRole, GroupType

from .profile import MemberProfileResponse


class GroupCreate(BaseModel):
    """Schema for creating a new group."""

    name: str = Field(..., max_length=120)
    description: str | None = Field(None, max_length=2000)
    type: GroupType = GroupType.FAMILY


class MemberInvite(BaseModel):
    """Add an existing account to a group by its email address."""

    email: str = Field(..., max_length=320)


class GroupMemberResponse(BaseModel):
    """Membership row with the member's resolved profile."""

    id: str
    group_id: str
    user_id: str
    role: GroupRole
    joined_at: datetime.datetime | None = None
    profile: MemberProfileResponse | None = None

    model_config = ConfigDict(from_attributes=True)


class GroupResponse(BaseModel):
    """Schema for group information returned by the API."""

    id: str
    name: str
    description: str | None = None
    type: GroupType
    owner_id: str
    created_at: datetime.datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class GroupWithDetails(GroupResponse):
    """Group with its members and the number of surveys it holds."""

    members: list[GroupMemberResponse] = Field(default_factory=list)
    survey_count: int = 0
