"""Profile-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict


class ProfileResponse(BaseModel):
    """Public author information attached to surveys."""

    id: str
    display_name: str | None = None
    country: str | None = None

    model_config = ConfigDict(from_attributes=True)


class MemberProfileResponse(ProfileResponse):
    """Profile details visible to fellow group members."""

    email: str
