"""Closed value sets shared by the ORM models and API schemas."""

from __future__ import annotations

from enum import Enum

from sqlalchemy import Enum as SAEnum


class ReactionKind(str, Enum):
    """Emotive response a viewer can attach to a survey."""

    LIKE = "like"
    DISLIKE = "dislike"
    LAUGH = "laugh"
    SAD = "sad"


class AppRole(str, Enum):
    """Application-wide role granted to a profile."""

    ADMIN = "admin"
    USER = "user"


class GroupRole(str, Enum):
    """Role held by a member inside a group."""

    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class GroupType(str, Enum):
    """Kind of collaboration group."""

    FAMILY = "family"
    COMPANY = "company"


def enum_column_type(enum_cls: type[Enum], name: str) -> SAEnum:
    """Return a portable column type storing the enum's string values."""
    return SAEnum(
        enum_cls,
        name=name,
        native_enum=False,
        create_constraint=True,
        length=16,
        values_callable=lambda members: [member.value for member in members],
    )
