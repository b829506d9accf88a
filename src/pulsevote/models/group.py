"""SQLAlchemy models for family/company groups and their membership."""

from __future__ import annotations

import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pulsevote.db.session import Base
from pulsevote.db.time import new_id, utcnow

from .enums import GroupRole, GroupType, enum_column_type
from .profile import Profile


class Group(Base):
    """Private collection of surveys scoped to its members."""

    __tablename__ = "groups"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[GroupType] = mapped_column(
        enum_column_type(GroupType, "group_type"), nullable=False, default=GroupType.FAMILY
    )
    owner_id: Mapped[str] = mapped_column(String(36), ForeignKey("profiles.id"), nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    members: Mapped[list[GroupMember]] = relationship(
        "GroupMember",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="GroupMember.joined_at",
    )


class GroupMember(Base):
    """Membership row; presence implies access to the group's surveys."""

    __tablename__ = "group_members"
    __table_args__ = (UniqueConstraint("group_id", "user_id", name="uq_group_members_pair"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    group_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[GroupRole] = mapped_column(
        enum_column_type(GroupRole, "group_role"), nullable=False, default=GroupRole.MEMBER
    )
    joined_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    profile: Mapped[Profile] = relationship(Profile)
