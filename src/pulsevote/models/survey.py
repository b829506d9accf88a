"""SQLAlchemy models for surveys and the interactions attached to them."""

from __future__ import annotations

import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pulsevote.db.session import Base
from pulsevote.db.time import new_id, utcnow

from .enums import ReactionKind, enum_column_type
from .preference import Preference
from .profile import Profile


class Survey(Base):
    """A single poll with a title and a set of options.

    Unpublished surveys are never returned by the feed.
    """

    __tablename__ = "surveys"
    __table_args__ = (Index("ix_surveys_published_created", "is_published", "created_at"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    author_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("profiles.id"), nullable=False
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    preference_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("preferences.id", ondelete="SET NULL"), nullable=True
    )
    target_country: Mapped[str | None] = mapped_column(Text, nullable=True)
    allow_multiple_answers: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    group_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("groups.id", ondelete="CASCADE"), nullable=True, index=True
    )
    is_public_link: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    options: Mapped[list[SurveyOption]] = relationship(
        "SurveyOption",
        order_by="SurveyOption.position",
        cascade="all, delete-orphan",
        back_populates="survey",
    )
    reactions: Mapped[list[Reaction]] = relationship(
        "Reaction", cascade="all, delete-orphan", passive_deletes=True
    )
    comments: Mapped[list[Comment]] = relationship(
        "Comment",
        order_by="Comment.created_at",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    preference: Mapped[Preference | None] = relationship(Preference)
    author: Mapped[Profile] = relationship(Profile)


class SurveyOption(Base):
    """One selectable answer with its running vote tally."""

    __tablename__ = "survey_options"
    __table_args__ = (CheckConstraint("vote_count >= 0", name="ck_survey_options_vote_count"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    survey_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("surveys.id", ondelete="CASCADE"), nullable=False, index=True
    )
    option_text: Mapped[str] = mapped_column(Text, nullable=False)
    # Authoritative count; only ever incremented alongside a UserVote insert.
    vote_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Display order inside the survey.
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    survey: Mapped[Survey] = relationship("Survey", back_populates="options")


class UserVote(Base):
    """A single vote cast by a user for one option of a survey."""

    __tablename__ = "user_votes"
    __table_args__ = (
        UniqueConstraint("user_id", "survey_id", "option_id", name="uq_user_votes_triple"),
        Index("ix_user_votes_user_id", "user_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    survey_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("surveys.id", ondelete="CASCADE"), nullable=False
    )
    option_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("survey_options.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class Reaction(Base):
    """Single-slot emotive reaction of a user to a survey."""

    __tablename__ = "reactions"
    __table_args__ = (UniqueConstraint("user_id", "survey_id", name="uq_reactions_user_survey"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    survey_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("surveys.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reaction: Mapped[ReactionKind] = mapped_column(
        enum_column_type(ReactionKind, "reaction_type"), nullable=False
    )
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class Comment(Base):
    """Append-only text comment on a survey."""

    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    survey_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("surveys.id", ondelete="CASCADE"), nullable=False, index=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
