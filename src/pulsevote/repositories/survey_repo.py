"""Data access helpers for surveys, options and per-user interactions."""
from __future__ import annotations

from collections import defaultdict
from collections.abc import Collection, Sequence
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload, selectinload
from sqlalchemy.sql import Select

from pulsevote.models import (
    Comment,
    Preference,
    Reaction,
    ReactionKind,
    Survey,
    SurveyOption,
    UserVote,
)

from .base import DuplicateVoteError, RecordNotFoundError, Repository

__all__ = ["SurveyRepository"]


def _with_details(stmt: Select[Any]) -> Select[Any]:
    # Reads always overwrite identity-map state with what the store holds.
    return stmt.options(
        selectinload(Survey.options),
        selectinload(Survey.reactions),
        selectinload(Survey.comments),
        joinedload(Survey.preference),
        joinedload(Survey.author),
    ).execution_options(populate_existing=True)


def _is_unique_violation(exc: IntegrityError) -> bool:
    # SQLite: "UNIQUE constraint failed"; PostgreSQL: "violates unique constraint".
    return "unique" in str(exc.orig).lower()


class SurveyRepository(Repository):
    """Select/insert/upsert/delete surface over survey rows."""

    def list_published(self, preference_ids: Collection[str] | None = None) -> list[Survey]:
        """Return every published survey newest first, with its children.

        Args:
            preference_ids: When non-empty, keep only surveys tagged with one of
                these ids.
        """
        stmt = _with_details(select(Survey)).where(Survey.is_published.is_(True))
        if preference_ids:
            stmt = stmt.where(Survey.preference_id.in_(list(preference_ids)))
        stmt = stmt.order_by(Survey.created_at.desc())
        with self._guard("list published surveys"):
            return list(self.session.scalars(stmt).unique())

    def list_for_group(self, group_id: str) -> list[Survey]:
        """Return every survey of a group, newest first."""
        stmt = (
            _with_details(select(Survey))
            .where(Survey.group_id == group_id)
            .order_by(Survey.created_at.desc())
        )
        with self._guard("list group surveys"):
            return list(self.session.scalars(stmt).unique())

    def count_for_group(self, group_id: str) -> int:
        """Count-only query for a group's surveys."""
        with self._guard("count group surveys"):
            return int(
                self.session.scalar(
                    select(func.count(Survey.id)).where(Survey.group_id == group_id)
                )
                or 0
            )

    def get(self, survey_id: str) -> Survey | None:
        """Return one survey with its children loaded."""
        stmt = _with_details(select(Survey)).where(Survey.id == survey_id)
        with self._guard("load survey"):
            return self.session.scalars(stmt).unique().first()

    def preference_exists(self, preference_id: str) -> bool:
        """Return True if the tag id is in the catalog."""
        with self._guard("check preference"):
            return self.session.get(Preference, preference_id) is not None

    def votes_by_survey(self, user_id: str) -> dict[str, list[str]]:
        """Fetch every vote of ``user_id`` in one pass, grouped by survey id."""
        grouped: dict[str, list[str]] = defaultdict(list)
        stmt = (
            select(UserVote.survey_id, UserVote.option_id)
            .where(UserVote.user_id == user_id)
            .order_by(UserVote.created_at)
        )
        with self._guard("list user votes"):
            for survey_id, option_id in self.session.execute(stmt):
                grouped[survey_id].append(option_id)
        return dict(grouped)

    def insert_vote(self, user_id: str, survey_id: str, option_id: str) -> UserVote:
        """Record a vote and bump the option's tally in the same transaction.

        Raises:
            RecordNotFoundError: If the option does not belong to the survey.
            DuplicateVoteError: If the vote breaks the per-survey uniqueness rules.
        """
        with self._guard("insert vote"):
            option = self.session.scalars(
                select(SurveyOption)
                .options(joinedload(SurveyOption.survey))
                .where(SurveyOption.id == option_id, SurveyOption.survey_id == survey_id)
            ).first()
            if option is None:
                raise RecordNotFoundError("Option not found")

            existing = select(func.count(UserVote.id)).where(
                UserVote.user_id == user_id, UserVote.survey_id == survey_id
            )
            if not option.survey.allow_multiple_answers:
                if self.session.scalar(existing):
                    raise DuplicateVoteError("Only one vote per survey")
            elif self.session.scalar(existing.where(UserVote.option_id == option_id)):
                raise DuplicateVoteError("Already voted for this option")

            vote = UserVote(user_id=user_id, survey_id=survey_id, option_id=option_id)
            self.session.add(vote)
            option.vote_count = SurveyOption.vote_count + 1
            try:
                self.session.commit()
            except IntegrityError as exc:
                if not _is_unique_violation(exc):
                    raise
                raise DuplicateVoteError("Already voted for this option") from exc
            self.session.refresh(vote)
            return vote

    def upsert_reaction(self, user_id: str, survey_id: str, kind: ReactionKind) -> Reaction:
        """Insert or replace the reaction keyed on (user, survey)."""
        with self._guard("upsert reaction"):
            reaction = self.session.scalars(
                select(Reaction).where(
                    Reaction.user_id == user_id, Reaction.survey_id == survey_id
                )
            ).first()
            if reaction is None:
                reaction = Reaction(user_id=user_id, survey_id=survey_id, reaction=kind)
                self.session.add(reaction)
            else:
                reaction.reaction = kind
            self.session.commit()
            self.session.refresh(reaction)
            return reaction

    def delete_reaction(self, user_id: str, survey_id: str) -> None:
        """Remove the user's reaction on a survey."""
        with self._guard("delete reaction"):
            self.session.execute(
                delete(Reaction).where(
                    Reaction.user_id == user_id, Reaction.survey_id == survey_id
                )
            )
            self.session.commit()

    def insert_comment(self, user_id: str, survey_id: str, content: str) -> Comment:
        """Append a comment and return the stored row."""
        with self._guard("insert comment"):
            comment = Comment(user_id=user_id, survey_id=survey_id, content=content)
            self.session.add(comment)
            self.session.commit()
            self.session.refresh(comment)
            return comment

    def create(self, *, options: Sequence[str], **fields: Any) -> Survey:
        """Insert a survey and its options inside one transaction.

        Args:
            options: Option texts in display order.
            **fields: Column values for the survey row.
        """
        with self._guard("create survey"):
            survey = Survey(**fields)
            survey.options = [
                SurveyOption(option_text=text, position=index)
                for index, text in enumerate(options)
            ]
            self.session.add(survey)
            self.session.commit()
            self.session.refresh(survey)
            return survey
