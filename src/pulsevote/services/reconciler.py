"""Apply viewer writes to the store and patch the held feed in place.

Local state is only changed after the store confirms a write. Vote
preconditions are checked against the held projection first, with the store's
uniqueness constraints acting as the backstop when the projection is stale.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from pulsevote.models import ReactionKind
from pulsevote.repositories import (
    DuplicateVoteError,
    RecordNotFoundError,
    StoreError,
    SurveyRepository,
)
from pulsevote.schemas.survey import CommentResponse, ReactionResponse, SurveyWithDetails

from .feed import SurveyFeed
from .notifications import Notice, Notifier

logger = logging.getLogger(__name__)

__all__ = ["MutationReconciler", "MutationResult", "MutationStatus"]

ALREADY_VOTED_OPTION = "You already voted for this option"
ONE_VOTE_PER_SURVEY = "You can only vote once on this survey"


class MutationStatus(str, Enum):
    """Outcome of a reconciled write."""

    APPLIED = "applied"
    REJECTED = "rejected"
    AUTH_REQUIRED = "auth_required"
    NOT_FOUND = "not_found"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class MutationResult:
    """What happened, the notice shown, and the survey as held afterwards."""

    status: MutationStatus
    notice: Notice | None = None
    survey: SurveyWithDetails | None = None

    @property
    def applied(self) -> bool:
        return self.status is MutationStatus.APPLIED


class MutationReconciler:
    """Votes, reaction toggles and comments for one viewer."""

    def __init__(
        self,
        repo: SurveyRepository,
        feed: SurveyFeed,
        notifier: Notifier | None = None,
    ) -> None:
        self.repo = repo
        self.feed = feed
        self.notifier = notifier or Notifier()

    @property
    def viewer_id(self) -> str | None:
        return self.feed.viewer_id

    def _result(
        self,
        status: MutationStatus,
        notice: Notice | None = None,
        survey: SurveyWithDetails | None = None,
    ) -> MutationResult:
        return MutationResult(status=status, notice=notice, survey=survey)

    def vote(self, survey_id: str, option_id: str) -> MutationResult:
        """Cast a vote for ``option_id`` on ``survey_id``."""
        if self.viewer_id is None:
            return self._result(
                MutationStatus.AUTH_REQUIRED, self.notifier.error("Please sign in to vote")
            )

        survey = self.feed.get(survey_id)
        if survey is None:
            return self._result(MutationStatus.NOT_FOUND)

        if option_id in survey.user_votes:
            logger.info("Rejected repeat vote on %s by %s", option_id, self.viewer_id)
            return self._result(
                MutationStatus.REJECTED, self.notifier.info(ALREADY_VOTED_OPTION), survey
            )
        if not survey.allow_multiple_answers and survey.user_votes:
            logger.info("Rejected second vote on %s by %s", survey_id, self.viewer_id)
            return self._result(
                MutationStatus.REJECTED, self.notifier.info(ONE_VOTE_PER_SURVEY), survey
            )

        option = survey.option(option_id)
        if option is None:
            return self._result(MutationStatus.NOT_FOUND, survey=survey)

        try:
            self.repo.insert_vote(self.viewer_id, survey_id, option_id)
        except DuplicateVoteError as exc:
            logger.info("Store rejected vote on %s: %s", survey_id, exc)
            message = (
                ONE_VOTE_PER_SURVEY if not survey.allow_multiple_answers else ALREADY_VOTED_OPTION
            )
            return self._result(MutationStatus.REJECTED, self.notifier.info(message), survey)
        except RecordNotFoundError:
            return self._result(MutationStatus.NOT_FOUND, survey=survey)
        except StoreError:
            logger.exception("Error voting on %s", survey_id)
            return self._result(
                MutationStatus.FAILED, self.notifier.error("Failed to record vote"), survey
            )

        option.vote_count += 1
        survey.user_votes.append(option_id)
        return self._result(
            MutationStatus.APPLIED, self.notifier.success("Vote recorded!"), survey
        )

    def react(self, survey_id: str, kind: ReactionKind) -> MutationResult:
        """Toggle the viewer's single reaction slot on a survey.

        The same kind twice clears the reaction; a different kind replaces it.
        """
        if self.viewer_id is None:
            return self._result(
                MutationStatus.AUTH_REQUIRED, self.notifier.error("Please sign in to react")
            )

        survey = self.feed.get(survey_id)
        if survey is None:
            return self._result(MutationStatus.NOT_FOUND)

        viewer_id = self.viewer_id
        try:
            if survey.user_reaction == kind:
                self.repo.delete_reaction(viewer_id, survey_id)
                stored = None
            else:
                stored = self.repo.upsert_reaction(viewer_id, survey_id, kind)
        except StoreError:
            logger.exception("Error reacting to %s", survey_id)
            return self._result(
                MutationStatus.FAILED, self.notifier.error("Failed to save reaction"), survey
            )

        others = [r for r in survey.reactions if r.user_id != viewer_id]
        if stored is None:
            survey.reactions = others
            survey.user_reaction = None
            notice = self.notifier.info("Reaction removed")
        else:
            row = ReactionResponse.model_validate(stored)
            # Replace the viewer's entry in place to keep display order.
            if len(others) == len(survey.reactions):
                survey.reactions.append(row)
            else:
                survey.reactions = [row if r.user_id == viewer_id else r for r in survey.reactions]
            survey.user_reaction = kind
            notice = self.notifier.success("Reaction saved")
        return self._result(MutationStatus.APPLIED, notice, survey)

    def comment(self, survey_id: str, text: str) -> MutationResult:
        """Append a comment; blank text is ignored."""
        if self.viewer_id is None:
            return self._result(
                MutationStatus.AUTH_REQUIRED, self.notifier.error("Please sign in to comment")
            )

        content = text.strip()
        if not content:
            return self._result(MutationStatus.SKIPPED, survey=self.feed.get(survey_id))

        survey = self.feed.get(survey_id)
        if survey is None:
            return self._result(MutationStatus.NOT_FOUND)

        try:
            stored = self.repo.insert_comment(self.viewer_id, survey_id, content)
        except StoreError:
            logger.exception("Error adding comment to %s", survey_id)
            return self._result(
                MutationStatus.FAILED, self.notifier.error("Failed to add comment"), survey
            )

        survey.comments.append(CommentResponse.model_validate(stored))
        return self._result(
            MutationStatus.APPLIED, self.notifier.success("Comment added!"), survey
        )
