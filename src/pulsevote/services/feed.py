"""Survey feed aggregation for a single viewer.

The feed is a read-through projection of store state. Vote counts, the
viewer's votes and the viewer's reaction are mirrors: they are accurate at
fetch time and drift as other viewers write. Call :meth:`SurveyFeed.refresh`
to resynchronise.
"""
from __future__ import annotations

import logging
from collections.abc import Collection, Iterable

from pulsevote.models import Survey
from pulsevote.repositories import StoreError, SurveyRepository
from pulsevote.schemas.survey import SurveyWithDetails

logger = logging.getLogger(__name__)

__all__ = ["SurveyFeed", "build_projection"]


def build_projection(
    survey: Survey, viewer_id: str | None, user_votes: Iterable[str] = ()
) -> SurveyWithDetails:
    """Assemble the per-viewer view of one stored survey."""
    projection = SurveyWithDetails.model_validate(survey)
    projection.user_votes = list(user_votes)
    if viewer_id is not None:
        projection.user_reaction = next(
            (r.reaction for r in projection.reactions if r.user_id == viewer_id), None
        )
    return projection


class SurveyFeed:
    """Holds the ordered, filtered surveys shown to one viewer."""

    def __init__(self, repo: SurveyRepository, viewer_id: str | None = None) -> None:
        self.repo = repo
        self.viewer_id = viewer_id
        self.surveys: list[SurveyWithDetails] = []
        self.loading = False
        self._last_filter: frozenset[str] = frozenset()

    def fetch_feed(
        self, tag_filter: Collection[str] | None = None
    ) -> list[SurveyWithDetails]:
        """Load published surveys newest first.

        Args:
            tag_filter: Preference ids to restrict to; empty or None means all.

        Returns:
            The assembled feed. On any store failure the feed is empty.
        """
        self._last_filter = frozenset(tag_filter or ())
        self.loading = True
        try:
            rows = self.repo.list_published(self._last_filter)
            votes = self.repo.votes_by_survey(self.viewer_id) if self.viewer_id else {}
        except StoreError:
            logger.exception("Error fetching surveys")
            self.surveys = []
            return self.surveys
        finally:
            self.loading = False

        self.surveys = [
            build_projection(row, self.viewer_id, votes.get(row.id, ())) for row in rows
        ]
        return self.surveys

    def refresh(self) -> list[SurveyWithDetails]:
        """Re-run the last fetch with the same tag filter."""
        return self.fetch_feed(self._last_filter)

    def fetch_survey(self, survey_id: str) -> SurveyWithDetails | None:
        """Load one survey projection and hold it in the feed.

        Returns None when the survey does not exist or the store fails.
        """
        try:
            row = self.repo.get(survey_id)
            if row is None:
                return None
            votes = self.repo.votes_by_survey(self.viewer_id) if self.viewer_id else {}
        except StoreError:
            logger.exception("Error fetching survey %s", survey_id)
            return None

        projection = build_projection(row, self.viewer_id, votes.get(row.id, ()))
        for index, held in enumerate(self.surveys):
            if held.id == survey_id:
                self.surveys[index] = projection
                break
        else:
            self.surveys.append(projection)
        return projection

    def get(self, survey_id: str) -> SurveyWithDetails | None:
        """Return the held projection for ``survey_id`` without a store call."""
        return next((s for s in self.surveys if s.id == survey_id), None)
