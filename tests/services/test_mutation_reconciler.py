"""Tests for vote/reaction/comment reconciliation against the held feed."""

import pytest

from pulsevote.models import Reaction, ReactionKind, SurveyOption, UserVote
from pulsevote.repositories import DuplicateVoteError, StoreError, SurveyRepository
from pulsevote.services.feed import SurveyFeed
from pulsevote.services.notifications import NoticeLevel, Notifier
from pulsevote.services.reconciler import MutationReconciler, MutationStatus


@pytest.fixture()
def repo(db_session):
    return SurveyRepository(db_session)


@pytest.fixture()
def viewer_feed(repo, test_user, survey):
    feed = SurveyFeed(repo, test_user.id)
    feed.fetch_feed()
    return feed


@pytest.fixture()
def reconciler(repo, viewer_feed):
    return MutationReconciler(repo, viewer_feed, Notifier())


def _counts(projection):
    return [o.vote_count for o in projection.options]


def _stored_count(db_session, option_id):
    return db_session.get(SurveyOption, option_id).vote_count


def test_single_answer_vote_scenario(db_session, reconciler, survey) -> None:
    option_a, option_b = survey.options

    result = reconciler.vote(survey.id, option_a.id)

    assert result.status is MutationStatus.APPLIED
    assert result.notice.message == "Vote recorded!"
    assert _counts(result.survey) == [4, 1]
    assert result.survey.user_votes == [option_a.id]
    db_session.expire_all()
    assert _stored_count(db_session, option_a.id) == 4

    second = reconciler.vote(survey.id, option_b.id)

    assert second.status is MutationStatus.REJECTED
    assert second.notice.message == "You can only vote once on this survey"
    assert _counts(second.survey) == [4, 1]
    assert len(second.survey.user_votes) == 1
    assert db_session.query(UserVote).count() == 1


def test_repeat_vote_on_same_option_is_rejected(reconciler, survey) -> None:
    option_a = survey.options[0]
    reconciler.vote(survey.id, option_a.id)

    result = reconciler.vote(survey.id, option_a.id)

    assert result.status is MutationStatus.REJECTED
    assert result.notice.level is NoticeLevel.INFO
    assert result.notice.message == "You already voted for this option"
    assert _counts(result.survey) == [4, 1]


def test_multi_answer_allows_distinct_options(repo, test_user, make_survey) -> None:
    multi = make_survey(
        title="Pick many", options=(("x", 0), ("y", 0), ("z", 0)), allow_multiple_answers=True
    )
    feed = SurveyFeed(repo, test_user.id)
    feed.fetch_feed()
    reconciler = MutationReconciler(repo, feed)

    for option in multi.options[:2]:
        assert reconciler.vote(multi.id, option.id).applied

    held = feed.get(multi.id)
    assert _counts(held) == [1, 1, 0]
    assert held.user_votes == [multi.options[0].id, multi.options[1].id]
    repeat = reconciler.vote(multi.id, multi.options[0].id)
    assert repeat.status is MutationStatus.REJECTED
    assert _counts(held) == [1, 1, 0]


def test_stale_projection_hits_store_backstop(db_session, reconciler, survey, test_user) -> None:
    # Vote written by another session of the same viewer after the feed was fetched.
    db_session.add(
        UserVote(user_id=test_user.id, survey_id=survey.id, option_id=survey.options[1].id)
    )
    db_session.flush()

    result = reconciler.vote(survey.id, survey.options[0].id)

    assert result.status is MutationStatus.REJECTED
    assert result.notice.message == "You can only vote once on this survey"
    assert _counts(result.survey) == [3, 1]
    assert result.survey.user_votes == []


def test_foreign_key_failure_is_not_a_duplicate_vote(db_session, repo, survey) -> None:
    db_session.commit()
    # No profile row backs this viewer id.
    with pytest.raises(StoreError) as excinfo:
        repo.insert_vote("deleted-profile", survey.id, survey.options[0].id)
    assert not isinstance(excinfo.value, DuplicateVoteError)

    feed = SurveyFeed(repo, "deleted-profile")
    feed.fetch_feed()
    result = MutationReconciler(repo, feed, Notifier()).vote(survey.id, survey.options[0].id)

    assert result.status is MutationStatus.FAILED
    assert result.notice.message == "Failed to record vote"
    assert _stored_count(db_session, survey.options[0].id) == 3


def test_vote_requires_signed_in_viewer(mocker, repo, survey) -> None:
    spy = mocker.spy(repo, "insert_vote")
    feed = SurveyFeed(repo)
    feed.fetch_feed()

    result = MutationReconciler(repo, feed).vote(survey.id, survey.options[0].id)

    assert result.status is MutationStatus.AUTH_REQUIRED
    assert result.notice.level is NoticeLevel.ERROR
    assert result.notice.message == "Please sign in to vote"
    spy.assert_not_called()


def test_vote_on_unknown_survey_or_option(reconciler, survey) -> None:
    assert reconciler.vote("missing", "missing").status is MutationStatus.NOT_FOUND
    assert reconciler.vote(survey.id, "missing").status is MutationStatus.NOT_FOUND


def test_vote_store_failure_leaves_state(mocker, reconciler, survey) -> None:
    mocker.patch.object(reconciler.repo, "insert_vote", side_effect=StoreError("down"))

    result = reconciler.vote(survey.id, survey.options[0].id)

    assert result.status is MutationStatus.FAILED
    assert result.notice.message == "Failed to record vote"
    assert _counts(result.survey) == [3, 1]
    assert result.survey.user_votes == []


def test_react_same_kind_twice_clears(db_session, reconciler, survey, test_user) -> None:
    first = reconciler.react(survey.id, ReactionKind.LIKE)
    assert first.survey.user_reaction is ReactionKind.LIKE
    assert len(first.survey.reactions) == 1

    second = reconciler.react(survey.id, ReactionKind.LIKE)

    assert second.status is MutationStatus.APPLIED
    assert second.survey.user_reaction is None
    assert second.survey.reactions == []
    assert db_session.query(Reaction).filter_by(user_id=test_user.id).count() == 0


def test_react_different_kind_replaces(db_session, reconciler, survey, test_user, other_user) -> None:
    db_session.add(Reaction(user_id=other_user.id, survey_id=survey.id, reaction=ReactionKind.SAD))
    db_session.flush()
    reconciler.feed.refresh()

    reconciler.react(survey.id, ReactionKind.LIKE)
    result = reconciler.react(survey.id, ReactionKind.LAUGH)

    rows = db_session.query(Reaction).filter_by(user_id=test_user.id, survey_id=survey.id).all()
    assert [r.reaction for r in rows] == [ReactionKind.LAUGH]
    assert result.survey.user_reaction is ReactionKind.LAUGH
    kinds = {(r.user_id, r.reaction) for r in result.survey.reactions}
    assert kinds == {(other_user.id, ReactionKind.SAD), (test_user.id, ReactionKind.LAUGH)}


def test_react_requires_signed_in_viewer(repo, survey) -> None:
    feed = SurveyFeed(repo)
    feed.fetch_feed()

    result = MutationReconciler(repo, feed).react(survey.id, ReactionKind.LIKE)

    assert result.status is MutationStatus.AUTH_REQUIRED
    assert result.notice.message == "Please sign in to react"


def test_react_store_failure(mocker, reconciler, survey) -> None:
    mocker.patch.object(reconciler.repo, "upsert_reaction", side_effect=StoreError("down"))

    result = reconciler.react(survey.id, ReactionKind.DISLIKE)

    assert result.status is MutationStatus.FAILED
    assert result.notice.message == "Failed to save reaction"
    assert result.survey.user_reaction is None


def test_comment_appends_in_order(reconciler, survey) -> None:
    reconciler.comment(survey.id, "first")
    result = reconciler.comment(survey.id, "  second  ")

    assert result.status is MutationStatus.APPLIED
    assert result.notice.message == "Comment added!"
    assert [c.content for c in result.survey.comments] == ["first", "second"]


def test_blank_comment_is_skipped(mocker, reconciler, survey) -> None:
    spy = mocker.spy(reconciler.repo, "insert_comment")

    result = reconciler.comment(survey.id, "   ")

    assert result.status is MutationStatus.SKIPPED
    assert result.notice is None
    spy.assert_not_called()


def test_comment_requires_signed_in_viewer(repo, survey) -> None:
    feed = SurveyFeed(repo)
    feed.fetch_feed()

    result = MutationReconciler(repo, feed).comment(survey.id, "hi")

    assert result.status is MutationStatus.AUTH_REQUIRED
    assert result.notice.message == "Please sign in to comment"


def test_comment_store_failure(mocker, reconciler, survey) -> None:
    mocker.patch.object(reconciler.repo, "insert_comment", side_effect=StoreError("down"))

    result = reconciler.comment(survey.id, "hello")

    assert result.status is MutationStatus.FAILED
    assert result.notice.message == "Failed to add comment"
    assert result.survey.comments == []


def test_notices_are_collected(reconciler, survey) -> None:
    reconciler.vote(survey.id, survey.options[0].id)
    reconciler.comment(survey.id, "nice")

    assert [n.message for n in reconciler.notifier.notices] == ["Vote recorded!", "Comment added!"]
    assert reconciler.notifier.last.level is NoticeLevel.SUCCESS
