# mypy: ignore-errors
"""Tests for feed and survey interaction endpoints."""

from datetime import timedelta

from fastapi import status

from pulsevote.db.time import utcnow
from pulsevote.models import GroupRole, UserPreference


def _vote(client, survey, option, headers):
    return client.post(
        f"/api/v1/surveys/{survey.id}/votes", json={"option_id": option.id}, headers=headers
    )


def test_anonymous_feed(client, make_survey) -> None:
    now = utcnow()
    older = make_survey(title="older", created_at=now - timedelta(minutes=5))
    newer = make_survey(title="newer", created_at=now)
    make_survey(title="hidden", is_published=False)

    response = client.get("/api/v1/surveys/feed")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert [s["id"] for s in data] == [newer.id, older.id]
    assert data[0]["user_votes"] == []
    assert data[0]["user_reaction"] is None
    assert data[0]["author"]["display_name"] == "Test User"


def test_feed_explicit_filter(client, make_survey, preferences) -> None:
    soup = make_survey(title="soup", preference_id=preferences["Cooking"].id)
    song = make_survey(title="song", preference_id=preferences["Music"].id)
    make_survey(title="goal", preference_id=preferences["Sports"].id)

    response = client.get(
        "/api/v1/surveys/feed",
        params=[("preference_id", preferences["Cooking"].id), ("preference_id", preferences["Music"].id)],
    )

    assert {s["id"] for s in response.json()} == {soup.id, song.id}


def test_feed_uses_viewer_selection(client, db_session, auth_token, test_user, make_survey, preferences) -> None:
    soup = make_survey(title="soup", preference_id=preferences["Cooking"].id)
    make_survey(title="goal", preference_id=preferences["Sports"].id)
    db_session.add(UserPreference(user_id=test_user.id, preference_id=preferences["Cooking"].id))
    db_session.flush()

    response = client.get("/api/v1/surveys/feed", headers=auth_token)

    assert [s["id"] for s in response.json()] == [soup.id]


def test_feed_without_selection_shows_all(client, auth_token, make_survey, preferences) -> None:
    make_survey(title="soup", preference_id=preferences["Cooking"].id)
    make_survey(title="goal", preference_id=preferences["Sports"].id)

    response = client.get("/api/v1/surveys/feed", headers=auth_token)

    assert len(response.json()) == 2


def test_vote_scenario(client, auth_token, survey) -> None:
    option_a, option_b = survey.options

    first = _vote(client, survey, option_a, auth_token)
    assert first.status_code == status.HTTP_201_CREATED
    body = first.json()
    assert body["status"] == "applied"
    assert body["message"] == "Vote recorded!"
    assert [o["vote_count"] for o in body["survey"]["options"]] == [4, 1]
    assert body["survey"]["user_votes"] == [option_a.id]

    second = _vote(client, survey, option_b, auth_token)
    assert second.status_code == status.HTTP_409_CONFLICT
    assert second.json()["message"] == "You can only vote once on this survey"
    assert [o["vote_count"] for o in second.json()["survey"]["options"]] == [4, 1]

    feed = client.get("/api/v1/surveys/feed", headers=auth_token).json()
    assert feed[0]["user_votes"] == [option_a.id]


def test_vote_requires_auth(client, survey) -> None:
    response = _vote(client, survey, survey.options[0], {})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_vote_unknown_survey_and_option(client, auth_token, survey) -> None:
    missing = client.post(
        "/api/v1/surveys/missing/votes", json={"option_id": "x"}, headers=auth_token
    )
    assert missing.status_code == status.HTTP_404_NOT_FOUND

    wrong_option = client.post(
        f"/api/v1/surveys/{survey.id}/votes", json={"option_id": "x"}, headers=auth_token
    )
    assert wrong_option.status_code == status.HTTP_404_NOT_FOUND


def test_votes_from_two_viewers(client, auth_token, other_auth_token, survey) -> None:
    _vote(client, survey, survey.options[0], auth_token)
    response = _vote(client, survey, survey.options[1], other_auth_token)

    assert response.status_code == status.HTTP_201_CREATED
    assert [o["vote_count"] for o in response.json()["survey"]["options"]] == [4, 2]


def test_reaction_toggle(client, auth_token, survey) -> None:
    url = f"/api/v1/surveys/{survey.id}/reactions"

    liked = client.post(url, json={"reaction": "like"}, headers=auth_token).json()
    assert liked["survey"]["user_reaction"] == "like"

    laughed = client.post(url, json={"reaction": "laugh"}, headers=auth_token).json()
    assert laughed["survey"]["user_reaction"] == "laugh"
    assert [r["reaction"] for r in laughed["survey"]["reactions"]] == ["laugh"]

    cleared = client.post(url, json={"reaction": "laugh"}, headers=auth_token)
    assert cleared.status_code == status.HTTP_200_OK
    assert cleared.json()["survey"]["user_reaction"] is None
    assert cleared.json()["survey"]["reactions"] == []


def test_reaction_kind_is_closed(client, auth_token, survey) -> None:
    response = client.post(
        f"/api/v1/surveys/{survey.id}/reactions", json={"reaction": "love"}, headers=auth_token
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_comments(client, auth_token, survey) -> None:
    url = f"/api/v1/surveys/{survey.id}/comments"

    client.post(url, json={"content": "first"}, headers=auth_token)
    added = client.post(url, json={"content": "second"}, headers=auth_token)

    assert added.status_code == status.HTTP_201_CREATED
    assert added.json()["message"] == "Comment added!"
    assert [c["content"] for c in added.json()["survey"]["comments"]] == ["first", "second"]

    blank = client.post(url, json={"content": "   "}, headers=auth_token)
    assert blank.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert blank.json()["status"] == "skipped"

    detail = client.get(f"/api/v1/surveys/{survey.id}", headers=auth_token).json()
    assert len(detail["comments"]) == 2


def test_get_survey_hides_drafts(client, make_survey) -> None:
    draft = make_survey(is_published=False)
    assert client.get(f"/api/v1/surveys/{draft.id}").status_code == status.HTTP_404_NOT_FOUND


def test_published_group_survey_open_to_feed_viewers(
    client, make_group, make_survey, other_user, admin_user, headers_for
) -> None:
    group = make_group(members=[(other_user, GroupRole.MEMBER)])
    in_group = make_survey(group_id=group.id)

    assert [s["id"] for s in client.get("/api/v1/surveys/feed").json()] == [in_group.id]
    assert client.get(f"/api/v1/surveys/{in_group.id}").status_code == status.HTTP_200_OK
    outsider_vote = _vote(client, in_group, in_group.options[0], headers_for(admin_user))
    assert outsider_vote.status_code == status.HTTP_201_CREATED


def test_public_link_read_without_auth(client, make_group, make_survey) -> None:
    group = make_group()
    shared = make_survey(group_id=group.id, is_public_link=True)
    private = make_survey(group_id=group.id)
    unpublished = make_survey(group_id=group.id, is_public_link=True, is_published=False)

    response = client.get(f"/api/v1/surveys/{shared.id}/public")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["id"] == shared.id

    assert client.get(f"/api/v1/surveys/{private.id}/public").status_code == 404
    assert client.get(f"/api/v1/surveys/{unpublished.id}/public").status_code == 404
