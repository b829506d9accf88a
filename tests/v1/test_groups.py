# mypy: ignore-errors
"""Tests for group endpoints."""

from fastapi import status

from pulsevote.models import GroupRole, GroupType


def test_create_and_list_groups(client, auth_token, test_user) -> None:
    created = client.post(
        "/api/v1/groups/",
        json={"name": "Family", "description": "Us", "type": "family"},
        headers=auth_token,
    )
    assert created.status_code == status.HTTP_201_CREATED
    assert created.json()["owner_id"] == test_user.id

    listed = client.get("/api/v1/groups/", headers=auth_token).json()
    assert len(listed) == 1
    assert listed[0]["survey_count"] == 0
    assert [(m["user_id"], m["role"]) for m in listed[0]["members"]] == [(test_user.id, "owner")]


def test_groups_require_auth(client) -> None:
    assert client.get("/api/v1/groups/").status_code == status.HTTP_401_UNAUTHORIZED


def test_blank_group_name(client, auth_token) -> None:
    response = client.post("/api/v1/groups/", json={"name": "  "}, headers=auth_token)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_invite_flow(client, auth_token, make_group, other_user) -> None:
    group = make_group()
    url = f"/api/v1/groups/{group.id}/members"

    added = client.post(url, json={"email": "OTHER.user@example.com"}, headers=auth_token)
    assert added.status_code == status.HTTP_201_CREATED
    assert added.json()["profile"]["email"] == other_user.email

    again = client.post(url, json={"email": other_user.email}, headers=auth_token)
    assert again.status_code == status.HTTP_409_CONFLICT
    assert again.json()["detail"] == "User is already a member"

    unknown = client.post(url, json={"email": "ghost@example.com"}, headers=auth_token)
    assert unknown.status_code == status.HTTP_404_NOT_FOUND
    assert "must have an account" in unknown.json()["detail"]


def test_member_cannot_invite(client, other_auth_token, make_group, other_user, admin_user) -> None:
    group = make_group(members=[(other_user, GroupRole.MEMBER)])

    response = client.post(
        f"/api/v1/groups/{group.id}/members",
        json={"email": admin_user.email},
        headers=other_auth_token,
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_remove_member_and_owner_protection(client, auth_token, other_auth_token, make_group, test_user, other_user) -> None:
    group = make_group(members=[(other_user, GroupRole.ADMIN)])

    owner_removal = client.delete(
        f"/api/v1/groups/{group.id}/members/{test_user.id}", headers=other_auth_token
    )
    assert owner_removal.status_code == status.HTTP_403_FORBIDDEN

    removed = client.delete(
        f"/api/v1/groups/{group.id}/members/{other_user.id}", headers=auth_token
    )
    assert removed.status_code == status.HTTP_204_NO_CONTENT
    assert client.get("/api/v1/groups/", headers=other_auth_token).json() == []


def test_delete_group(client, auth_token, other_auth_token, make_group, other_user) -> None:
    group = make_group(members=[(other_user, GroupRole.ADMIN)])

    forbidden = client.delete(f"/api/v1/groups/{group.id}", headers=other_auth_token)
    assert forbidden.status_code == status.HTTP_403_FORBIDDEN

    deleted = client.delete(f"/api/v1/groups/{group.id}", headers=auth_token)
    assert deleted.status_code == status.HTTP_204_NO_CONTENT
    assert client.get("/api/v1/groups/", headers=auth_token).json() == []


def test_group_surveys(client, auth_token, other_auth_token, make_group, other_user) -> None:
    group = make_group(members=[(other_user, GroupRole.MEMBER)])
    url = f"/api/v1/groups/{group.id}/surveys"

    created = client.post(
        url,
        json={"title": "Dinner?", "options": ["Pasta", "Tacos", ""]},
        headers=other_auth_token,
    )
    assert created.status_code == status.HTTP_201_CREATED
    survey = created.json()
    assert survey["group_id"] == group.id
    assert [o["option_text"] for o in survey["options"]] == ["Pasta", "Tacos"]

    option_id = survey["options"][0]["id"]
    client.post(
        f"/api/v1/surveys/{survey['id']}/votes", json={"option_id": option_id}, headers=auth_token
    )

    listed = client.get(url, headers=auth_token).json()
    assert [s["id"] for s in listed] == [survey["id"]]
    assert listed[0]["user_votes"] == [option_id]
    assert [s["id"] for s in client.get("/api/v1/surveys/feed").json()] == [survey["id"]]


def test_group_survey_validation(client, auth_token, make_group) -> None:
    group = make_group()

    response = client.post(
        f"/api/v1/groups/{group.id}/surveys",
        json={"title": "Solo?", "options": ["one"]},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["detail"] == "Please provide at least 2 options"


def test_group_survey_with_unknown_tag(client, auth_token, make_group) -> None:
    group = make_group()

    response = client.post(
        f"/api/v1/groups/{group.id}/surveys",
        json={"title": "Tagged?", "options": ["a", "b"], "preference_id": "does-not-exist"},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["detail"] == "Unknown topic tag"


def test_outsider_cannot_list_group_surveys(client, other_auth_token, make_group) -> None:
    group = make_group()
    response = client.get(f"/api/v1/groups/{group.id}/surveys", headers=other_auth_token)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_share_link(client, auth_token, make_group, make_survey) -> None:
    company = make_group(name="Acme", group_type=GroupType.COMPANY)
    shared = make_survey(group_id=company.id, is_public_link=True)
    family = make_group(name="Home")
    private = make_survey(group_id=family.id, is_public_link=True)

    response = client.get(
        f"/api/v1/groups/{company.id}/surveys/{shared.id}/share-link", headers=auth_token
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "survey_id": shared.id,
        "url": f"https://polls.example.com/#/survey/{shared.id}",
    }

    refused = client.get(
        f"/api/v1/groups/{family.id}/surveys/{private.id}/share-link", headers=auth_token
    )
    assert refused.status_code == status.HTTP_403_FORBIDDEN
