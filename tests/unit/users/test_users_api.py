from __future__ import annotations

from imageai.auth.auth_service import Principal
from tests.helpers.app_factory import USER_HEADERS, StubFirebaseVerifier

UNVERIFIED = Principal(uid="user-2", email="Raw@Example.com", email_verified=False)


def test_register_creates_profile_from_token_email(app, client) -> None:
    response = client.post(
        "/v1/users/register",
        json={"name": "  Ada  ", "email": "other@example.com", "avatar_url": " "},
        headers=USER_HEADERS,
    )

    assert response.status_code == 200
    assert response.json()["data"] == {
        "user_id": "user@example.com",
        "message": "User registered/updated successfully.",
    }
    profile = app.state.user_repo.get("user@example.com")
    assert profile.name == "Ada"
    assert profile.avatar_url is None


def test_register_twice_updates_profile(app, client) -> None:
    client.post("/v1/users/register", json={"name": "Ada"}, headers=USER_HEADERS)

    client.post(
        "/v1/users/register",
        json={"name": "Ada L.", "avatar_url": "https://cdn.example.com/a.png"},
        headers=USER_HEADERS,
    )

    profile = app.state.user_repo.get("user@example.com")
    assert profile.name == "Ada L."
    assert profile.avatar_url == "https://cdn.example.com/a.png"


def test_register_prefers_body_email_when_token_email_unverified(app, client) -> None:
    app.state.authenticator.firebase = StubFirebaseVerifier({"raw-token": UNVERIFIED})

    response = client.post(
        "/v1/users/register",
        json={"name": "Raw", "email": "Body@Example.com"},
        headers={"Authorization": "Bearer raw-token"},
    )

    assert response.json()["data"]["user_id"] == "body@example.com"


def test_register_requires_name(client) -> None:
    response = client.post("/v1/users/register", json={"name": " "}, headers=USER_HEADERS)

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "invalid_request"
    assert error["details"]["fields"] == ["name"]


def test_register_requires_email(app, client) -> None:
    app.state.authenticator.firebase = StubFirebaseVerifier(
        {"anon-token": Principal(uid="anon")}
    )

    response = client.post(
        "/v1/users/register", json={"name": "Anon"}, headers={"Authorization": "Bearer anon-token"}
    )

    assert response.status_code == 400
    assert response.json()["error"]["details"]["fields"] == ["email"]


def test_register_requires_token(client) -> None:
    response = client.post("/v1/users/register", json={"name": "Ada"})

    assert response.status_code == 401
