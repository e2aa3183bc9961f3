from __future__ import annotations

from fastapi.testclient import TestClient

from imageai.config import AuthSettings
from tests.helpers.app_factory import USER_HEADERS, build_app

DEV_AUTH = AuthSettings(
    dev_auth_enabled=True,
    dev_admin_email="admin@example.com",
    dev_admin_password="secret",
    dev_jwt_signing_key="test-key",
)


def build_client(tmp_path, auth: AuthSettings = DEV_AUTH) -> TestClient:
    return TestClient(build_app(tmp_path, auth=auth))


def test_login_returns_token_on_success(tmp_path) -> None:
    client = build_client(tmp_path)

    response = client.post(
        "/v1/dev/login", json={"email": "admin@example.com", "password": "secret"}
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["email"] == "admin@example.com"
    assert data["role"] == "admin"
    assert data["expires_in"] == 12 * 3600
    assert data["token"]


def test_login_returns_401_on_invalid_credentials(tmp_path) -> None:
    client = build_client(tmp_path)

    response = client.post(
        "/v1/dev/login", json={"email": "admin@example.com", "password": "wrong"}
    )

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "unauthorized"


def test_login_returns_429_when_throttled(tmp_path) -> None:
    client = build_client(tmp_path)
    body = {"email": "admin@example.com", "password": "wrong"}
    for _ in range(10):
        client.post("/v1/dev/login", json=body)

    response = client.post("/v1/dev/login", json=body)

    assert response.status_code == 429
    assert response.json()["error"]["code"] == "too_many_requests"


def test_login_without_credentials_configured_is_forbidden(tmp_path) -> None:
    client = build_client(tmp_path, AuthSettings(dev_auth_enabled=True))

    response = client.post("/v1/dev/login", json={"email": "a@b.c", "password": "x"})

    assert response.status_code == 403


def test_dev_routes_absent_when_disabled(tmp_path) -> None:
    client = build_client(tmp_path, AuthSettings())

    response = client.post("/v1/dev/login", json={"email": "a@b.c", "password": "x"})

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "not_found"


def test_whoami_echoes_dev_token(tmp_path) -> None:
    client = build_client(tmp_path)
    token = client.post(
        "/v1/dev/login", json={"email": "admin@example.com", "password": "secret"}
    ).json()["data"]["token"]

    response = client.get("/v1/dev/whoami", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json()["data"] == {"email": "admin@example.com", "role": "admin"}


def test_whoami_accepts_firebase_users(tmp_path) -> None:
    client = build_client(tmp_path)

    response = client.get("/v1/dev/whoami", headers=USER_HEADERS)

    assert response.json()["data"] == {"email": "user@example.com", "role": "user"}


def test_whoami_requires_token(tmp_path) -> None:
    client = build_client(tmp_path)

    response = client.get("/v1/dev/whoami")

    assert response.status_code == 401
