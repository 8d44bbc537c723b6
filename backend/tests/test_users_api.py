from __future__ import annotations

from fastapi.testclient import TestClient

from accounts.main import create_app
from conftest import ADMIN_USERNAME, login


def _create_alice(client: TestClient, headers: dict[str, str]) -> int:
    response = client.post(
        "/users/",
        json={"username": "alice", "password": "secret1", "email": "alice@example.com"},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    user_id = response.json()["id"]
    assert response.headers["location"] == f"/users/{user_id}"
    return user_id


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_requests_without_token_are_rejected(client: TestClient) -> None:
    response = client.get("/users/")

    assert response.status_code == 401


def test_invalid_token_is_rejected(client: TestClient) -> None:
    response = client.get("/users/", headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == 401


def test_authentication_failure_does_not_reveal_username(client: TestClient) -> None:
    unknown = client.post("/users/authenticate", json={"username": "ghost", "password": "secret1"})
    wrong = client.post("/users/authenticate", json={"username": ADMIN_USERNAME, "password": "nope"})

    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json() == wrong.json() == {"detail": "Invalid credentials"}


def test_create_change_password_and_authenticate(client: TestClient, admin_headers: dict[str, str]) -> None:
    user_id = _create_alice(client, admin_headers)

    stored = client.get(f"/users/{user_id}", headers=admin_headers).json()
    assert stored["email"] == "alice@example.com"
    assert "password_hash" not in stored
    assert "password" not in stored

    changed = client.patch(
        f"/users/{user_id}/changepassword",
        json={"oldpassword": "secret1", "password": "secret2", "password_confirm": "secret2"},
        headers=admin_headers,
    )
    assert changed.status_code == 200

    old = client.post("/users/authenticate", json={"username": "alice", "password": "secret1"})
    assert old.status_code == 401

    alice_headers = login(client, "alice", "secret2")
    current = client.get("/users/current", headers=alice_headers)
    assert current.status_code == 200
    assert current.json()["username"] == "alice"


def test_token_carries_claims(client: TestClient, admin_headers: dict[str, str]) -> None:
    _create_alice(client, admin_headers)
    token = login(client, "alice", "secret1")["Authorization"].split(" ", 1)[1]

    signer = client.app.state.token_signer
    assert signer.loads(token) == {"sub": "alice", "kind": "user", "applications": [], "roles": []}


def test_change_roles_rejects_unknown_role(client: TestClient, admin_headers: dict[str, str]) -> None:
    user_id = _create_alice(client, admin_headers)

    response = client.post(f"/users/{user_id}/roles", json={"roles": ["admin", "bogus-role"]}, headers=admin_headers)

    assert response.status_code == 400
    assert "bogus-role" in response.json()["detail"]
    assert client.get(f"/users/{user_id}/roles", headers=admin_headers).json() == []


def test_change_roles_and_applications_require_admin(client: TestClient, admin_headers: dict[str, str]) -> None:
    user_id = _create_alice(client, admin_headers)
    alice_headers = login(client, "alice", "secret1")

    roles = client.post(f"/users/{user_id}/roles", json={"roles": ["admin"]}, headers=alice_headers)
    apps = client.post(f"/users/{user_id}/apps", json={"applications": ["shipping"]}, headers=alice_headers)

    assert roles.status_code == 403
    assert apps.status_code == 403


def test_update_requires_admin(client: TestClient, admin_headers: dict[str, str]) -> None:
    user_id = _create_alice(client, admin_headers)
    alice_headers = login(client, "alice", "secret1")

    response = client.put(f"/users/{user_id}", json={"roles": ["admin"]}, headers=alice_headers)

    assert response.status_code == 403
    assert client.get(f"/users/{user_id}/roles", headers=admin_headers).json() == []


def test_admin_changes_roles_and_applications(client: TestClient, admin_headers: dict[str, str]) -> None:
    user_id = _create_alice(client, admin_headers)

    roles = client.post(f"/users/{user_id}/roles", json={"roles": ["user"]}, headers=admin_headers)
    apps = client.post(f"/users/{user_id}/apps", json={"applications": ["shipping", "billing"]}, headers=admin_headers)

    assert roles.status_code == 200
    assert roles.json()["roles"] == ["user"]
    assert apps.status_code == 200
    assert client.get(f"/users/{user_id}/apps", headers=admin_headers).json() == ["shipping", "billing"]


def test_change_email_address(client: TestClient, admin_headers: dict[str, str]) -> None:
    user_id = _create_alice(client, admin_headers)

    bad = client.patch(f"/users/{user_id}/changeemailaddress", json={"email_address": "nope"}, headers=admin_headers)
    good = client.patch(
        f"/users/{user_id}/changeemailaddress", json={"email_address": "alice@example.org"}, headers=admin_headers
    )

    assert bad.status_code == 400
    assert good.status_code == 200
    assert good.json()["email"] == "alice@example.org"


def test_update_ignores_fields_outside_whitelist(client: TestClient, admin_headers: dict[str, str]) -> None:
    user_id = _create_alice(client, admin_headers)

    response = client.put(
        f"/users/{user_id}",
        json={"id": 999, "username": "mallory", "password": "x", "email": "a@example.net", "roles": ["user"]},
        headers=admin_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == user_id
    assert body["username"] == "alice"
    assert body["email"] == "a@example.net"
    assert body["roles"] == ["user"]
    login(client, "alice", "secret1")


def test_delete_protected_and_regular_users(client: TestClient, admin_headers: dict[str, str]) -> None:
    admin = client.get("/users/getbyusername", params={"username": ADMIN_USERNAME}, headers=admin_headers).json()
    user_id = _create_alice(client, admin_headers)

    blocked = client.delete(f"/users/{admin['id']}", headers=admin_headers)
    assert blocked.status_code == 403
    assert client.get(f"/users/{admin['id']}", headers=admin_headers).status_code == 200

    removed = client.delete(f"/users/{user_id}", headers=admin_headers)
    assert removed.status_code == 200
    assert removed.json()["username"] == "alice"
    assert client.get(f"/users/{user_id}", headers=admin_headers).status_code == 404


def test_reset_password_requires_admin(client: TestClient, admin_headers: dict[str, str]) -> None:
    _create_alice(client, admin_headers)
    alice_headers = login(client, "alice", "secret1")
    body = {"username": "alice", "password": "reset-1", "password_confirm": "reset-1"}

    assert client.patch("/users/resetpassword", json=body, headers=alice_headers).status_code == 403
    assert client.patch("/users/resetpassword", json=body, headers=admin_headers).status_code == 200
    login(client, "alice", "reset-1")


def test_find_users(client: TestClient, admin_headers: dict[str, str]) -> None:
    _create_alice(client, admin_headers)

    page = client.get("/users/", headers=admin_headers).json()
    assert page["total_found"] == 2
    assert [item["username"] for item in page["items"]] == ["alice", ADMIN_USERNAME]

    admins = client.get("/users/", params={"role": "admin"}, headers=admin_headers).json()
    assert [item["username"] for item in admins["items"]] == [ADMIN_USERNAME]

    assert client.get("/users/", params={"sort": "nope"}, headers=admin_headers).status_code == 400


def test_duplicate_username_conflicts(client: TestClient, admin_headers: dict[str, str]) -> None:
    _create_alice(client, admin_headers)

    response = client.post("/users/", json={"username": "alice", "password": "secret1"}, headers=admin_headers)

    assert response.status_code == 409


def test_allow_lists_are_published(client: TestClient, admin_headers: dict[str, str]) -> None:
    settings = client.app.state.settings

    assert client.get("/users/getroles", headers=admin_headers).json() == settings.known_roles
    assert client.get("/users/getapplications", headers=admin_headers).json() == settings.known_applications


def test_missing_user_is_not_found(client: TestClient, admin_headers: dict[str, str]) -> None:
    assert client.get("/users/12345", headers=admin_headers).status_code == 404
    assert client.get("/users/getbyusername", params={"username": "ghost"}, headers=admin_headers).status_code == 404


def test_open_mode_allows_anonymous_reads_but_guards_admin_routes(settings) -> None:
    open_settings = settings.model_copy(update={"must_authenticate_requests": False})
    with TestClient(create_app(settings=open_settings)) as client:
        created = client.post("/users/", json={"username": "carol", "password": "secret1"})
        assert created.status_code == 201

        assert client.get("/users/").json()["total_found"] == 1
        assert client.post(f"/users/{created.json()['id']}/roles", json={"roles": ["user"]}).status_code == 401
        assert client.get("/users/current").status_code == 404
