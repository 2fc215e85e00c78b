import pytest

from unify.db.repositories import users as users_repo
from unify.services import auth_service


def _register_and_login(client, email="dev@example.com", password="password123"):
    r = client.post("/auth/register", json={"email": email, "password": password, "first_name": "Dev"})
    assert r.status_code == 201, r.text
    r = client.post("/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    body = r.json()
    payload = auth_service.decode_access_token(body["access_token"])
    return body, {"Authorization": f"Bearer {body['access_token']}"}, payload["id_project"]


def test_register_login_and_list_users(client):
    body, headers, _project_id = _register_and_login(client, email="Dev@Example.com")
    assert body["token_type"] == "bearer"
    assert body["user"]["email"] == "dev@example.com"
    assert "password_hash" not in body["user"]

    r = client.get("/auth/users", headers=headers)
    assert r.status_code == 200
    assert [u["email"] for u in r.json()] == ["dev@example.com"]


def test_register_validation_and_conflict(client):
    assert client.post("/auth/register", json={"email": "not-an-email", "password": "password123"}).status_code == 422
    assert client.post("/auth/register", json={"email": "a@example.com", "password": "short"}).status_code == 422
    assert client.post("/auth/register", json={"email": "a@example.com", "password": "password123"}).status_code == 201
    r = client.post("/auth/register", json={"email": "a@example.com", "password": "password123"})
    assert r.status_code == 409
    assert r.json() == {"detail": "Email already exists"}


def test_login_wrong_password(client):
    _register_and_login(client)
    r = client.post("/auth/login", json={"email": "dev@example.com", "password": "nope-nope"})
    assert r.status_code == 401


@pytest.mark.parametrize("headers", [{}, {"Authorization": "Bearer garbage"}, {"Authorization": "Token abc"}])
def test_dashboard_routes_require_user_token(client, headers):
    assert client.get("/auth/users", headers=headers).status_code == 401


def test_refresh_token(client):
    _body, headers, project_id = _register_and_login(client)
    r = client.post("/auth/refresh-token", json={"project_id": project_id}, headers=headers)
    assert r.status_code == 200
    assert auth_service.decode_access_token(r.json()["access_token"])["id_project"] == project_id


def test_api_key_lifecycle(client):
    _body, headers, project_id = _register_and_login(client)

    r = client.post("/auth/api-keys", json={"project_id": project_id, "name": "ci"}, headers=headers)
    assert r.status_code == 201, r.text
    created = r.json()
    raw_key = created["api_key"]
    assert created["name"] == "ci"

    r = client.get("/auth/api-keys", params={"project_id": project_id}, headers=headers)
    assert r.status_code == 200
    listed = r.json()
    assert [k["id"] for k in listed] == [created["id"]]
    assert "api_key" not in listed[0]

    # The key authenticates project routes
    assert client.get("/linked-users", headers={"x-api-key": raw_key}).status_code == 200
    assert client.get("/linked-users", headers={"Authorization": f"Bearer {raw_key}"}).status_code == 200

    assert client.delete(f"/auth/api-keys/{created['id']}", headers=headers).status_code == 204
    assert client.get("/linked-users", headers={"x-api-key": raw_key}).status_code == 401
    assert client.delete(f"/auth/api-keys/{created['id']}", headers=headers).status_code == 404


def test_api_keys_of_other_projects_are_hidden(client):
    _b, owner_headers, owner_project = _register_and_login(client, email="owner2@example.com")
    _b, other_headers, _other_project = _register_and_login(client, email="other@example.com")

    r = client.post("/auth/api-keys", json={"project_id": owner_project}, headers=other_headers)
    assert r.status_code == 404
    r = client.get("/auth/api-keys", params={"project_id": owner_project}, headers=other_headers)
    assert r.status_code == 404

    key_id = client.post("/auth/api-keys", json={"project_id": owner_project}, headers=owner_headers).json()["id"]
    assert client.delete(f"/auth/api-keys/{key_id}", headers=other_headers).status_code == 404


def test_password_reset_endpoints(client, db_session, monkeypatch):
    _register_and_login(client)
    sent = []
    monkeypatch.setattr(auth_service, "_send_reset_email", lambda email, first_name, link: sent.append(link))

    r = client.post("/auth/password-reset-request", json={"email": "dev@example.com"})
    assert r.status_code == 200
    assert r.json() == {"message": "Password reset email sent"}
    assert client.post("/auth/password-reset-request", json={"email": "ghost@example.com"}).status_code == 404

    token = users_repo.get_user_by_email(db_session, "dev@example.com").reset_token

    r = client.post(
        "/auth/reset-password",
        json={"email": "dev@example.com", "reset_token": "bad", "new_password": "new-password"},
    )
    assert r.status_code == 400

    r = client.post(
        "/auth/reset-password",
        json={"email": "dev@example.com", "reset_token": token, "new_password": "new-password"},
    )
    assert r.status_code == 200
    assert r.json() == {"message": "Password reset successfully"}
    assert client.post("/auth/login", json={"email": "dev@example.com", "password": "new-password"}).status_code == 200
