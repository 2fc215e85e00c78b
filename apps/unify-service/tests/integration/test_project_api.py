import pytest

from unify.db.repositories import linked_users as linked_users_repo
from unify.db.repositories import users as users_repo
from unify.services import auth_service


@pytest.fixture
def headers(api_headers):
    return api_headers()


def test_project_routes_require_api_key(client):
    assert client.get("/linked-users").status_code == 401
    assert client.get("/connections", headers={"x-api-key": "garbage"}).status_code == 401


def test_linked_users(client, headers):
    r = client.post("/linked-users", json={"linked_user_origin_id": "acme-42", "alias": "Acme"}, headers=headers)
    assert r.status_code == 201, r.text
    assert r.json()["alias"] == "Acme"

    r = client.post("/linked-users", json={"linked_user_origin_id": "acme-42"}, headers=headers)
    assert r.status_code == 409

    r = client.get("/linked-users", headers=headers)
    assert [u["linked_user_origin_id"] for u in r.json()] == ["acme-42"]


def test_create_connection(client, headers, linked_user):
    r = client.post(
        "/connections",
        json={
            "linked_user_id": str(linked_user.id),
            "provider_slug": "Zendesk",
            "vertical": "Ticketing",
            "token_type": "api_key",
            "access_token": "zd-token",
            "account_url": "https://acme.zendesk.com/api/v2",
        },
        headers=headers,
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["provider_slug"] == "zendesk"
    assert body["vertical"] == "ticketing"
    assert body["status"] == "valid"
    assert body["connection_token"]
    # Credentials never leave the service
    assert "access_token" not in body

    r = client.get("/connections", headers=headers)
    assert [c["id"] for c in r.json()] == [body["id"]]


@pytest.mark.parametrize(
    "provider,vertical",
    [("zendesk", "crm"), ("box", "ticketing"), ("hubspot", "marketingautomation")],
)
def test_create_connection_rejects_unknown_combinations(client, headers, linked_user, provider, vertical):
    r = client.post(
        "/connections",
        json={
            "linked_user_id": str(linked_user.id),
            "provider_slug": provider,
            "vertical": vertical,
            "access_token": "t",
        },
        headers=headers,
    )
    assert r.status_code == 400


def test_connection_for_foreign_linked_user(client, db_session, headers):
    other = auth_service.register(db_session, email="other@example.com", password="password123")
    other_project = users_repo.list_projects_for_user(db_session, other.id)[0]
    foreign = linked_users_repo.create_linked_user(db_session, project_id=other_project.id, linked_user_origin_id="x")
    r = client.post(
        "/connections",
        json={"linked_user_id": str(foreign.id), "provider_slug": "zendesk", "vertical": "ticketing", "access_token": "t"},
        headers=headers,
    )
    assert r.status_code == 404


def test_field_mapping_flow(client, headers, linked_user):
    r = client.post(
        "/field-mappings/define",
        json={"object_type_owner": "Ticketing.Ticket", "name": "Customer Region", "description": "Sales region"},
        headers=headers,
    )
    assert r.status_code == 201, r.text
    attribute = r.json()
    assert attribute["slug"] == "customer_region"
    assert attribute["resource_owner_type"] == "ticketing.ticket"
    assert attribute["status"] == "defined"

    r = client.post(
        "/field-mappings/map",
        json={
            "attribute_id": attribute["id"],
            "source_custom_field_id": "900",
            "source_provider": "Zendesk",
            "linked_user_id": str(linked_user.id),
        },
        headers=headers,
    )
    assert r.status_code == 200, r.text
    mapped = r.json()
    assert mapped["status"] == "mapped"
    assert mapped["source"] == "zendesk"
    assert mapped["remote_id"] == "900"

    r = client.get("/field-mappings/attributes", headers=headers)
    assert [a["id"] for a in r.json()] == [attribute["id"]]


def test_field_mapping_validation(client, headers, linked_user):
    assert client.post(
        "/field-mappings/define", json={"object_type_owner": "crm.contact", "name": "x"}, headers=headers
    ).status_code == 400
    assert client.post(
        "/field-mappings/define", json={"object_type_owner": "ticket", "name": "x"}, headers=headers
    ).status_code == 422
    r = client.post(
        "/field-mappings/map",
        json={
            "attribute_id": "00000000-0000-0000-0000-000000000000",
            "source_custom_field_id": "1",
            "source_provider": "zendesk",
            "linked_user_id": str(linked_user.id),
        },
        headers=headers,
    )
    assert r.status_code == 404


def test_webhook_endpoints(client, headers):
    r = client.post(
        "/webhooks",
        json={"url": "https://hooks.example.com/in", "scope": ["ticketing.ticket.created", " "], "description": "CI"},
        headers=headers,
    )
    assert r.status_code == 201, r.text
    created = r.json()
    assert created["scope"] == ["ticketing.ticket.created"]
    assert created["active"] is True
    assert len(created["secret"]) == 64

    r = client.get("/webhooks", headers=headers)
    listed = r.json()
    assert [w["id"] for w in listed] == [created["id"]]
    assert "secret" not in listed[0]

    r = client.put(f"/webhooks/{created['id']}", json={"active": False}, headers=headers)
    assert r.status_code == 200
    assert r.json()["active"] is False

    assert client.delete(f"/webhooks/{created['id']}", headers=headers).status_code == 204
    assert client.delete(f"/webhooks/{created['id']}", headers=headers).status_code == 404


def test_webhook_validation(client, headers):
    assert client.post("/webhooks", json={"url": "ftp://x", "scope": ["a.b.c"]}, headers=headers).status_code == 422
    assert client.post("/webhooks", json={"url": "https://x", "scope": []}, headers=headers).status_code == 422


def test_health(client):
    assert client.get("/health").json() == {"status": "ok", "service": "unify-service"}
