import uuid
from unittest.mock import patch

import pytest

from unify.db import models
from unify.db.repositories import unified as unified_repo
from unify.services import webhook_service

ZENDESK_URL = "https://acme.zendesk.com/api/v2"


@pytest.fixture
def zendesk(make_connection):
    return make_connection("zendesk", "ticketing", account_url=ZENDESK_URL)


@pytest.fixture
def zendesk_headers(api_headers, zendesk):
    return api_headers(zendesk)


def _zendesk_ticket(remote_id, **extra):
    return {
        "id": remote_id,
        "subject": f"Ticket {remote_id}",
        "description": "body",
        "status": "open",
        "priority": "high",
        "tags": ["vip"],
        "created_at": "2024-01-01T00:00:00Z",
        "updated_at": "2024-01-01T00:00:00Z",
        **extra,
    }


def test_unified_routes_need_connection_token(client, api_headers, zendesk):
    r = client.get("/ticketing/tickets", headers=api_headers())
    assert r.status_code == 401

    headers = {**api_headers(), "x-connection-token": "unknown"}
    r = client.get("/ticketing/tickets", headers=headers)
    assert r.status_code == 404
    assert r.json() == {"detail": "Connection not found"}


def test_create_ticket_through_zendesk(client, db_session, project, zendesk, zendesk_headers, fake_response):
    endpoint = webhook_service.create_endpoint(
        db_session, project_id=project.id, url="https://hooks.example.com/in", scope=["ticketing.ticket.created"]
    )
    provider_reply = fake_response(201, {"ticket": _zendesk_ticket(901)})

    with patch("unify.providers.base.requests.request", return_value=provider_reply) as provider_call, \
            patch("unify.services.webhook_service.requests.post", return_value=fake_response(200)) as hook_call:
        r = client.post(
            "/ticketing/tickets",
            json={"name": "Ticket 901", "description": "body", "priority": "HIGH", "tags": ["vip"]},
            headers=zendesk_headers,
            params={"remote_data": "true"},
        )

    assert r.status_code == 201, r.text
    body = r.json()
    assert body["remote_id"] == "901"
    assert body["name"] == "Ticket 901"
    assert body["status"] == "OPEN"
    assert body["priority"] == "HIGH"
    assert body["tags"] == ["vip"]
    assert body["connection_id"] == str(zendesk.id)
    assert body["remote_data"]["subject"] == "Ticket 901"

    method, url = provider_call.call_args.args
    kwargs = provider_call.call_args.kwargs
    assert (method, url) == ("POST", f"{ZENDESK_URL}/tickets.json")
    assert kwargs["headers"]["Authorization"] == "Bearer zendesk-secret-token"
    assert kwargs["json"]["ticket"]["subject"] == "Ticket 901"
    assert kwargs["json"]["ticket"]["priority"] == "high"

    # The subscribed endpoint received the created object
    assert hook_call.call_args.args[0] == endpoint.url
    event = db_session.query(models.Event).filter(models.Event.type == "ticketing.ticket.created").one()
    assert event.status == "success"
    assert db_session.query(models.TcgTag).filter(models.TcgTag.name == "vip").count() == 1


def test_provider_errors_surface_as_bad_gateway(client, zendesk_headers, fake_response):
    with patch("unify.providers.base.requests.request", return_value=fake_response(422, text='{"error":"RecordInvalid"}')):
        r = client.post("/ticketing/tickets", json={"name": "bad"}, headers=zendesk_headers)
    assert r.status_code == 502
    assert "zendesk" in r.json()["detail"]


def test_list_and_get_tickets(client, db_session, zendesk, zendesk_headers):
    rows = [
        unified_repo.upsert(db_session, models.TcgTicket, remote_id=str(i), connection_id=zendesk.id, data={"name": f"t{i}"})
        for i in range(3)
    ]
    db_session.commit()

    r = client.get("/ticketing/tickets", params={"limit": 2}, headers=zendesk_headers)
    assert r.status_code == 200
    page = r.json()
    assert len(page["data"]) == 2
    assert page["prev_cursor"] is None
    assert page["next_cursor"]

    r = client.get("/ticketing/tickets", params={"limit": 2, "cursor": page["next_cursor"]}, headers=zendesk_headers)
    second = r.json()
    assert len(second["data"]) == 1
    assert second["prev_cursor"] == page["next_cursor"]
    assert second["next_cursor"] is None
    seen = {t["id"] for t in page["data"]} | {t["id"] for t in second["data"]}
    assert seen == {str(row.id) for row in rows}

    r = client.get(f"/ticketing/tickets/{rows[0].id}", headers=zendesk_headers)
    assert r.status_code == 200
    assert r.json()["name"] == "t0"
    assert r.json()["remote_data"] is None

    pulls = db_session.query(models.Event).filter(models.Event.type == "ticketing.ticket.pull").count()
    assert pulls == 3


def test_get_unknown_ticket(client, zendesk_headers):
    r = client.get(f"/ticketing/tickets/{uuid.uuid4()}", headers=zendesk_headers)
    assert r.status_code == 404


def test_tickets_of_other_connections_are_hidden(client, db_session, make_connection, zendesk_headers):
    gitlab = make_connection("gitlab", "ticketing")
    row = unified_repo.upsert(db_session, models.TcgTicket, remote_id="1", connection_id=gitlab.id, data={"name": "x"})
    db_session.commit()
    assert client.get(f"/ticketing/tickets/{row.id}", headers=zendesk_headers).status_code == 404
    assert client.get("/ticketing/tickets", headers=zendesk_headers).json()["data"] == []


@pytest.mark.parametrize("cursor", ["%%%", None])
def test_invalid_cursor(client, zendesk_headers, cursor):
    cursor = cursor or unified_repo.encode_cursor(uuid.uuid4())
    r = client.get("/ticketing/tickets", params={"cursor": cursor}, headers=zendesk_headers)
    assert r.status_code == 400


@pytest.mark.parametrize("limit", [0, 1001])
def test_limit_bounds(client, zendesk_headers, limit):
    assert client.get("/ticketing/tickets", params={"limit": limit}, headers=zendesk_headers).status_code == 422


def test_comments_filtered_by_ticket(client, db_session, zendesk, zendesk_headers):
    ticket = unified_repo.upsert(db_session, models.TcgTicket, remote_id="1", connection_id=zendesk.id, data={})
    other = unified_repo.upsert(db_session, models.TcgTicket, remote_id="2", connection_id=zendesk.id, data={})
    for i, owner in enumerate([ticket, ticket, other]):
        unified_repo.upsert(
            db_session, models.TcgComment, remote_id=f"c{i}", connection_id=zendesk.id,
            data={"body": f"comment {i}", "ticket_id": owner.id},
        )
    db_session.commit()

    r = client.get("/ticketing/comments", params={"ticket_id": str(ticket.id)}, headers=zendesk_headers)
    assert r.status_code == 200
    assert sorted(c["body"] for c in r.json()["data"]) == ["comment 0", "comment 1"]
    assert len(client.get("/ticketing/comments", headers=zendesk_headers).json()["data"]) == 3


def test_create_folder_through_box(client, make_connection, api_headers, fake_response):
    box = make_connection("box", "filestorage")
    reply = fake_response(201, {"id": "77", "type": "folder", "name": "Contracts", "parent": {"id": "0"}})
    with patch("unify.providers.base.requests.request", return_value=reply) as provider_call:
        r = client.post("/filestorage/folders", json={"name": "Contracts"}, headers=api_headers(box))
    assert r.status_code == 201, r.text
    assert r.json()["remote_id"] == "77"
    assert r.json()["parent_folder_id"] is None
    assert provider_call.call_args.args[1] == "https://api.box.com/2.0/folders"


def test_marketing_actions_have_no_provider(client, make_connection, api_headers):
    conn = make_connection("hubspot", "marketingautomation")
    headers = api_headers(conn)
    r = client.get("/marketingautomation/actions", headers=headers)
    assert r.status_code == 200
    assert r.json() == {"prev_cursor": None, "next_cursor": None, "data": []}

    r = client.post("/marketingautomation/actions", json={"name": "Welcome"}, headers=headers)
    assert r.status_code == 422


def test_resync_pulls_for_project_owner(client, zendesk, api_headers, fake_response):
    def _fake_request(method, url, **kwargs):
        if url.endswith("/tickets.json"):
            return fake_response(200, {"tickets": [_zendesk_ticket(1)], "meta": {"has_more": False}})
        if "/comments.json" in url:
            return fake_response(200, {"comments": [], "meta": {"has_more": False}})
        if url.endswith("/users.json"):
            return fake_response(200, {"users": [], "meta": {"has_more": False}})
        return fake_response(200, {})

    with patch("unify.providers.base.requests.request", side_effect=_fake_request):
        r = client.post("/sync/resync", headers=api_headers())

    assert r.status_code == 200
    results = r.json()["results"]
    assert results["ticketing.ticket"]["failed"] == 0
    assert results["ticketing.ticket"]["succeeded"] >= 1

    tickets = client.get("/ticketing/tickets", headers=api_headers(zendesk)).json()["data"]
    assert [t["remote_id"] for t in tickets] == ["1"]


def test_comment_needs_a_synced_ticket(client, zendesk_headers):
    with patch("unify.providers.base.requests.request") as provider_call:
        r = client.post("/ticketing/comments", json={"body": "hi"}, headers=zendesk_headers)
    assert r.status_code == 400
    provider_call.assert_not_called()
