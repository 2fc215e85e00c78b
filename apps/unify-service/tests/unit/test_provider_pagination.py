from unittest.mock import patch

import pytest

from unify.db import models
from unify.unification.registry import sync_registry
from unify.verticals.filestorage.box import BoxClient, BoxFolderService
from unify.verticals.ticketing.gitlab import GitlabClient
from unify.verticals.ticketing.zendesk import ZendeskClient

ZENDESK_URL = "https://acme.zendesk.com/api/v2"
GITLAB_URL = "https://gitlab.com/api/v4"


@pytest.fixture
def gitlab(make_connection):
    return make_connection("gitlab", "ticketing")


@pytest.fixture
def zendesk(make_connection):
    return make_connection("zendesk", "ticketing", account_url=ZENDESK_URL)


@pytest.fixture
def box(make_connection):
    return make_connection("box", "filestorage")


def _urls(mock_request):
    return [c.args[1] for c in mock_request.call_args_list]


def test_gitlab_follows_link_header(gitlab, fake_response):
    page_two = f"{GITLAB_URL}/issues?page=2&per_page=100&scope=all"
    pages = [
        fake_response(200, [{"id": 1}, {"id": 2}], headers={
            "Link": f'<{GITLAB_URL}/issues?page=1>; rel="first", <{page_two}>; rel="next"',
        }),
        fake_response(200, [{"id": 3}], headers={"Link": f'<{GITLAB_URL}/issues?page=1>; rel="first"'}),
    ]
    with patch("unify.providers.base.requests.request", side_effect=pages) as request:
        items = GitlabClient(gitlab).list_all("/issues", scope="all")

    assert [i["id"] for i in items] == [1, 2, 3]
    assert _urls(request) == [f"{GITLAB_URL}/issues", page_two]
    first, second = request.call_args_list
    assert first.kwargs["params"] == {"per_page": 100, "scope": "all"}
    # The next link already carries the query string
    assert second.kwargs["params"] is None


def test_zendesk_cursor_pagination_stops_when_no_more(zendesk, fake_response):
    next_url = f"{ZENDESK_URL}/tickets.json?page[after]=abc"
    pages = [
        fake_response(200, {"tickets": [{"id": 1}], "meta": {"has_more": True}, "links": {"next": next_url}}),
        fake_response(200, {"tickets": [{"id": 2}], "meta": {"has_more": False}, "links": {"next": f"{next_url}-stale"}}),
    ]
    with patch("unify.providers.base.requests.request", side_effect=pages) as request:
        tickets = list(ZendeskClient(zendesk).iter_collection("/tickets.json", "tickets"))

    assert [t["id"] for t in tickets] == [1, 2]
    assert _urls(request) == [f"{ZENDESK_URL}/tickets.json", next_url]
    assert request.call_args_list[0].kwargs["params"] == {"page[size]": 100}


def test_zendesk_legacy_next_page(zendesk, fake_response):
    page_two = f"{ZENDESK_URL}/users.json?page=2"
    pages = [
        fake_response(200, {"users": [{"id": 1}], "next_page": page_two}),
        fake_response(200, {"users": [{"id": 2}], "next_page": None}),
    ]
    with patch("unify.providers.base.requests.request", side_effect=pages) as request:
        users = list(ZendeskClient(zendesk).iter_collection("/users.json", "users"))

    assert [u["id"] for u in users] == [1, 2]
    assert request.call_count == 2


def test_box_offset_pagination_uses_total_count(box, fake_response):
    pages = [
        fake_response(200, {"entries": [{"id": "1"}, {"id": "2"}], "total_count": 3}),
        fake_response(200, {"entries": [{"id": "3"}], "total_count": 3}),
    ]
    with patch("unify.providers.base.requests.request", side_effect=pages) as request:
        entries = list(BoxClient(box).iter_offset("/groups"))

    assert [e["id"] for e in entries] == ["1", "2", "3"]
    assert [c.kwargs["params"]["offset"] for c in request.call_args_list] == [0, 2]


def test_box_folder_sync_walks_breadth_first(box, fake_response):
    children = {
        "0": [{"type": "folder", "id": "10"}, {"type": "file", "id": "f1"}, {"type": "folder", "id": "20"}],
        "10": [{"type": "folder", "id": "11"}],
        "20": [],
        "11": [],
    }

    def _fake_request(method, url, **kwargs):
        folder_id = url.split("/folders/")[1].split("/")[0]
        entries = children[folder_id]
        return fake_response(200, {"entries": entries, "total_count": len(entries)})

    with patch("unify.providers.base.requests.request", side_effect=_fake_request):
        resp = BoxFolderService().sync(box, [])

    assert [f["id"] for f in resp.data] == ["10", "20", "11"]


def test_comment_sync_pulls_per_ticket(db_session, zendesk, linked_user, fake_response):
    tickets = sync_registry.get("ticketing", "ticket").save_to_db(
        db_session,
        connection_id=zendesk.id,
        linked_user_id=linked_user.id,
        provider="zendesk",
        unified_objects=[{"remote_id": "1", "name": "A"}, {"remote_id": "2", "name": "B"}],
        remote_data=[{"id": 1}, {"id": 2}],
    )
    comments = {
        "1": [{"id": 101, "body": "first", "public": True}],
        "2": [{"id": 201, "body": "second", "public": False}],
    }

    def _fake_request(method, url, **kwargs):
        ticket_remote_id = url.split("/tickets/")[1].split("/")[0]
        return fake_response(200, {"comments": comments[ticket_remote_id], "meta": {"has_more": False}})

    service = sync_registry.get("ticketing", "comment")
    with patch("unify.providers.base.requests.request", side_effect=_fake_request) as request:
        rows = service.sync_for_linked_user(db_session, "zendesk", linked_user.id)

    assert _urls(request) == [f"{ZENDESK_URL}/tickets/1/comments.json", f"{ZENDESK_URL}/tickets/2/comments.json"]
    by_remote = {r.remote_id: r for r in rows}
    assert by_remote["101"].ticket_id == tickets[0].id
    assert by_remote["201"].ticket_id == tickets[1].id
    assert by_remote["201"].is_private is True


def test_gitlab_comment_sync_skips_system_notes(db_session, gitlab, linked_user, fake_response):
    [ticket] = sync_registry.get("ticketing", "ticket").save_to_db(
        db_session,
        connection_id=gitlab.id,
        linked_user_id=linked_user.id,
        provider="gitlab",
        unified_objects=[{"remote_id": "500", "name": "Issue"}],
        remote_data=[{"id": 500, "project_id": 42, "iid": 7}],
    )
    notes = [
        {"id": 1, "body": "Looks good", "system": False, "author": {"id": 9}},
        {"id": 2, "body": "added ~bug label", "system": True, "author": {"id": 9}},
    ]

    service = sync_registry.get("ticketing", "comment")
    with patch("unify.providers.base.requests.request", return_value=fake_response(200, notes)) as request:
        rows = service.sync_for_linked_user(db_session, "gitlab", linked_user.id)

    assert _urls(request) == [f"{GITLAB_URL}/projects/42/issues/7/notes"]
    assert [r.remote_id for r in rows] == ["1"]
    assert rows[0].ticket_id == ticket.id
    assert db_session.query(models.TcgComment).count() == 1
