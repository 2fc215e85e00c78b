import json
from unittest.mock import MagicMock

import pytest

from unify.db import models
from unify.db.repositories import field_mappings as field_mappings_repo
from unify.db.repositories import remote_data as remote_data_repo
from unify.errors import MissingRemoteId
from unify.providers.base import ApiResponse
from unify.unification import ingest
from unify.unification.registry import sync_registry


@pytest.fixture
def zendesk_conn(make_connection):
    return make_connection("zendesk", "ticketing")


@pytest.fixture
def region_attribute(db_session, project, linked_user):
    attr = field_mappings_repo.define_attribute(
        db_session, project_id=project.id, slug="region", resource_owner_type="ticketing.ticket"
    )
    return field_mappings_repo.map_attribute(
        db_session, attr, remote_id="900", source="zendesk", linked_user_id=linked_user.id
    )


def _fake_adapter(tickets):
    adapter = MagicMock()
    adapter.sync.return_value = ApiResponse(data=tickets, message="ok", status_code=200)
    return adapter


def _ticket(remote_id, **extra):
    return {"id": remote_id, "subject": f"Ticket {remote_id}", "status": "open", **extra}


def test_save_to_db_requires_remote_id(db_session, zendesk_conn, linked_user):
    service = sync_registry.get("ticketing", "ticket")
    with pytest.raises(MissingRemoteId):
        service.save_to_db(
            db_session,
            connection_id=zendesk_conn.id,
            linked_user_id=linked_user.id,
            provider="zendesk",
            unified_objects=[{"remote_id": None, "name": "orphan"}],
            remote_data=[{}],
        )
    assert db_session.query(models.TcgTicket).count() == 0


def test_save_to_db_stores_remote_data_and_tags(db_session, zendesk_conn, linked_user):
    service = sync_registry.get("ticketing", "ticket")
    [row] = service.save_to_db(
        db_session,
        connection_id=zendesk_conn.id,
        linked_user_id=linked_user.id,
        provider="zendesk",
        unified_objects=[{"remote_id": "1", "name": "A", "tags": ["vip"], "field_mappings": {}}],
        remote_data=[{"id": 1, "subject": "A"}],
    )
    assert remote_data_repo.get_remote_data(db_session, row.id) == {"id": 1, "subject": "A"}
    tag = db_session.query(models.TcgTag).one()
    assert tag.name == "vip"
    assert tag.ticket_id == row.id


def test_process_field_mappings_is_idempotent(db_session, zendesk_conn, linked_user, region_attribute):
    ticket = models.TcgTicket(name="x", remote_id="1", connection_id=zendesk_conn.id)
    db_session.add(ticket)
    db_session.commit()

    for value in ("EU", "US"):
        stored = ingest.process_field_mappings(
            db_session,
            field_mappings={"region": value, "unmapped": "ignored"},
            owner_id=ticket.id,
            provider="zendesk",
            linked_user_id=linked_user.id,
        )
        db_session.commit()
        assert stored == 1

    assert db_session.query(models.Entity).count() == 1
    assert db_session.query(models.Value).count() == 1
    assert field_mappings_repo.get_values_for_owner(db_session, ticket.id) == {"region": "US"}


def test_sync_for_linked_user_stores_objects_and_logs_pulled_event(db_session, zendesk_conn, linked_user, region_attribute):
    adapter = _fake_adapter([_ticket(1, custom_fields=[{"id": 900, "value": "EU"}]), _ticket(2)])
    service = sync_registry.get("ticketing", "ticket")

    rows = ingest.sync_for_linked_user(
        db_session,
        provider="zendesk",
        linked_user_id=linked_user.id,
        vertical="ticketing",
        object_name="ticket",
        adapter=adapter,
        save=service.save_to_db,
    )

    assert sorted(r.remote_id for r in rows) == ["1", "2"]
    # Mapped remote properties are requested from the provider
    adapter.sync.assert_called_once_with(zendesk_conn, ["900"])
    first = next(r for r in rows if r.remote_id == "1")
    assert field_mappings_repo.get_values_for_owner(db_session, first.id) == {"region": "EU"}
    event = db_session.query(models.Event).filter(models.Event.type == "ticketing.ticket.pulled").one()
    assert event.project_id == zendesk_conn.project_id


def test_repeated_sync_updates_in_place(db_session, zendesk_conn, linked_user):
    service = sync_registry.get("ticketing", "ticket")
    for subject in ("First", "Second"):
        ingest.sync_for_linked_user(
            db_session,
            provider="zendesk",
            linked_user_id=linked_user.id,
            vertical="ticketing",
            object_name="ticket",
            adapter=_fake_adapter([{"id": 1, "subject": subject, "status": "open"}]),
            save=service.save_to_db,
        )
    [ticket] = db_session.query(models.TcgTicket).all()
    assert ticket.name == "Second"


def test_sync_without_connection_is_skipped(db_session, linked_user):
    adapter = _fake_adapter([_ticket(1)])
    rows = ingest.sync_for_linked_user(
        db_session,
        provider="zendesk",
        linked_user_id=linked_user.id,
        vertical="ticketing",
        object_name="ticket",
        adapter=adapter,
        save=sync_registry.get("ticketing", "ticket").save_to_db,
    )
    assert rows is None
    adapter.sync.assert_not_called()


def test_folder_parents_resolved_at_save_time(db_session, make_connection, linked_user):
    conn = make_connection("box", "filestorage")
    service = sync_registry.get("filestorage", "folder")
    rows = service.save_to_db(
        db_session,
        connection_id=conn.id,
        linked_user_id=linked_user.id,
        provider="box",
        unified_objects=[
            {"remote_id": "11", "name": "Top", "parent_folder_remote_id": None},
            {"remote_id": "12", "name": "Child", "parent_folder_remote_id": "11"},
        ],
        remote_data=[{}, {}],
    )
    top, child = rows
    assert top.parent_folder_id is None
    assert child.parent_folder_id == top.id


def test_sync_isolates_failing_pairs(db_session, user, project, linked_user, zendesk_conn, make_connection, monkeypatch):
    make_connection("gitlab", "ticketing")
    service = sync_registry.get("ticketing", "ticket")
    calls = []

    def _fake_sync_for_linked_user(db, provider, linked_user_id):
        calls.append(provider)
        if provider == "zendesk":
            raise RuntimeError("provider down")
        return []

    monkeypatch.setattr(service, "sync_for_linked_user", _fake_sync_for_linked_user)
    stats = service.sync(db_session, user_id=user.id)

    assert calls == ["zendesk", "gitlab"]
    assert stats == {"succeeded": 1, "failed": 1, "skipped": 0}


def test_non_string_field_values_are_stored_as_json(db_session, zendesk_conn, project, linked_user):
    for slug in ("langs", "vip"):
        attr = field_mappings_repo.define_attribute(
            db_session, project_id=project.id, slug=slug, resource_owner_type="ticketing.ticket"
        )
        field_mappings_repo.map_attribute(db_session, attr, remote_id=slug, source="zendesk", linked_user_id=linked_user.id)
    ticket = models.TcgTicket(name="x", remote_id="1", connection_id=zendesk_conn.id)
    db_session.add(ticket)
    db_session.commit()

    ingest.process_field_mappings(
        db_session,
        field_mappings={"langs": ["en", "fr"], "vip": False},
        owner_id=ticket.id,
        provider="zendesk",
        linked_user_id=linked_user.id,
    )
    db_session.commit()

    values = field_mappings_repo.get_values_for_owner(db_session, ticket.id)
    assert json.loads(values["langs"]) == ["en", "fr"]
    assert values["vip"] == "false"


def test_folder_moved_to_root_loses_its_parent(db_session, make_connection, linked_user):
    conn = make_connection("box", "filestorage")
    service = sync_registry.get("filestorage", "folder")

    def _save(folders):
        return service.save_to_db(
            db_session,
            connection_id=conn.id,
            linked_user_id=linked_user.id,
            provider="box",
            unified_objects=folders,
            remote_data=[{} for _ in folders],
        )

    _save([
        {"remote_id": "10", "name": "Parent", "parent_folder_remote_id": None},
        {"remote_id": "11", "name": "Child", "parent_folder_remote_id": "10"},
    ])
    [child] = _save([{"remote_id": "11", "name": "Child", "description": None, "parent_folder_remote_id": None}])

    assert child.parent_folder_id is None
    # Partial updates still keep other stored columns
    assert child.name == "Child"


def test_sync_counts_pairs_without_connection_as_skipped(db_session, user, linked_user, zendesk_conn, monkeypatch):
    service = sync_registry.get("ticketing", "ticket")
    monkeypatch.setattr(
        service.services,
        "get_service",
        lambda provider: _fake_adapter([_ticket(1)]),
    )
    stats = service.sync(db_session, user_id=user.id)

    # zendesk has a connection; gitlab does not
    assert stats == {"succeeded": 1, "failed": 0, "skipped": 1}
    assert db_session.query(models.TcgTicket).count() == 1
