import base64
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from unify.db import models
from unify.db.models.base import now_utc
from unify.db.repositories import unified as unified_repo
from unify.errors import InvalidCursor


@pytest.fixture
def zendesk_conn(make_connection):
    return make_connection("zendesk", "ticketing")


def _seed_tickets(db, connection_id, count):
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    rows = []
    for i in range(count):
        row = models.TcgTicket(
            name=f"ticket {i}",
            remote_id=str(100 + i),
            connection_id=connection_id,
            created_at=base + timedelta(minutes=i),
            modified_at=base + timedelta(minutes=i),
        )
        db.add(row)
        rows.append(row)
    db.commit()
    return rows


def test_cursor_is_base64_of_id():
    object_id = uuid.uuid4()
    cursor = unified_repo.encode_cursor(object_id)
    assert base64.b64decode(cursor).decode() == str(object_id)
    assert unified_repo.decode_cursor(cursor) == object_id


@pytest.mark.parametrize("bad", ["not base64!!", base64.b64encode(b"not-a-uuid").decode()])
def test_malformed_cursor_raises(bad):
    with pytest.raises(InvalidCursor):
        unified_repo.decode_cursor(bad)


def test_paginate_walks_pages_in_creation_order(db_session, zendesk_conn):
    rows = _seed_tickets(db_session, zendesk_conn.id, 5)

    page, prev_cursor, next_cursor = unified_repo.paginate(
        db_session, models.TcgTicket, connection_id=zendesk_conn.id, limit=2
    )
    assert [r.remote_id for r in page] == ["100", "101"]
    assert prev_cursor is None
    # The next cursor points at the first row of the next page
    assert next_cursor == unified_repo.encode_cursor(rows[2].id)

    page, prev_cursor, next_cursor = unified_repo.paginate(
        db_session, models.TcgTicket, connection_id=zendesk_conn.id, limit=2, cursor=next_cursor
    )
    assert [r.remote_id for r in page] == ["102", "103"]
    assert prev_cursor == unified_repo.encode_cursor(rows[2].id)

    page, _, next_cursor = unified_repo.paginate(
        db_session, models.TcgTicket, connection_id=zendesk_conn.id, limit=2, cursor=next_cursor
    )
    assert [r.remote_id for r in page] == ["104"]
    assert next_cursor is None


def test_paginate_exact_page_has_no_next_cursor(db_session, zendesk_conn):
    _seed_tickets(db_session, zendesk_conn.id, 3)
    page, _, next_cursor = unified_repo.paginate(
        db_session, models.TcgTicket, connection_id=zendesk_conn.id, limit=3
    )
    assert len(page) == 3
    assert next_cursor is None


def test_paginate_unknown_cursor_raises(db_session, zendesk_conn):
    _seed_tickets(db_session, zendesk_conn.id, 2)
    with pytest.raises(InvalidCursor):
        unified_repo.paginate(
            db_session,
            models.TcgTicket,
            connection_id=zendesk_conn.id,
            limit=10,
            cursor=unified_repo.encode_cursor(uuid.uuid4()),
        )


def test_paginate_scoped_to_connection(db_session, zendesk_conn, make_connection):
    other = make_connection("gitlab", "ticketing")
    _seed_tickets(db_session, zendesk_conn.id, 2)
    other_rows = _seed_tickets(db_session, other.id, 1)

    page, _, _ = unified_repo.paginate(db_session, models.TcgTicket, connection_id=zendesk_conn.id, limit=10)
    assert len(page) == 2
    # A cursor from another connection is unknown here
    with pytest.raises(InvalidCursor):
        unified_repo.paginate(
            db_session,
            models.TcgTicket,
            connection_id=zendesk_conn.id,
            limit=10,
            cursor=unified_repo.encode_cursor(other_rows[0].id),
        )


def test_upsert_updates_in_place(db_session, zendesk_conn):
    first = unified_repo.upsert(
        db_session, models.TcgTicket, remote_id="7", connection_id=zendesk_conn.id, data={"name": "a", "status": "OPEN"}
    )
    db_session.commit()
    second = unified_repo.upsert(
        db_session, models.TcgTicket, remote_id="7", connection_id=zendesk_conn.id, data={"name": "b", "status": None}
    )
    db_session.commit()
    assert first.id == second.id
    assert second.name == "b"
    assert second.status is None
    assert db_session.query(models.TcgTicket).count() == 1


def test_partial_upsert_keeps_absent_fields(db_session, zendesk_conn):
    unified_repo.upsert(
        db_session, models.FsGroup, remote_id="g1", connection_id=zendesk_conn.id,
        data={"name": "Team", "users": ["a@x.io"], "remote_was_deleted": False},
    )
    db_session.commit()
    row = unified_repo.upsert(
        db_session, models.FsGroup, remote_id="g1", connection_id=zendesk_conn.id,
        data={"name": None, "users": ["b@x.io"]}, partial=True,
    )
    db_session.commit()
    assert row.name == "Team"
    assert row.users == ["b@x.io"]


def test_column_values_drops_unknown_and_protected_keys():
    values = unified_repo.column_values(
        models.TcgTicket,
        {"name": "x", "field_mappings": {}, "id": "nope", "remote_id": "1", "bogus": 1},
    )
    assert values == {"name": "x"}


def test_now_utc_is_timezone_aware():
    stamp = now_utc()
    assert stamp.tzinfo is not None
    assert stamp.utcoffset() == timedelta(0)
