"""
Generic persistence for unified objects.

Every unified table carries ``remote_id``, ``connection_id``, ``created_at``
and ``modified_at``; the helpers here work against any such model.
"""
from __future__ import annotations

import base64
import binascii
import uuid
from typing import Any, Dict, List, Optional, Tuple, Type

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from unify.db.models.base import Base, now_utc
from unify.errors import InvalidCursor

_PROTECTED_COLUMNS = {"id", "remote_id", "connection_id", "created_at", "modified_at"}


def encode_cursor(object_id: uuid.UUID) -> str:
    return base64.b64encode(str(object_id).encode("ascii")).decode("ascii")


def decode_cursor(cursor: str) -> uuid.UUID:
    try:
        return uuid.UUID(base64.b64decode(cursor.encode("ascii"), validate=True).decode("ascii"))
    except (binascii.Error, ValueError, UnicodeError) as exc:
        raise InvalidCursor("The provided cursor is malformed") from exc


def get_by_id(db: Session, model: Type[Base], object_id: uuid.UUID):
    return db.query(model).filter(model.id == object_id).first()


def find_by_remote_id(db: Session, model: Type[Base], *, remote_id: str, connection_id: uuid.UUID):
    return (
        db.query(model)
        .filter(model.remote_id == remote_id, model.connection_id == connection_id)
        .first()
    )


def column_values(model: Type[Base], data: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only keys that are writable columns of ``model``."""
    columns = {c.key for c in model.__table__.columns}
    return {k: v for k, v in data.items() if k in columns and k not in _PROTECTED_COLUMNS}


def upsert(
    db: Session,
    model: Type[Base],
    *,
    remote_id: str,
    connection_id: uuid.UUID,
    data: Dict[str, Any],
    partial: bool = False,
):
    """Update-or-create keyed by (remote_id, connection_id). Caller commits.

    With ``partial`` set, ``None`` values never overwrite stored columns.
    """
    values = column_values(model, data)
    if partial:
        values = {k: v for k, v in values.items() if v is not None}
    obj = find_by_remote_id(db, model, remote_id=remote_id, connection_id=connection_id)
    if obj is None:
        obj = model(remote_id=remote_id, connection_id=connection_id, **values)
        db.add(obj)
    else:
        for key, value in values.items():
            setattr(obj, key, value)
        obj.modified_at = now_utc()
    db.flush()
    return obj


def paginate(
    db: Session,
    model: Type[Base],
    *,
    connection_id: uuid.UUID,
    limit: int,
    cursor: Optional[str] = None,
    extra_filters: Optional[list] = None,
) -> Tuple[List[Any], Optional[str], Optional[str]]:
    """Return ``(rows, prev_cursor, next_cursor)`` in ascending creation order.

    The cursor row itself is the first row of the page; one extra row is
    fetched to decide whether a next page exists.
    """
    query = db.query(model).filter(model.connection_id == connection_id)
    for clause in extra_filters or []:
        query = query.filter(clause)

    if cursor:
        anchor_id = decode_cursor(cursor)
        anchor = query.filter(model.id == anchor_id).first()
        if anchor is None:
            raise InvalidCursor("The provided cursor does not exist!")
        query = query.filter(
            or_(
                model.created_at > anchor.created_at,
                and_(model.created_at == anchor.created_at, model.id >= anchor.id),
            )
        )

    rows = query.order_by(model.created_at.asc(), model.id.asc()).limit(limit + 1).all()
    next_cursor = None
    if len(rows) == limit + 1:
        next_cursor = encode_cursor(rows[-1].id)
        rows = rows[:-1]
    prev_cursor = cursor if cursor else None
    return rows, prev_cursor, next_cursor
