"""
Identifier translation between provider ids and unified ids.

Unified objects refer to one another by unified id; provider payloads use
provider ids. Lookups are scoped to the connection that synced the row.
"""
from __future__ import annotations

import uuid
from typing import Optional, Type

from sqlalchemy.orm import Session

from unify.db import models
from unify.db.models.base import Base


def _unified_id(db: Session, model: Type[Base], remote_id: Optional[str], connection_id: uuid.UUID) -> Optional[uuid.UUID]:
    if remote_id in (None, ""):
        return None
    row = (
        db.query(model.id)
        .filter(model.remote_id == str(remote_id), model.connection_id == connection_id)
        .first()
    )
    return row[0] if row else None


def _remote_id(db: Session, model: Type[Base], object_id) -> Optional[str]:
    if not object_id:
        return None
    try:
        object_id = uuid.UUID(str(object_id))
    except ValueError:
        return None
    row = db.query(model.remote_id).filter(model.id == object_id).first()
    return row[0] if row else None


def user_id_from_remote(db: Session, remote_id, connection_id: uuid.UUID) -> Optional[uuid.UUID]:
    return _unified_id(db, models.TcgUser, remote_id, connection_id)


def user_remote_id(db: Session, user_id) -> Optional[str]:
    return _remote_id(db, models.TcgUser, user_id)


def user_email(db: Session, user_id) -> Optional[str]:
    if not user_id:
        return None
    try:
        user_id = uuid.UUID(str(user_id))
    except ValueError:
        return None
    row = db.query(models.TcgUser.email_address).filter(models.TcgUser.id == user_id).first()
    return row[0] if row else None


def collection_id_from_remote(db: Session, remote_id, connection_id: uuid.UUID) -> Optional[uuid.UUID]:
    return _unified_id(db, models.TcgCollection, remote_id, connection_id)


def collection_remote_id(db: Session, collection_id) -> Optional[str]:
    return _remote_id(db, models.TcgCollection, collection_id)


def ticket_remote_id(db: Session, ticket_id) -> Optional[str]:
    return _remote_id(db, models.TcgTicket, ticket_id)


def folder_id_from_remote(db: Session, remote_id, connection_id: uuid.UUID) -> Optional[uuid.UUID]:
    return _unified_id(db, models.FsFolder, remote_id, connection_id)


def folder_remote_id(db: Session, folder_id) -> Optional[str]:
    return _remote_id(db, models.FsFolder, folder_id)


def interview_id_for_application(db: Session, application_id: Optional[str], interviewed_at, connection_id: uuid.UUID) -> Optional[uuid.UUID]:
    """Match a scorecard to the interview of the same application held at the same time."""
    if not application_id or interviewed_at is None:
        return None
    rows = (
        db.query(models.AtsInterview.id, models.AtsInterview.start_at)
        .filter(
            models.AtsInterview.application_id == application_id,
            models.AtsInterview.connection_id == connection_id,
        )
        .all()
    )
    for interview_id, start_at in rows:
        if start_at is None:
            continue
        if start_at.tzinfo is None:
            start_at = start_at.replace(tzinfo=interviewed_at.tzinfo)
        if start_at == interviewed_at:
            return interview_id
    return None
