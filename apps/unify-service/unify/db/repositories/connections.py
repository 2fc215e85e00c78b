"""
Repositories for provider connections.

Credentials are stored encrypted; callers hand plaintext in and decrypt on
use through ``unify.utils.token_crypto``.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from unify.db import models
from unify.utils import token_crypto


def upsert_connection(
    db: Session,
    *,
    project_id: uuid.UUID,
    linked_user_id: uuid.UUID,
    provider_slug: str,
    vertical: str,
    token_type: str,
    access_token: str,
    refresh_token: Optional[str] = None,
    account_url: Optional[str] = None,
    expiration_timestamp: Optional[datetime] = None,
) -> models.Connection:
    """Create the connection, or refresh the credentials of the existing one."""
    conn = get_for_linked_user(db, linked_user_id=linked_user_id, provider=provider_slug, vertical=vertical)
    if conn is None:
        conn = models.Connection(
            project_id=project_id,
            linked_user_id=linked_user_id,
            provider_slug=provider_slug,
            vertical=vertical,
            connection_token=token_crypto.generate_connection_token(),
        )
        db.add(conn)
    conn.status = "valid"
    conn.token_type = token_type
    conn.access_token = token_crypto.encrypt_credential(access_token)
    conn.refresh_token = token_crypto.encrypt_credential(refresh_token)
    conn.account_url = account_url
    conn.expiration_timestamp = expiration_timestamp
    db.commit()
    db.refresh(conn)
    return conn


def get_connection(db: Session, connection_id: uuid.UUID) -> Optional[models.Connection]:
    return db.query(models.Connection).filter(models.Connection.id == connection_id).first()


def get_by_token(db: Session, connection_token: str) -> Optional[models.Connection]:
    return (
        db.query(models.Connection)
        .filter(models.Connection.connection_token == connection_token)
        .first()
    )


def get_for_linked_user(
    db: Session,
    *,
    linked_user_id: uuid.UUID,
    provider: str,
    vertical: str,
) -> Optional[models.Connection]:
    return (
        db.query(models.Connection)
        .filter(
            models.Connection.linked_user_id == linked_user_id,
            models.Connection.provider_slug == provider,
            models.Connection.vertical == vertical,
        )
        .first()
    )


def list_for_project(db: Session, project_id: uuid.UUID) -> List[models.Connection]:
    return (
        db.query(models.Connection)
        .filter(models.Connection.project_id == project_id)
        .order_by(models.Connection.created_at.asc())
        .all()
    )
