"""
Repositories for project API keys. Only SHA-256 hashes are persisted.
"""
from __future__ import annotations

import uuid
from typing import List, Optional

from sqlalchemy.orm import Session

from unify.db import models


def create_api_key(
    db: Session,
    *,
    api_key_hash: str,
    project_id: uuid.UUID,
    user_id: uuid.UUID,
    name: Optional[str] = None,
) -> models.ApiKey:
    key = models.ApiKey(api_key_hash=api_key_hash, project_id=project_id, user_id=user_id, name=name)
    db.add(key)
    db.commit()
    db.refresh(key)
    return key


def get_api_key(db: Session, api_key_id: uuid.UUID) -> Optional[models.ApiKey]:
    return db.query(models.ApiKey).filter(models.ApiKey.id == api_key_id).first()


def get_by_hash(db: Session, api_key_hash: str) -> Optional[models.ApiKey]:
    return db.query(models.ApiKey).filter(models.ApiKey.api_key_hash == api_key_hash).first()


def list_for_project(db: Session, project_id: uuid.UUID) -> List[models.ApiKey]:
    return (
        db.query(models.ApiKey)
        .filter(models.ApiKey.project_id == project_id)
        .order_by(models.ApiKey.created_at.desc())
        .all()
    )


def delete_api_key(db: Session, api_key_id: uuid.UUID) -> bool:
    key = db.query(models.ApiKey).filter(models.ApiKey.id == api_key_id).first()
    if not key:
        return False
    db.delete(key)
    db.commit()
    return True
