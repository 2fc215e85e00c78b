from __future__ import annotations

import uuid
from typing import List, Optional

from sqlalchemy.orm import Session

from unify.db import models


def create_linked_user(
    db: Session,
    *,
    project_id: uuid.UUID,
    linked_user_origin_id: str,
    alias: Optional[str] = None,
) -> models.LinkedUser:
    linked_user = models.LinkedUser(
        project_id=project_id,
        linked_user_origin_id=linked_user_origin_id,
        alias=alias,
    )
    db.add(linked_user)
    db.commit()
    db.refresh(linked_user)
    return linked_user


def get_linked_user(db: Session, linked_user_id: uuid.UUID) -> Optional[models.LinkedUser]:
    return db.query(models.LinkedUser).filter(models.LinkedUser.id == linked_user_id).first()


def get_by_origin_id(db: Session, *, project_id: uuid.UUID, origin_id: str) -> Optional[models.LinkedUser]:
    return (
        db.query(models.LinkedUser)
        .filter(
            models.LinkedUser.project_id == project_id,
            models.LinkedUser.linked_user_origin_id == origin_id,
        )
        .first()
    )


def list_for_project(db: Session, project_id: uuid.UUID) -> List[models.LinkedUser]:
    return (
        db.query(models.LinkedUser)
        .filter(models.LinkedUser.project_id == project_id)
        .order_by(models.LinkedUser.created_at.asc())
        .all()
    )
