"""
Repositories for platform users and their projects.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from unify.db import models


def get_user(db: Session, user_id: uuid.UUID) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.email == email.strip().lower()).first()


def list_users(db: Session) -> List[models.User]:
    return db.query(models.User).order_by(models.User.created_at.asc()).all()


def create_user_with_project(
    db: Session,
    *,
    email: str,
    password_hash: str,
    first_name: Optional[str],
    last_name: Optional[str],
    project_name: str = "My Project",
) -> tuple[models.User, models.Project]:
    user = models.User(
        email=email.strip().lower(),
        password_hash=password_hash,
        first_name=first_name,
        last_name=last_name,
        identification_strategy="b2c",
    )
    db.add(user)
    db.flush()
    project = models.Project(name=project_name, sync_mode="pool", user_id=user.id)
    db.add(project)
    db.commit()
    db.refresh(user)
    db.refresh(project)
    return user, project


def get_project(db: Session, project_id: uuid.UUID) -> Optional[models.Project]:
    return db.query(models.Project).filter(models.Project.id == project_id).first()


def list_projects_for_user(db: Session, user_id: uuid.UUID) -> List[models.Project]:
    return (
        db.query(models.Project)
        .filter(models.Project.user_id == user_id)
        .order_by(models.Project.created_at.asc())
        .all()
    )


def set_reset_token(db: Session, user: models.User, *, token: str, expires_at: datetime) -> models.User:
    user.reset_token = token
    user.reset_token_expiry = expires_at
    db.commit()
    db.refresh(user)
    return user


def update_password(db: Session, user: models.User, *, password_hash: str) -> models.User:
    user.password_hash = password_hash
    user.reset_token = None
    user.reset_token_expiry = None
    db.commit()
    db.refresh(user)
    return user
