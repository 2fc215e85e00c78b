"""
API dependency helpers.

Resolves the platform user (dashboard JWT), the project behind an API key and
the provider connection a unified request targets.
"""
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from unify.db import models
from unify.db.database import get_db
from unify.db.repositories import connections as connections_repo
from unify.db.repositories import users as users_repo
from unify.errors import ConnectionNotFound, InvalidCredentials, ObjectNotFound
from unify.services import auth_service


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1].strip() or None
    return None


# Contract:
# Returns (User model, decoded access token payload).
# Raises 401 when the bearer token is missing, invalid or expired.
def get_current_user(
    db: Session = Depends(get_db),
    authorization: Optional[str] = Header(default=None),
) -> Tuple[models.User, Dict[str, Any]]:
    token = _bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    try:
        payload = auth_service.decode_access_token(token)
        user = auth_service.verify_user(db, uuid.UUID(payload["sub"]))
    except (InvalidCredentials, ObjectNotFound, KeyError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid access token")
    return user, payload


def get_api_key_project(
    db: Session = Depends(get_db),
    authorization: Optional[str] = Header(default=None),
    x_api_key: Optional[str] = Header(default=None, alias="x-api-key"),
) -> uuid.UUID:
    """Project id owning the API key sent as ``Authorization: Bearer`` or ``x-api-key``."""
    raw_key = x_api_key or _bearer_token(authorization)
    if not raw_key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="API key required")
    try:
        return auth_service.get_project_id_for_api_key(db, raw_key)
    except InvalidCredentials as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.message)


def ensure_project_owner(db: Session, user: models.User, project_id: uuid.UUID) -> models.Project:
    project = users_repo.get_project(db, project_id)
    if project is None or project.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project


@dataclass
class ConnectionContext:
    connection: models.Connection
    project_id: uuid.UUID
    linked_user_id: uuid.UUID
    provider: str


def get_connection_context(
    db: Session = Depends(get_db),
    project_id: uuid.UUID = Depends(get_api_key_project),
    x_connection_token: Optional[str] = Header(default=None, alias="x-connection-token"),
) -> ConnectionContext:
    if not x_connection_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="x-connection-token header required")
    connection = connections_repo.get_by_token(db, x_connection_token)
    # Connections of other projects are reported as unknown
    if connection is None or connection.project_id != project_id:
        raise ConnectionNotFound("Connection not found")
    return ConnectionContext(
        connection=connection,
        project_id=project_id,
        linked_user_id=connection.linked_user_id,
        provider=connection.provider_slug,
    )
