"""
Linked users and provider connections of the API key's project.
"""
import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from unify.api.deps import get_api_key_project
from unify.db import schemas
from unify.db.database import get_db
from unify.db.repositories import connections as connections_repo
from unify.db.repositories import linked_users as linked_users_repo
from unify.errors import Conflict, InvalidInput, ObjectNotFound
from unify.providers.catalog import providers_for

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tenancy"])


@router.post("/linked-users", response_model=schemas.LinkedUserOut, status_code=status.HTTP_201_CREATED)
def create_linked_user_endpoint(
    payload: schemas.LinkedUserCreate,
    db: Session = Depends(get_db),
    project_id: uuid.UUID = Depends(get_api_key_project),
):
    if linked_users_repo.get_by_origin_id(db, project_id=project_id, origin_id=payload.linked_user_origin_id):
        raise Conflict("Linked user with this origin id already exists")
    return linked_users_repo.create_linked_user(
        db,
        project_id=project_id,
        linked_user_origin_id=payload.linked_user_origin_id,
        alias=payload.alias,
    )


@router.get("/linked-users", response_model=List[schemas.LinkedUserOut])
def list_linked_users_endpoint(
    db: Session = Depends(get_db),
    project_id: uuid.UUID = Depends(get_api_key_project),
):
    return linked_users_repo.list_for_project(db, project_id)


@router.post("/connections", response_model=schemas.ConnectionOut, status_code=status.HTTP_201_CREATED)
def create_connection_endpoint(
    payload: schemas.ConnectionCreate,
    db: Session = Depends(get_db),
    project_id: uuid.UUID = Depends(get_api_key_project),
):
    linked_user = linked_users_repo.get_linked_user(db, payload.linked_user_id)
    if linked_user is None or linked_user.project_id != project_id:
        raise ObjectNotFound("Linked user not found")
    try:
        vertical = payload.normalized_vertical()
    except ValueError as exc:
        raise InvalidInput(str(exc))
    provider = payload.provider_slug.strip().lower()
    if provider not in providers_for(vertical):
        raise InvalidInput(f"Provider '{provider}' is not available for vertical {vertical}")
    conn = connections_repo.upsert_connection(
        db,
        project_id=project_id,
        linked_user_id=linked_user.id,
        provider_slug=provider,
        vertical=vertical,
        token_type=payload.token_type,
        access_token=payload.access_token,
        refresh_token=payload.refresh_token,
        account_url=payload.account_url,
        expiration_timestamp=payload.expiration_timestamp,
    )
    logger.info("Connection %s (%s/%s) stored for linked user %s", conn.id, vertical, provider, linked_user.id)
    return conn


@router.get("/connections", response_model=List[schemas.ConnectionOut])
def list_connections_endpoint(
    db: Session = Depends(get_db),
    project_id: uuid.UUID = Depends(get_api_key_project),
):
    return connections_repo.list_for_project(db, project_id)
