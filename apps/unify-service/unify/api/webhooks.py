"""
Webhook endpoint management for the API key's project.
"""
import uuid
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from unify.api.deps import get_api_key_project
from unify.db import schemas
from unify.db.database import get_db
from unify.db.repositories import webhooks as webhooks_repo
from unify.errors import ObjectNotFound
from unify.services import webhook_service

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


def _owned_endpoint(db: Session, endpoint_id: uuid.UUID, project_id: uuid.UUID):
    endpoint = webhooks_repo.get_endpoint(db, endpoint_id)
    if endpoint is None or endpoint.project_id != project_id:
        raise ObjectNotFound("Webhook endpoint not found")
    return endpoint


@router.post("", response_model=schemas.WebhookCreateResponse, status_code=status.HTTP_201_CREATED)
def create_webhook_endpoint(
    payload: schemas.WebhookCreate,
    db: Session = Depends(get_db),
    project_id: uuid.UUID = Depends(get_api_key_project),
):
    # The signing secret is only ever returned here
    return webhook_service.create_endpoint(
        db,
        project_id=project_id,
        url=payload.url,
        scope=payload.scope,
        description=payload.description,
    )


@router.get("", response_model=List[schemas.WebhookOut])
def list_webhook_endpoints(
    db: Session = Depends(get_db),
    project_id: uuid.UUID = Depends(get_api_key_project),
):
    return webhooks_repo.list_endpoints(db, project_id)


@router.put("/{endpoint_id}", response_model=schemas.WebhookOut)
def update_webhook_endpoint(
    endpoint_id: uuid.UUID,
    payload: schemas.WebhookUpdate,
    db: Session = Depends(get_db),
    project_id: uuid.UUID = Depends(get_api_key_project),
):
    endpoint = _owned_endpoint(db, endpoint_id, project_id)
    return webhooks_repo.set_active(db, endpoint, payload.active)


@router.delete("/{endpoint_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_webhook_endpoint(
    endpoint_id: uuid.UUID,
    db: Session = Depends(get_db),
    project_id: uuid.UUID = Depends(get_api_key_project),
):
    endpoint = _owned_endpoint(db, endpoint_id, project_id)
    webhooks_repo.delete_endpoint(db, endpoint)
    return None
