"""
Custom field mapping endpoints: define a project attribute, then map it to a
provider field for one linked user.
"""
import uuid
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from unify.api.deps import get_api_key_project
from unify.db import schemas
from unify.db.database import get_db
from unify.db.repositories import field_mappings as field_mappings_repo
from unify.db.repositories import linked_users as linked_users_repo
from unify.errors import InvalidInput, ObjectNotFound
from unify.providers.catalog import VERTICALS

router = APIRouter(prefix="/field-mappings", tags=["field-mappings"])


@router.post("/define", response_model=schemas.AttributeOut, status_code=status.HTTP_201_CREATED)
def define_field_endpoint(
    payload: schemas.DefineFieldRequest,
    db: Session = Depends(get_db),
    project_id: uuid.UUID = Depends(get_api_key_project),
):
    vertical = payload.object_type_owner.split(".", 1)[0]
    if vertical not in VERTICALS:
        raise InvalidInput(f"Unknown vertical: {vertical}")
    return field_mappings_repo.define_attribute(
        db,
        project_id=project_id,
        slug=payload.name,
        resource_owner_type=payload.object_type_owner,
        data_type=payload.data_type,
        description=payload.description,
    )


@router.post("/map", response_model=schemas.AttributeOut)
def map_field_endpoint(
    payload: schemas.MapFieldRequest,
    db: Session = Depends(get_db),
    project_id: uuid.UUID = Depends(get_api_key_project),
):
    attr = field_mappings_repo.get_attribute(db, payload.attribute_id)
    if attr is None or attr.project_id != project_id:
        raise ObjectNotFound("Attribute not found")
    linked_user = linked_users_repo.get_linked_user(db, payload.linked_user_id)
    if linked_user is None or linked_user.project_id != project_id:
        raise ObjectNotFound("Linked user not found")
    return field_mappings_repo.map_attribute(
        db,
        attr,
        remote_id=payload.source_custom_field_id,
        source=payload.source_provider.strip().lower(),
        linked_user_id=linked_user.id,
    )


@router.get("/attributes", response_model=List[schemas.AttributeOut])
def list_attributes_endpoint(
    db: Session = Depends(get_db),
    project_id: uuid.UUID = Depends(get_api_key_project),
):
    return field_mappings_repo.list_attributes(db, project_id)
