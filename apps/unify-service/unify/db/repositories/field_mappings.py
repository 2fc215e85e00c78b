"""
Repositories for custom field mappings (attributes, entities, values).

An attribute is defined per project and object type, then mapped to a
provider field for one linked user. Values hang off one entity per unified
object, one value per (entity, attribute).
"""
from __future__ import annotations

import json
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from unify.db import models


def define_attribute(
    db: Session,
    *,
    project_id: uuid.UUID,
    slug: str,
    resource_owner_type: str,
    data_type: str = "string",
    description: Optional[str] = None,
) -> models.Attribute:
    attr = models.Attribute(
        project_id=project_id,
        slug=slug,
        resource_owner_type=resource_owner_type,
        data_type=data_type,
        description=description,
        status="defined",
    )
    db.add(attr)
    db.commit()
    db.refresh(attr)
    return attr


def get_attribute(db: Session, attribute_id: uuid.UUID) -> Optional[models.Attribute]:
    return db.query(models.Attribute).filter(models.Attribute.id == attribute_id).first()


def map_attribute(
    db: Session,
    attr: models.Attribute,
    *,
    remote_id: str,
    source: str,
    linked_user_id: uuid.UUID,
) -> models.Attribute:
    attr.remote_id = remote_id
    attr.source = source
    attr.linked_user_id = linked_user_id
    attr.status = "mapped"
    db.commit()
    db.refresh(attr)
    return attr


def list_attributes(db: Session, project_id: uuid.UUID) -> List[models.Attribute]:
    return (
        db.query(models.Attribute)
        .filter(models.Attribute.project_id == project_id)
        .order_by(models.Attribute.created_at.asc())
        .all()
    )


def get_custom_field_mappings(
    db: Session,
    *,
    provider: str,
    linked_user_id: uuid.UUID,
    resource_owner_type: str,
) -> List[Dict[str, str]]:
    """Return ``[{"slug", "remote_id"}]`` for mapped attributes of the owner type."""
    rows = (
        db.query(models.Attribute)
        .filter(
            models.Attribute.source == provider,
            models.Attribute.linked_user_id == linked_user_id,
            models.Attribute.resource_owner_type == resource_owner_type,
            models.Attribute.status == "mapped",
        )
        .all()
    )
    return [{"slug": a.slug, "remote_id": a.remote_id} for a in rows if a.remote_id]


def find_attribute_for_value(
    db: Session,
    *,
    slug: str,
    provider: str,
    linked_user_id: uuid.UUID,
) -> Optional[models.Attribute]:
    return (
        db.query(models.Attribute)
        .filter(
            models.Attribute.slug == slug,
            models.Attribute.source == provider,
            models.Attribute.linked_user_id == linked_user_id,
        )
        .first()
    )


def get_or_create_entity(db: Session, resource_owner_id: uuid.UUID) -> models.Entity:
    entity = db.query(models.Entity).filter(models.Entity.resource_owner_id == resource_owner_id).first()
    if entity is None:
        entity = models.Entity(resource_owner_id=resource_owner_id)
        db.add(entity)
        db.flush()
    return entity


def upsert_value(db: Session, *, entity: models.Entity, attribute: models.Attribute, data: Any) -> models.Value:
    """Insert or overwrite the value for (entity, attribute). Caller commits.

    Strings are kept as-is; anything else is stored as JSON (None as ``null``).
    """
    text = data if isinstance(data, str) else json.dumps(data, default=str)
    value = (
        db.query(models.Value)
        .filter(models.Value.entity_id == entity.id, models.Value.attribute_id == attribute.id)
        .first()
    )
    if value is None:
        value = models.Value(entity_id=entity.id, attribute_id=attribute.id, data=text)
        db.add(value)
    else:
        value.data = text
    db.flush()
    return value


def get_values_for_owner(db: Session, resource_owner_id: uuid.UUID) -> Dict[str, str]:
    """Return ``{slug: data}`` for every value stored against the unified object."""
    rows = (
        db.query(models.Attribute.slug, models.Value.data)
        .join(models.Value, models.Value.attribute_id == models.Attribute.id)
        .join(models.Entity, models.Entity.id == models.Value.entity_id)
        .filter(models.Entity.resource_owner_id == resource_owner_id)
        .all()
    )
    return {slug: data for slug, data in rows}
