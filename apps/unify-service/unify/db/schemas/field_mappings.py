import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class DefineFieldRequest(BaseModel):
    object_type_owner: str  # e.g. "ats.interview"
    name: str
    description: Optional[str] = None
    data_type: str = "string"

    @field_validator("object_type_owner")
    @classmethod
    def _validate_owner(cls, v: str):
        parts = v.strip().lower().split(".")
        if len(parts) != 2 or not all(parts):
            raise ValueError("object_type_owner must look like '<vertical>.<object>'")
        return ".".join(parts)

    @field_validator("name")
    @classmethod
    def _slugify(cls, v: str):
        slug = "_".join(v.strip().lower().split())
        if not slug:
            raise ValueError("name must not be empty")
        return slug


class MapFieldRequest(BaseModel):
    attribute_id: uuid.UUID
    source_custom_field_id: str
    source_provider: str
    linked_user_id: uuid.UUID


class AttributeOut(BaseModel):
    id: uuid.UUID
    slug: str
    resource_owner_type: str
    data_type: str
    description: Optional[str] = None
    status: str
    remote_id: Optional[str] = None
    source: Optional[str] = None
    linked_user_id: Optional[uuid.UUID] = None
    project_id: uuid.UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
