import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class WebhookCreate(BaseModel):
    url: str
    description: Optional[str] = None
    scope: List[str]

    @field_validator("url")
    @classmethod
    def _validate_url(cls, v: str):
        v = v.strip()
        if not (v.startswith("http://") or v.startswith("https://")):
            raise ValueError("url must be http(s)")
        return v

    @field_validator("scope")
    @classmethod
    def _validate_scope(cls, v: List[str]):
        cleaned = [s.strip() for s in (v or []) if s and s.strip()]
        if not cleaned:
            raise ValueError("At least one event type is required")
        return cleaned


class WebhookUpdate(BaseModel):
    active: bool


class WebhookOut(BaseModel):
    id: uuid.UUID
    url: str
    description: Optional[str] = None
    scope: List[str]
    active: bool
    project_id: uuid.UUID
    created_at: datetime
    last_update: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class WebhookCreateResponse(WebhookOut):
    secret: str
