import uuid
from datetime import datetime
from typing import Optional, Literal

from pydantic import BaseModel, ConfigDict

from unify.providers.catalog import VERTICALS


class LinkedUserCreate(BaseModel):
    linked_user_origin_id: str
    alias: Optional[str] = None


class LinkedUserOut(BaseModel):
    id: uuid.UUID
    linked_user_origin_id: str
    alias: Optional[str] = None
    project_id: uuid.UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ConnectionCreate(BaseModel):
    """Credentials already obtained from the provider (no OAuth dance here)."""
    linked_user_id: uuid.UUID
    provider_slug: str
    vertical: str
    token_type: Literal["oauth", "api_key", "basic"] = "oauth"
    access_token: str
    refresh_token: Optional[str] = None
    account_url: Optional[str] = None
    expiration_timestamp: Optional[datetime] = None

    def normalized_vertical(self) -> str:
        v = self.vertical.strip().lower()
        if v not in VERTICALS:
            raise ValueError(f"Unknown vertical: {self.vertical}")
        return v


class ConnectionOut(BaseModel):
    id: uuid.UUID
    status: str
    provider_slug: str
    vertical: str
    token_type: str
    account_url: Optional[str] = None
    expiration_timestamp: Optional[datetime] = None
    connection_token: str
    project_id: uuid.UUID
    linked_user_id: uuid.UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
