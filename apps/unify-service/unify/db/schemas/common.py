import uuid
from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class Paginated(BaseModel, Generic[T]):
    prev_cursor: Optional[str] = None
    next_cursor: Optional[str] = None
    data: List[T]


class UnifiedInput(BaseModel):
    """Fields shared by every unified create payload."""
    # Custom field slug -> value, written to the provider's custom-field slot
    field_mappings: Optional[Dict[str, Any]] = None


class UnifiedOutput(BaseModel):
    id: uuid.UUID
    remote_id: Optional[str] = None
    connection_id: uuid.UUID
    created_at: datetime
    modified_at: datetime
    field_mappings: Dict[str, Any] = Field(default_factory=dict)
    remote_data: Optional[Any] = None

    model_config = ConfigDict(from_attributes=True)
