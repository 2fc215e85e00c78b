from typing import Optional

from pydantic import BaseModel

from .common import UnifiedInput, UnifiedOutput


class ActionFields(BaseModel):
    name: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None


class ActionInput(ActionFields, UnifiedInput):
    pass


class ActionOutput(ActionFields, UnifiedOutput):
    pass
