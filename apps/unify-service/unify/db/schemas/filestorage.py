import uuid
from typing import List, Optional

from pydantic import BaseModel

from .common import UnifiedInput, UnifiedOutput


class FolderFields(BaseModel):
    name: Optional[str] = None
    size: Optional[int] = None
    folder_url: Optional[str] = None
    description: Optional[str] = None
    drive_id: Optional[str] = None
    parent_folder_id: Optional[uuid.UUID] = None
    shared_link: Optional[str] = None
    permission: Optional[str] = None


class FolderInput(FolderFields, UnifiedInput):
    pass


class FolderOutput(FolderFields, UnifiedOutput):
    pass


class GroupFields(BaseModel):
    name: Optional[str] = None
    users: Optional[List[str]] = None
    remote_was_deleted: Optional[bool] = None


class GroupOutput(GroupFields, UnifiedOutput):
    pass
