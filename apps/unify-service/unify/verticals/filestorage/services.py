"""Unified file storage services and their sync services."""
from __future__ import annotations

import uuid
from typing import Any, Dict

from sqlalchemy.orm import Session

from unify.db import models, schemas
from unify.services.base import UnifiedObjectService
from unify.services.sync import BaseSyncService
from unify.unification import lookups


class FolderService(UnifiedObjectService):
    vertical = "filestorage"
    object_name = "folder"
    model = models.FsFolder
    output_schema = schemas.FolderOutput
    url = "/filestorage/folders"


class GroupService(UnifiedObjectService):
    vertical = "filestorage"
    object_name = "group"
    model = models.FsGroup
    output_schema = schemas.GroupOutput
    url = "/filestorage/groups"


class FolderSyncService(BaseSyncService):
    vertical = "filestorage"
    object_name = "folder"
    model = models.FsFolder
    output_schema = schemas.FolderOutput
    partial_update = True

    def prepare(self, db: Session, unified: Dict[str, Any], connection_id: uuid.UUID) -> Dict[str, Any]:
        parent_remote = unified.pop("parent_folder_remote_id", None)
        if parent_remote:
            unified["parent_folder_id"] = lookups.folder_id_from_remote(db, parent_remote, connection_id)
        return unified

    def after_save(self, db: Session, row: Any, unified: Dict[str, Any], connection_id: uuid.UUID) -> None:
        # A folder moved to the root reports no parent; partial upserts would keep the old one
        if "parent_folder_remote_id" in unified and unified["parent_folder_remote_id"] is None:
            row.parent_folder_id = None


class GroupSyncService(BaseSyncService):
    vertical = "filestorage"
    object_name = "group"
    model = models.FsGroup
    output_schema = schemas.GroupOutput
    partial_update = True
