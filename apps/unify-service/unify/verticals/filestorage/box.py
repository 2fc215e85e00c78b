"""
Box Content API: folders (walked from the root) and groups with members.
"""
from __future__ import annotations

import logging
import uuid
from collections import deque
from typing import Any, Dict, Iterator, List

from sqlalchemy.orm import Session

from unify.db import models
from unify.providers.base import ApiResponse, ProviderClient, get_registry
from unify.unification import lookups
from unify.unification.core import as_list
from unify.unification.registry import mappers_registry

logger = logging.getLogger(__name__)

PROVIDER = "box"
ROOT_FOLDER_ID = "0"
_PAGE_SIZE = 1000
_FOLDER_FIELDS = "id,type,name,size,description,parent,shared_link,created_at,modified_at"


class BoxClient(ProviderClient):
    provider = PROVIDER
    default_base_url = "https://api.box.com/2.0"

    def iter_offset(self, path: str, **params) -> Iterator[Dict[str, Any]]:
        """Follow Box offset/limit pagination until ``total_count`` is reached."""
        offset = 0
        while True:
            body, _ = self.get_json(path, params={"offset": offset, "limit": _PAGE_SIZE, **params})
            entries = body.get("entries") or []
            for entry in entries:
                yield entry
            offset += len(entries)
            if not entries or offset >= int(body.get("total_count") or 0):
                break


# ---- adapters ----

class BoxFolderService:
    def sync(self, connection: models.Connection, remote_properties: List[str]) -> ApiResponse:
        """Breadth-first walk so parents always precede their children."""
        client = BoxClient(connection)
        fields = ",".join([_FOLDER_FIELDS, *remote_properties]) if remote_properties else _FOLDER_FIELDS
        folders: List[Dict[str, Any]] = []
        queue = deque([ROOT_FOLDER_ID])
        while queue:
            parent_id = queue.popleft()
            for entry in client.iter_offset(f"/folders/{parent_id}/items", fields=fields):
                if entry.get("type") != "folder":
                    continue
                folders.append(entry)
                queue.append(entry["id"])
        logger.info("Synced box folders: %d", len(folders))
        return ApiResponse(data=folders, message="Box folders retrieved", status_code=200)

    def add(self, connection: models.Connection, payload: Dict[str, Any]) -> ApiResponse:
        data, response = BoxClient(connection).post_json("/folders", payload, params={"fields": _FOLDER_FIELDS})
        return ApiResponse(data=data, message="Box folder created", status_code=response.status_code)


class BoxGroupService:
    def sync(self, connection: models.Connection, remote_properties: List[str]) -> ApiResponse:
        client = BoxClient(connection)
        groups = []
        for group in client.iter_offset("/groups"):
            members = list(client.iter_offset(f"/groups/{group['id']}/memberships"))
            groups.append({**group, "memberships": members})
        logger.info("Synced box groups: %d", len(groups))
        return ApiResponse(data=groups, message="Box groups retrieved", status_code=200)


# ---- mappers ----

class BoxFolderMapper:
    def desunify(self, db: Session, source: Dict[str, Any], custom_field_mappings: List[Dict[str, str]]) -> Dict[str, Any]:
        parent_remote = lookups.folder_remote_id(db, source.get("parent_folder_id")) or ROOT_FOLDER_ID
        result: Dict[str, Any] = {"name": source.get("name"), "parent": {"id": parent_remote}}
        if source.get("description"):
            result["description"] = source["description"]
        return result

    def unify(self, db: Session, source: Any, connection_id: uuid.UUID, custom_field_mappings: List[Dict[str, str]]) -> List[Dict[str, Any]]:
        results = []
        for folder in as_list(source):
            shared = folder.get("shared_link") or {}
            parent = folder.get("parent") or {}
            results.append({
                "remote_id": str(folder["id"]) if folder.get("id") is not None else None,
                "name": folder.get("name"),
                "size": folder.get("size"),
                "folder_url": f"https://app.box.com/folder/{folder['id']}" if folder.get("id") else None,
                "description": folder.get("description") or None,
                "drive_id": None,
                # Resolved to a unified id at save time, once the parent is stored
                "parent_folder_remote_id": str(parent["id"]) if parent.get("id") not in (None, ROOT_FOLDER_ID) else None,
                "shared_link": shared.get("url"),
                "permission": shared.get("effective_access") or shared.get("access"),
                "field_mappings": {m["slug"]: folder.get(m["remote_id"]) for m in custom_field_mappings if m["remote_id"] in folder},
            })
        return results


class BoxGroupMapper:
    def desunify(self, db: Session, source: Dict[str, Any], custom_field_mappings: List[Dict[str, str]]) -> Dict[str, Any]:
        return {"name": source.get("name")}

    def unify(self, db: Session, source: Any, connection_id: uuid.UUID, custom_field_mappings: List[Dict[str, str]]) -> List[Dict[str, Any]]:
        results = []
        for group in as_list(source):
            users = []
            for membership in group.get("memberships") or []:
                user = membership.get("user") or {}
                login = user.get("login") or user.get("id")
                if login:
                    users.append(str(login))
            results.append({
                "remote_id": str(group["id"]) if group.get("id") is not None else None,
                "name": group.get("name"),
                "users": users or None,
                "remote_was_deleted": None,
                "field_mappings": {m["slug"]: group.get(m["remote_id"]) for m in custom_field_mappings if m["remote_id"] in group},
            })
        return results


def register() -> None:
    get_registry("filestorage", "folder").register(PROVIDER, BoxFolderService())
    get_registry("filestorage", "group").register(PROVIDER, BoxGroupService())
    mappers_registry.register("filestorage", "folder", PROVIDER, BoxFolderMapper())
    mappers_registry.register("filestorage", "group", PROVIDER, BoxGroupMapper())
