"""
GitLab REST API v4: issues as tickets, notes as comments, projects as
collections and labels as tags.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from unify.db import models
from unify.db.repositories import remote_data as remote_data_repo
from unify.errors import InvalidInput
from unify.providers.base import ApiResponse, ProviderClient, get_registry
from unify.unification import lookups
from unify.unification.core import as_list, core_unification
from unify.unification.registry import mappers_registry
from unify.utils.dates import parse_datetime, to_date_str

logger = logging.getLogger(__name__)

PROVIDER = "gitlab"
_PAGE_SIZE = 100


class GitlabClient(ProviderClient):
    provider = PROVIDER
    default_base_url = "https://gitlab.com/api/v4"

    def list_all(self, path: str, **params) -> List[Dict[str, Any]]:
        items: List[Dict[str, Any]] = []
        for page in self.paginate_link_header(path, params={"per_page": _PAGE_SIZE, **params}):
            items.extend(page or [])
        return items


# ---- adapters ----

class GitlabTicketService:
    def sync(self, connection: models.Connection, remote_properties: List[str]) -> ApiResponse:
        data = GitlabClient(connection).list_all("/issues", scope="all")
        logger.info("Synced gitlab issues: %d", len(data))
        return ApiResponse(data=data, message="Gitlab issues retrieved", status_code=200)

    def add(self, connection: models.Connection, payload: Dict[str, Any]) -> ApiResponse:
        body = dict(payload)
        project_id = body.pop("project_id")
        data, response = GitlabClient(connection).post_json(f"/projects/{project_id}/issues", body)
        return ApiResponse(data=data, message="Gitlab issue created", status_code=response.status_code)


class GitlabCommentService:
    def sync(self, connection: models.Connection, remote_properties: List[str], *, ticket_remote_id: str, ticket_raw: Optional[Dict[str, Any]] = None) -> ApiResponse:
        ticket_raw = ticket_raw or {}
        project_id = ticket_raw.get("project_id")
        iid = ticket_raw.get("iid")
        if project_id is None or iid is None:
            logger.warning("Gitlab issue %s has no stored project/iid; comments skipped", ticket_remote_id)
            return ApiResponse(data=[], message="Gitlab issue reference missing", status_code=200)
        notes = GitlabClient(connection).list_all(f"/projects/{project_id}/issues/{iid}/notes")
        # System notes are GitLab's own activity log, not user comments
        data = [n for n in notes if not n.get("system")]
        return ApiResponse(data=data, message="Gitlab notes retrieved", status_code=200)

    def add(self, connection: models.Connection, payload: Dict[str, Any]) -> ApiResponse:
        body = dict(payload)
        project_id = body.pop("project_id")
        iid = body.pop("issue_iid")
        data, response = GitlabClient(connection).post_json(f"/projects/{project_id}/issues/{iid}/notes", body)
        return ApiResponse(data=data, message="Gitlab note created", status_code=response.status_code)


class GitlabUserService:
    def sync(self, connection: models.Connection, remote_properties: List[str]) -> ApiResponse:
        data = GitlabClient(connection).list_all("/users", active="true")
        return ApiResponse(data=data, message="Gitlab users retrieved", status_code=200)


class GitlabCollectionService:
    def sync(self, connection: models.Connection, remote_properties: List[str]) -> ApiResponse:
        data = GitlabClient(connection).list_all("/projects", membership="true")
        return ApiResponse(data=data, message="Gitlab projects retrieved", status_code=200)


# ---- mappers ----

class GitlabTicketMapper:
    def desunify(self, db: Session, source: Dict[str, Any], custom_field_mappings: List[Dict[str, str]]) -> Dict[str, Any]:
        collections = source.get("collections") or []
        project_id = lookups.collection_remote_id(db, collections[0]) if collections else None
        if not project_id:
            raise InvalidInput("Gitlab issues need a known collection (project) in 'collections'")
        result: Dict[str, Any] = {
            "project_id": project_id,
            "title": source.get("name"),
            "description": source.get("description") or None,
        }
        assigned_to = source.get("assigned_to") or []
        if assigned_to:
            remote = lookups.user_remote_id(db, assigned_to[0])
            if remote:
                result["assignee_ids"] = [int(remote) if remote.isdigit() else remote]
        if source.get("tags"):
            result["labels"] = ",".join(source["tags"])
        if source.get("due_date"):
            result["due_date"] = to_date_str(source["due_date"])
        for mapping in custom_field_mappings:
            if mapping["slug"] in (source.get("field_mappings") or {}):
                result[mapping["remote_id"]] = source["field_mappings"][mapping["slug"]]
        return result

    def unify(self, db: Session, source: Any, connection_id: uuid.UUID, custom_field_mappings: List[Dict[str, str]]) -> List[Dict[str, Any]]:
        return [self._map_one(db, issue, connection_id, custom_field_mappings) for issue in as_list(source)]

    def _map_one(self, db: Session, issue: Dict[str, Any], connection_id: uuid.UUID, custom_field_mappings) -> Dict[str, Any]:
        unified: Dict[str, Any] = {
            "remote_id": str(issue["id"]) if issue.get("id") is not None else None,
            "name": issue.get("title"),
            "description": issue.get("description") or None,
            "status": "OPEN" if issue.get("state") == "opened" else "CLOSED",
            "due_date": parse_datetime(issue.get("due_date")),
            "completed_at": parse_datetime(issue.get("closed_at")),
            "field_mappings": {m["slug"]: issue.get(m["remote_id"]) for m in custom_field_mappings},
        }
        if issue.get("issue_type"):
            unified["type"] = issue["issue_type"].upper()
        assignees = issue.get("assignees") or ([issue["assignee"]] if issue.get("assignee") else [])
        assigned = [lookups.user_id_from_remote(db, a.get("id"), connection_id) for a in assignees]
        assigned = [str(a) for a in assigned if a]
        if assigned:
            unified["assigned_to"] = assigned
        if issue.get("labels"):
            tags = core_unification.unify(
                db,
                source=issue["labels"],
                vertical="ticketing",
                object_name="tag",
                provider=PROVIDER,
                connection_id=connection_id,
            )
            unified["tags"] = [t["name"] for t in tags]
        if issue.get("project_id") is not None:
            collection_id = lookups.collection_id_from_remote(db, issue["project_id"], connection_id)
            if collection_id:
                unified["collections"] = [str(collection_id)]
        return unified


class GitlabCommentMapper:
    def desunify(self, db: Session, source: Dict[str, Any], custom_field_mappings: List[Dict[str, str]]) -> Dict[str, Any]:
        ticket_id = source.get("ticket_id")
        raw = remote_data_repo.get_remote_data(db, uuid.UUID(str(ticket_id))) if ticket_id else None
        if not raw or raw.get("project_id") is None or raw.get("iid") is None:
            raise InvalidInput("Gitlab notes need a synced ticket in 'ticket_id'")
        return {
            "project_id": raw["project_id"],
            "issue_iid": raw["iid"],
            "body": source.get("body"),
            "internal": bool(source.get("is_private")),
        }

    def unify(self, db: Session, source: Any, connection_id: uuid.UUID, custom_field_mappings: List[Dict[str, str]]) -> List[Dict[str, Any]]:
        results = []
        for note in as_list(source):
            author = note.get("author") or {}
            user_id = lookups.user_id_from_remote(db, author.get("id"), connection_id)
            results.append({
                "remote_id": str(note["id"]) if note.get("id") is not None else None,
                "body": note.get("body"),
                "html_body": None,
                "is_private": bool(note.get("internal") or note.get("confidential")),
                "creator_type": "user",
                "user_id": user_id,
                "field_mappings": {},
            })
        return results


class GitlabUserMapper:
    def desunify(self, db: Session, source: Dict[str, Any], custom_field_mappings: List[Dict[str, str]]) -> Dict[str, Any]:
        return {"name": source.get("name")}

    def unify(self, db: Session, source: Any, connection_id: uuid.UUID, custom_field_mappings: List[Dict[str, str]]) -> List[Dict[str, Any]]:
        return [
            {
                "remote_id": str(user["id"]) if user.get("id") is not None else None,
                "name": user.get("name") or user.get("username"),
                "email_address": user.get("email") or user.get("public_email") or None,
                "field_mappings": {},
            }
            for user in as_list(source)
        ]


class GitlabCollectionMapper:
    def desunify(self, db: Session, source: Dict[str, Any], custom_field_mappings: List[Dict[str, str]]) -> Dict[str, Any]:
        return {"name": source.get("name"), "description": source.get("description")}

    def unify(self, db: Session, source: Any, connection_id: uuid.UUID, custom_field_mappings: List[Dict[str, str]]) -> List[Dict[str, Any]]:
        return [
            {
                "remote_id": str(project["id"]) if project.get("id") is not None else None,
                "name": project.get("name"),
                "description": project.get("description"),
                "collection_type": "PROJECT",
                "field_mappings": {},
            }
            for project in as_list(source)
        ]


class GitlabTagMapper:
    """Labels arrive as strings, or as objects with ``with_labels_details``."""

    def desunify(self, db: Session, source: Dict[str, Any], custom_field_mappings: List[Dict[str, str]]) -> Dict[str, Any]:
        return {"name": source.get("name")}

    def unify(self, db: Session, source: Any, connection_id: uuid.UUID, custom_field_mappings: List[Dict[str, str]]) -> List[Dict[str, Any]]:
        results = []
        for label in as_list(source):
            name = label.get("name") if isinstance(label, dict) else label
            if name:
                results.append({"remote_id": str(name), "name": str(name)})
        return results


def register() -> None:
    get_registry("ticketing", "ticket").register(PROVIDER, GitlabTicketService())
    get_registry("ticketing", "comment").register(PROVIDER, GitlabCommentService())
    get_registry("ticketing", "user").register(PROVIDER, GitlabUserService())
    get_registry("ticketing", "collection").register(PROVIDER, GitlabCollectionService())
    mappers_registry.register("ticketing", "ticket", PROVIDER, GitlabTicketMapper())
    mappers_registry.register("ticketing", "comment", PROVIDER, GitlabCommentMapper())
    mappers_registry.register("ticketing", "user", PROVIDER, GitlabUserMapper())
    mappers_registry.register("ticketing", "collection", PROVIDER, GitlabCollectionMapper())
    mappers_registry.register("ticketing", "tag", PROVIDER, GitlabTagMapper())
