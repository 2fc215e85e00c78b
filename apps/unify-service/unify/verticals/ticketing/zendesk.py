"""
Zendesk Support API: adapters and mappers for tickets, comments, users and tags.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy.orm import Session

from unify.db import models
from unify.errors import InvalidInput
from unify.providers.base import ApiResponse, ProviderClient, get_registry
from unify.unification import lookups
from unify.unification.core import as_list, core_unification, custom_fields_in, custom_fields_out
from unify.unification.registry import mappers_registry
from unify.utils.dates import parse_datetime, to_iso

logger = logging.getLogger(__name__)

PROVIDER = "zendesk"

PRIORITY_IN = {"urgent": "URGENT", "high": "HIGH", "normal": "MEDIUM", "low": "LOW"}


class ZendeskClient(ProviderClient):
    provider = PROVIDER
    # account_url is the tenant API root, e.g. https://acme.zendesk.com/api/v2
    default_base_url = "https://example.zendesk.com/api/v2"

    def iter_collection(self, path: str, key: str, *, page_size: int = 100) -> Iterator[Dict[str, Any]]:
        """Follow cursor pagination (``links.next``) and legacy ``next_page`` urls."""
        next_url: Optional[str] = path
        params: Optional[Dict[str, Any]] = {"page[size]": page_size}
        while next_url:
            body, _ = self.get_json(next_url, params=params)
            params = None
            for item in body.get(key) or []:
                yield item
            meta = body.get("meta") or {}
            if meta.get("has_more") is False:
                break
            next_url = (body.get("links") or {}).get("next") or body.get("next_page")


# ---- adapters ----

class ZendeskTicketService:
    def sync(self, connection: models.Connection, remote_properties: List[str]) -> ApiResponse:
        data = list(ZendeskClient(connection).iter_collection("/tickets.json", "tickets"))
        logger.info("Synced zendesk tickets: %d", len(data))
        return ApiResponse(data=data, message="Zendesk tickets retrieved", status_code=200)

    def add(self, connection: models.Connection, payload: Dict[str, Any]) -> ApiResponse:
        body, response = ZendeskClient(connection).post_json("/tickets.json", {"ticket": payload})
        return ApiResponse(data=body.get("ticket") or {}, message="Zendesk ticket created", status_code=response.status_code)


class ZendeskCommentService:
    def sync(self, connection: models.Connection, remote_properties: List[str], *, ticket_remote_id: str, ticket_raw: Optional[Dict[str, Any]] = None) -> ApiResponse:
        data = list(ZendeskClient(connection).iter_collection(f"/tickets/{ticket_remote_id}/comments.json", "comments"))
        return ApiResponse(data=data, message="Zendesk comments retrieved", status_code=200)

    def add(self, connection: models.Connection, payload: Dict[str, Any]) -> ApiResponse:
        body = dict(payload)
        ticket_remote_id = body.pop("ticket_remote_id")
        client = ZendeskClient(connection)
        response = client.request("PUT", f"/tickets/{ticket_remote_id}.json", json={"ticket": {"comment": body}})
        result = response.json()
        # The new comment only appears as an event of the resulting audit
        events = (result.get("audit") or {}).get("events") or []
        comment = next((e for e in events if e.get("type") == "Comment"), {})
        return ApiResponse(data=comment, message="Zendesk comment created", status_code=response.status_code)


class ZendeskUserService:
    def sync(self, connection: models.Connection, remote_properties: List[str]) -> ApiResponse:
        data = list(ZendeskClient(connection).iter_collection("/users.json", "users"))
        return ApiResponse(data=data, message="Zendesk users retrieved", status_code=200)


# ---- mappers ----

class ZendeskTicketMapper:
    def desunify(self, db: Session, source: Dict[str, Any], custom_field_mappings: List[Dict[str, str]]) -> Dict[str, Any]:
        comment = source.get("comment") or {}
        result: Dict[str, Any] = {
            "subject": source.get("name"),
            "description": source.get("description"),
            "comment": {
                "body": comment.get("body") or source.get("description") or source.get("name"),
                "public": not comment.get("is_private", False),
            },
        }
        if comment.get("html_body"):
            result["comment"]["html_body"] = comment["html_body"]
        assigned_to = source.get("assigned_to") or []
        if assigned_to:
            email = lookups.user_email(db, assigned_to[0])
            if email:
                result["assignee_email"] = email
        if source.get("due_date"):
            result["due_at"] = to_iso(source["due_date"])
        if source.get("priority"):
            result["priority"] = "normal" if source["priority"] == "MEDIUM" else source["priority"].lower()
        if source.get("status"):
            result["status"] = source["status"].lower()
        if source.get("tags"):
            result["tags"] = list(source["tags"])
        if source.get("type"):
            result["type"] = source["type"].lower()
        custom = custom_fields_out(source.get("field_mappings"), custom_field_mappings)
        if custom:
            result["custom_fields"] = custom
        return result

    def unify(self, db: Session, source: Any, connection_id: uuid.UUID, custom_field_mappings: List[Dict[str, str]]) -> List[Dict[str, Any]]:
        return [self._map_one(db, ticket, connection_id, custom_field_mappings) for ticket in as_list(source)]

    def _map_one(self, db: Session, ticket: Dict[str, Any], connection_id: uuid.UUID, custom_field_mappings) -> Dict[str, Any]:
        remote_custom = {str(f.get("id")): f.get("value") for f in ticket.get("custom_fields") or []}
        status = (ticket.get("status") or "").lower()
        unified: Dict[str, Any] = {
            "remote_id": str(ticket["id"]) if ticket.get("id") is not None else None,
            "name": ticket.get("subject"),
            "status": "OPEN" if status in ("new", "open") else "CLOSED",
            "description": ticket.get("description"),
            "due_date": parse_datetime(ticket.get("due_at")),
            "parent_ticket": None,
            "completed_at": parse_datetime(ticket.get("updated_at")) if status in ("solved", "closed") else None,
            "priority": PRIORITY_IN.get((ticket.get("priority") or "").lower()),
            "field_mappings": custom_fields_in(remote_custom, custom_field_mappings),
        }
        if ticket.get("type"):
            unified["type"] = "PROBLEM" if ticket["type"] == "incident" else ticket["type"].upper()
        if ticket.get("assignee_id") is not None:
            user_id = lookups.user_id_from_remote(db, ticket["assignee_id"], connection_id)
            if user_id:
                unified["assigned_to"] = [str(user_id)]
        if ticket.get("tags"):
            tags = core_unification.unify(
                db,
                source=ticket["tags"],
                vertical="ticketing",
                object_name="tag",
                provider=PROVIDER,
                connection_id=connection_id,
            )
            unified["tags"] = [t["name"] for t in tags]
        return unified


class ZendeskCommentMapper:
    def desunify(self, db: Session, source: Dict[str, Any], custom_field_mappings: List[Dict[str, str]]) -> Dict[str, Any]:
        ticket_remote_id = lookups.ticket_remote_id(db, source.get("ticket_id"))
        if not ticket_remote_id:
            raise InvalidInput("Zendesk comments need a synced ticket in 'ticket_id'")
        result: Dict[str, Any] = {
            "ticket_remote_id": ticket_remote_id,
            "body": source.get("body"),
            "public": not source.get("is_private", False),
        }
        if source.get("html_body"):
            result["html_body"] = source["html_body"]
        author = lookups.user_remote_id(db, source.get("user_id"))
        if author:
            result["author_id"] = int(author) if author.isdigit() else author
        return result

    def unify(self, db: Session, source: Any, connection_id: uuid.UUID, custom_field_mappings: List[Dict[str, str]]) -> List[Dict[str, Any]]:
        results = []
        for comment in as_list(source):
            user_id = lookups.user_id_from_remote(db, comment.get("author_id"), connection_id)
            results.append({
                "remote_id": str(comment["id"]) if comment.get("id") is not None else None,
                "body": comment.get("plain_body") or comment.get("body"),
                "html_body": comment.get("html_body"),
                "is_private": not comment.get("public", True),
                "creator_type": "user" if user_id else "contact",
                "user_id": user_id,
                "field_mappings": {},
            })
        return results


class ZendeskUserMapper:
    def desunify(self, db: Session, source: Dict[str, Any], custom_field_mappings: List[Dict[str, str]]) -> Dict[str, Any]:
        return {"name": source.get("name"), "email": source.get("email_address")}

    def unify(self, db: Session, source: Any, connection_id: uuid.UUID, custom_field_mappings: List[Dict[str, str]]) -> List[Dict[str, Any]]:
        return [
            {
                "remote_id": str(user["id"]) if user.get("id") is not None else None,
                "name": user.get("name"),
                "email_address": user.get("email"),
                "field_mappings": {},
            }
            for user in as_list(source)
        ]


class ZendeskTagMapper:
    """Zendesk tags are bare strings."""

    def desunify(self, db: Session, source: Dict[str, Any], custom_field_mappings: List[Dict[str, str]]) -> Dict[str, Any]:
        return {"name": source.get("name")}

    def unify(self, db: Session, source: Any, connection_id: uuid.UUID, custom_field_mappings: List[Dict[str, str]]) -> List[Dict[str, Any]]:
        return [{"remote_id": str(tag), "name": str(tag)} for tag in as_list(source) if tag]


def register() -> None:
    get_registry("ticketing", "ticket").register(PROVIDER, ZendeskTicketService())
    get_registry("ticketing", "comment").register(PROVIDER, ZendeskCommentService())
    get_registry("ticketing", "user").register(PROVIDER, ZendeskUserService())
    mappers_registry.register("ticketing", "ticket", PROVIDER, ZendeskTicketMapper())
    mappers_registry.register("ticketing", "comment", PROVIDER, ZendeskCommentMapper())
    mappers_registry.register("ticketing", "user", PROVIDER, ZendeskUserMapper())
    mappers_registry.register("ticketing", "tag", PROVIDER, ZendeskTagMapper())
