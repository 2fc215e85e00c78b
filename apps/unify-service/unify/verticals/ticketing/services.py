"""Unified ticketing services and their sync services."""
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from unify.db import models, schemas
from unify.db.repositories import connections as connections_repo
from unify.db.repositories import remote_data as remote_data_repo
from unify.services.base import UnifiedObjectService
from unify.services.sync import BaseSyncService
from unify.unification import ingest

logger = logging.getLogger(__name__)


class TicketService(UnifiedObjectService):
    vertical = "ticketing"
    object_name = "ticket"
    model = models.TcgTicket
    output_schema = schemas.TicketOutput
    url = "/ticketing/tickets"


class CommentService(UnifiedObjectService):
    vertical = "ticketing"
    object_name = "comment"
    model = models.TcgComment
    output_schema = schemas.CommentOutput
    url = "/ticketing/comments"
    carry_over_fields = ("ticket_id",)

    def list_for_ticket(
        self,
        db: Session,
        *,
        ticket_id: uuid.UUID,
        connection_id: uuid.UUID,
        provider: str,
        linked_user_id: uuid.UUID,
        limit: int,
        remote_data: bool = False,
        cursor: Optional[str] = None,
    ) -> Dict[str, Any]:
        return self.list(
            db,
            connection_id=connection_id,
            provider=provider,
            linked_user_id=linked_user_id,
            limit=limit,
            remote_data=remote_data,
            cursor=cursor,
            extra_filters=[models.TcgComment.ticket_id == ticket_id],
        )


class UserSyncService(BaseSyncService):
    vertical = "ticketing"
    object_name = "user"
    model = models.TcgUser


class CollectionSyncService(BaseSyncService):
    vertical = "ticketing"
    object_name = "collection"
    model = models.TcgCollection


class TicketSyncService(BaseSyncService):
    vertical = "ticketing"
    object_name = "ticket"
    model = models.TcgTicket
    output_schema = schemas.TicketOutput

    def after_save(self, db: Session, row: Any, unified: Dict[str, Any], connection_id: uuid.UUID) -> None:
        for name in unified.get("tags") or []:
            existing = (
                db.query(models.TcgTag)
                .filter(models.TcgTag.remote_id == name, models.TcgTag.connection_id == connection_id)
                .first()
            )
            if existing is None:
                db.add(models.TcgTag(name=name, remote_id=name, ticket_id=row.id, connection_id=connection_id))
        db.flush()


class CommentSyncService(BaseSyncService):
    """Comments are pulled ticket by ticket for the tickets already stored."""
    vertical = "ticketing"
    object_name = "comment"
    model = models.TcgComment
    output_schema = schemas.CommentOutput

    def sync_for_linked_user(self, db: Session, provider: str, linked_user_id: uuid.UUID) -> Optional[List[Any]]:
        adapter = self.services.get_service(provider)
        if adapter is None:
            return None
        connection = connections_repo.get_for_linked_user(
            db, linked_user_id=linked_user_id, provider=provider, vertical=self.vertical
        )
        if connection is None:
            logger.warning("Skipping comments syncing... No %s connection for linked user %s", provider, linked_user_id)
            return None
        tickets = (
            db.query(models.TcgTicket)
            .filter(models.TcgTicket.connection_id == connection.id)
            .order_by(models.TcgTicket.created_at.asc())
            .all()
        )
        rows: List[Any] = []
        for ticket in tickets:
            stored = ingest.sync_for_linked_user(
                db,
                provider=provider,
                linked_user_id=linked_user_id,
                vertical=self.vertical,
                object_name=self.object_name,
                adapter=adapter,
                save=self.save_to_db,
                serialize=self.serialize,
                adapter_kwargs={
                    "ticket_remote_id": ticket.remote_id,
                    "ticket_raw": remote_data_repo.get_remote_data(db, ticket.id),
                },
                extra_values={"ticket_id": ticket.id},
            )
            rows.extend(stored or [])
        return rows
