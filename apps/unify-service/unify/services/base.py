"""
Unified object services: create through a provider, read back from storage.

Concrete services only declare their vertical, object, model, output schema
and route; provider adapters are looked up in the per-object registry.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional, Type

from pydantic import BaseModel
from sqlalchemy.orm import Session

from unify import events
from unify.db.models.base import Base
from unify.db.repositories import connections as connections_repo
from unify.db.repositories import field_mappings as field_mappings_repo
from unify.db.repositories import linked_users as linked_users_repo
from unify.db.repositories import remote_data as remote_data_repo
from unify.db.repositories import unified as unified_repo
from unify.errors import ConnectionNotFound, ObjectNotFound, ProviderNotSupported, ProviderRequestError
from unify.providers.base import get_registry
from unify.services import webhook_service
from unify.unification import ingest
from unify.unification.core import core_unification
from unify.unification.registry import sync_registry

logger = logging.getLogger(__name__)


def serialize_unified(db: Session, row: Any, output_schema: Type[BaseModel], *, remote_data: bool = False) -> Dict[str, Any]:
    """JSON-ready unified dict with field mappings and, optionally, raw provider data."""
    result = output_schema.model_validate(row).model_dump(mode="json")
    result["field_mappings"] = field_mappings_repo.get_values_for_owner(db, row.id)
    if remote_data:
        result["remote_data"] = remote_data_repo.get_remote_data(db, row.id)
    return result


class UnifiedObjectService:
    vertical: str = ""
    object_name: str = ""
    model: Type[Base]
    output_schema: Type[BaseModel]
    url: str = ""
    # Input fields kept on the stored object when the provider response omits them
    carry_over_fields: tuple = ()

    def __init__(self) -> None:
        self.services = get_registry(self.vertical, self.object_name)

    def _project_id(self, db: Session, linked_user_id: Optional[uuid.UUID]) -> Optional[uuid.UUID]:
        if not linked_user_id:
            return None
        linked_user = linked_users_repo.get_linked_user(db, linked_user_id)
        return linked_user.project_id if linked_user else None

    def serialize(self, db: Session, row: Any, *, remote_data: bool = False) -> Dict[str, Any]:
        return serialize_unified(db, row, self.output_schema, remote_data=remote_data)

    def save(self, db: Session, **kwargs):
        return sync_registry.get(self.vertical, self.object_name).save_to_db(db, **kwargs)

    def add(
        self,
        db: Session,
        *,
        data: Dict[str, Any],
        connection_id: uuid.UUID,
        provider: str,
        linked_user_id: uuid.UUID,
        remote_data: bool = False,
    ) -> Dict[str, Any]:
        linked_user = linked_users_repo.get_linked_user(db, linked_user_id)
        if linked_user is None:
            raise ObjectNotFound(f"Linked user {linked_user_id} not found")
        connection = connections_repo.get_connection(db, connection_id)
        if connection is None:
            raise ConnectionNotFound(f"Connection {connection_id} not found")
        adapter = self.services.get_service(provider)
        if adapter is None or not hasattr(adapter, "add"):
            raise ProviderNotSupported(provider, self.vertical, self.object_name)

        custom_field_mappings = ingest.get_custom_field_mappings(
            db, provider=provider, linked_user_id=linked_user_id, vertical=self.vertical, object_name=self.object_name
        )
        desunified = core_unification.desunify(
            db,
            source=data,
            vertical=self.vertical,
            object_name=self.object_name,
            provider=provider,
            custom_field_mappings=custom_field_mappings if data.get("field_mappings") else [],
        )
        logger.debug("desunified %s.%s for %s: %s", self.vertical, self.object_name, provider, desunified)

        resp = adapter.add(connection, desunified)
        unified = core_unification.unify(
            db,
            source=[resp.data],
            vertical=self.vertical,
            object_name=self.object_name,
            provider=provider,
            connection_id=connection_id,
            custom_field_mappings=custom_field_mappings,
        )
        for unified_obj in unified:
            for field in self.carry_over_fields:
                if unified_obj.get(field) is None and data.get(field) is not None:
                    unified_obj[field] = data[field]
        rows = self.save(
            db,
            connection_id=connection_id,
            linked_user_id=linked_user_id,
            provider=provider,
            unified_objects=unified,
            remote_data=[resp.data],
        )
        if not rows:
            raise ProviderRequestError(provider, "provider returned no object", status=resp.status_code)
        result = self.get(db, rows[0].id, remote_data=remote_data)

        event = events.log_created(
            db,
            vertical=self.vertical,
            object_name=self.object_name,
            url=self.url,
            provider=provider,
            linked_user_id=linked_user_id,
            project_id=linked_user.project_id,
            provider_status=resp.status_code,
        )
        webhook_service.dispatch_webhook(
            db,
            data=result,
            event_type=event.type,
            project_id=linked_user.project_id,
            event_id=event.id,
        )
        return result

    def get(
        self,
        db: Session,
        object_id: uuid.UUID,
        *,
        linked_user_id: Optional[uuid.UUID] = None,
        provider: Optional[str] = None,
        remote_data: bool = False,
        connection_id: Optional[uuid.UUID] = None,
    ) -> Dict[str, Any]:
        row = unified_repo.get_by_id(db, self.model, object_id)
        if row is None or (connection_id is not None and row.connection_id != connection_id):
            raise ObjectNotFound(f"{self.vertical}.{self.object_name} {object_id} not found")
        result = self.serialize(db, row, remote_data=remote_data)
        if linked_user_id and provider:
            events.log_pull(
                db,
                vertical=self.vertical,
                object_name=self.object_name,
                url=self.url,
                provider=provider,
                linked_user_id=linked_user_id,
                project_id=self._project_id(db, linked_user_id),
            )
        return result

    def list(
        self,
        db: Session,
        *,
        connection_id: uuid.UUID,
        provider: str,
        linked_user_id: uuid.UUID,
        limit: int,
        remote_data: bool = False,
        cursor: Optional[str] = None,
        extra_filters: Optional[list] = None,
    ) -> Dict[str, Any]:
        rows, prev_cursor, next_cursor = unified_repo.paginate(
            db,
            self.model,
            connection_id=connection_id,
            limit=limit,
            cursor=cursor,
            extra_filters=extra_filters,
        )
        data = [self.serialize(db, row, remote_data=remote_data) for row in rows]
        events.log_pull(
            db,
            vertical=self.vertical,
            object_name=self.object_name,
            url=self.url,
            provider=provider,
            linked_user_id=linked_user_id,
            project_id=self._project_id(db, linked_user_id),
        )
        return {"data": data, "prev_cursor": prev_cursor, "next_cursor": next_cursor}
