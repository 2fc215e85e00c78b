"""
Sync services: scheduled fan-out from platform users down to provider pulls.

One subclass per (vertical, object). The fan-out walks users -> projects ->
linked users -> providers of the vertical; a failing (linked user, provider)
pair is logged and the walk continues.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel
from sqlalchemy.orm import Session

from unify.db.models.base import Base
from unify.db.repositories import linked_users as linked_users_repo
from unify.db.repositories import unified as unified_repo
from unify.db.repositories import users as users_repo
from unify.errors import MissingRemoteId
from unify.providers.base import get_registry
from unify.providers.catalog import providers_for
from unify.services.base import serialize_unified
from unify.unification import ingest
from unify.unification.registry import sync_registry

logger = logging.getLogger(__name__)


class BaseSyncService:
    vertical: str = ""
    object_name: str = ""
    model: Type[Base]
    output_schema: Optional[Type[BaseModel]] = None
    # Absent (None) values leave stored columns untouched on update
    partial_update: bool = False

    def __init__(self) -> None:
        self.services = get_registry(self.vertical, self.object_name)

    def register(self) -> "BaseSyncService":
        sync_registry.register(self.vertical, self.object_name, self)
        return self

    @property
    def job_name(self) -> str:
        return f"{self.vertical}-sync-{self.object_name}s"

    def sync(self, db: Session, user_id: Optional[uuid.UUID] = None) -> Dict[str, int]:
        """Pull every linked user's data for this object.

        Returns counts of (linked user, provider) pairs: pulled, failed, and
        skipped for lack of an adapter or a connection.
        """
        logger.info("Syncing %s.%s...", self.vertical, self.object_name)
        stats = {"succeeded": 0, "failed": 0, "skipped": 0}
        if user_id:
            user = users_repo.get_user(db, user_id)
            users = [user] if user else []
        else:
            users = users_repo.list_users(db)
        for user in users:
            for project in users_repo.list_projects_for_user(db, user.id):
                for linked_user in linked_users_repo.list_for_project(db, project.id):
                    for provider in providers_for(self.vertical):
                        try:
                            rows = self.sync_for_linked_user(db, provider, linked_user.id)
                            stats["skipped" if rows is None else "succeeded"] += 1
                        except Exception:
                            db.rollback()
                            stats["failed"] += 1
                            logger.exception(
                                "Sync of %s.%s failed for provider %s and linked user %s",
                                self.vertical, self.object_name, provider, linked_user.id,
                            )
        return stats

    def sync_for_linked_user(self, db: Session, provider: str, linked_user_id: uuid.UUID) -> Optional[List[Any]]:
        adapter = self.services.get_service(provider)
        if adapter is None:
            logger.debug("No %s adapter for %s.%s; skipping", provider, self.vertical, self.object_name)
            return None
        return ingest.sync_for_linked_user(
            db,
            provider=provider,
            linked_user_id=linked_user_id,
            vertical=self.vertical,
            object_name=self.object_name,
            adapter=adapter,
            save=self.save_to_db,
            serialize=self.serialize if self.output_schema else None,
        )

    def serialize(self, db: Session, row: Any) -> Dict[str, Any]:
        return serialize_unified(db, row, self.output_schema)

    def prepare(self, db: Session, unified: Dict[str, Any], connection_id: uuid.UUID) -> Dict[str, Any]:
        """Hook to adjust column values before the upsert."""
        return unified

    def after_save(self, db: Session, row: Any, unified: Dict[str, Any], connection_id: uuid.UUID) -> None:
        """Hook for dependent rows (tags, lookups) once the object has an id."""

    def save_to_db(
        self,
        db: Session,
        *,
        connection_id: uuid.UUID,
        linked_user_id: uuid.UUID,
        provider: str,
        unified_objects: List[Dict[str, Any]],
        remote_data: List[Any],
    ) -> List[Any]:
        rows = []
        try:
            for index, unified in enumerate(unified_objects):
                remote_id = unified.get("remote_id")
                if remote_id is None or str(remote_id) == "":
                    raise MissingRemoteId(f"Origin id not there, found {remote_id!r}")
                values = self.prepare(db, dict(unified), connection_id)
                row = unified_repo.upsert(
                    db,
                    self.model,
                    remote_id=str(remote_id),
                    connection_id=connection_id,
                    data=values,
                    partial=self.partial_update,
                )
                self.after_save(db, row, unified, connection_id)
                ingest.process_field_mappings(
                    db,
                    field_mappings=unified.get("field_mappings"),
                    owner_id=row.id,
                    provider=provider,
                    linked_user_id=linked_user_id,
                )
                if index < len(remote_data):
                    ingest.process_remote_data(db, owner_id=row.id, raw=remote_data[index])
                rows.append(row)
            db.commit()
        except Exception:
            db.rollback()
            raise
        for row in rows:
            db.refresh(row)
        return rows
