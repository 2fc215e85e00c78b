"""
Ingest pipeline shared by every sync service.

Pulls provider objects through an adapter, unifies them, hands them to the
object-specific ``save`` callable and emits the ``pulled`` event/webhook.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from unify import events
from unify.db.repositories import connections as connections_repo
from unify.db.repositories import field_mappings as field_mappings_repo
from unify.db.repositories import remote_data as remote_data_repo
from unify.providers.catalog import owner_type
from unify.services import webhook_service
from unify.unification.core import core_unification

logger = logging.getLogger(__name__)


def get_custom_field_mappings(db: Session, *, provider: str, linked_user_id: uuid.UUID, vertical: str, object_name: str) -> List[Dict[str, str]]:
    return field_mappings_repo.get_custom_field_mappings(
        db,
        provider=provider,
        linked_user_id=linked_user_id,
        resource_owner_type=owner_type(vertical, object_name),
    )


def process_field_mappings(
    db: Session,
    *,
    field_mappings: Optional[Dict[str, Any]],
    owner_id: uuid.UUID,
    provider: str,
    linked_user_id: uuid.UUID,
) -> int:
    """Store custom field values for one unified object; returns the count stored.

    Slugs without a matching attribute for (provider, linked user) are ignored.
    """
    if not field_mappings:
        return 0
    entity = None
    stored = 0
    for slug, value in field_mappings.items():
        attribute = field_mappings_repo.find_attribute_for_value(
            db, slug=slug, provider=provider, linked_user_id=linked_user_id
        )
        if attribute is None:
            logger.debug("No attribute '%s' for provider %s; value skipped", slug, provider)
            continue
        if entity is None:
            entity = field_mappings_repo.get_or_create_entity(db, owner_id)
        field_mappings_repo.upsert_value(db, entity=entity, attribute=attribute, data=value)
        stored += 1
    return stored


def process_remote_data(db: Session, *, owner_id: uuid.UUID, raw: Any) -> None:
    remote_data_repo.upsert_remote_data(db, resource_owner_id=owner_id, raw=raw)


SaveCallable = Callable[..., List[Any]]


def sync_for_linked_user(
    db: Session,
    *,
    provider: str,
    linked_user_id: uuid.UUID,
    vertical: str,
    object_name: str,
    adapter: Any,
    save: SaveCallable,
    serialize: Optional[Callable[[Session, Any], Dict[str, Any]]] = None,
    adapter_kwargs: Optional[Dict[str, Any]] = None,
    extra_values: Optional[Dict[str, Any]] = None,
) -> Optional[List[Any]]:
    """Run one pull for (provider, linked user, object) and return the stored rows.

    Returns None when the linked user has no connection to the provider.
    """
    connection = connections_repo.get_for_linked_user(
        db, linked_user_id=linked_user_id, provider=provider, vertical=vertical
    )
    if connection is None:
        logger.warning(
            "Skipping %s.%s syncing... No %s connection was found for linked user %s",
            vertical, object_name, provider, linked_user_id,
        )
        return None

    logger.info("Syncing %s %s.%s for linked user %s", provider, vertical, object_name, linked_user_id)
    custom_field_mappings = get_custom_field_mappings(
        db, provider=provider, linked_user_id=linked_user_id, vertical=vertical, object_name=object_name
    )
    remote_properties = [m["remote_id"] for m in custom_field_mappings]

    resp = adapter.sync(connection, remote_properties, **(adapter_kwargs or {}))
    source_objects = resp.data or []

    unified_objects = core_unification.unify(
        db,
        source=source_objects,
        vertical=vertical,
        object_name=object_name,
        provider=provider,
        connection_id=connection.id,
        custom_field_mappings=custom_field_mappings,
    )
    if extra_values:
        for obj in unified_objects:
            obj.update(extra_values)

    rows = save(
        db,
        connection_id=connection.id,
        linked_user_id=linked_user_id,
        provider=provider,
        unified_objects=unified_objects,
        remote_data=source_objects,
    )

    event = events.log_pulled(
        db,
        vertical=vertical,
        object_name=object_name,
        provider=provider,
        linked_user_id=linked_user_id,
        project_id=connection.project_id,
    )

    if rows:
        if serialize:
            payload = [serialize(db, row) for row in rows]
        else:
            payload = [{"id": str(row.id), "remote_id": row.remote_id} for row in rows]
        webhook_service.handle_webhook(
            db,
            data=payload,
            event_type=event.type,
            project_id=connection.project_id,
            event_id=event.id,
        )
    return rows
