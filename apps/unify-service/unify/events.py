"""
Event logging helpers and enums.

Every unified read, write and sync records an event row; webhook payloads
reference the event id.
"""
from __future__ import annotations

import uuid
from enum import Enum
from typing import Optional

from sqlalchemy.orm import Session

from unify.db import models
from unify.db.repositories import events as events_repo


class EventVerb(str, Enum):
    CREATED = "created"
    PULL = "pull"
    PULLED = "pulled"


class EventStatus(str, Enum):
    SUCCESS = "success"
    FAIL = "fail"


class EventDirection(str, Enum):
    INBOUND = "0"
    OUTBOUND = "1"


def event_type(vertical: str, object_name: str, verb: EventVerb | str) -> str:
    verb_value = verb.value if isinstance(verb, EventVerb) else str(verb)
    return f"{vertical}.{object_name}.{verb_value}"


def log(
    db: Session,
    *,
    type: str,
    method: str,
    url: str,
    provider: Optional[str],
    linked_user_id: Optional[uuid.UUID],
    project_id: Optional[uuid.UUID],
    status: EventStatus | str = EventStatus.SUCCESS,
    direction: EventDirection | str = EventDirection.INBOUND,
) -> models.Event:
    """Central event logging helper."""
    # Persist plain strings, not Enum reprs
    status_value = status.value if isinstance(status, EventStatus) else str(status)
    direction_value = direction.value if isinstance(direction, EventDirection) else str(direction)
    return events_repo.create_event(
        db,
        status=status_value,
        type=type,
        method=method,
        url=url,
        provider=provider,
        linked_user_id=linked_user_id,
        project_id=project_id,
        direction=direction_value,
    )


def log_created(db: Session, *, vertical: str, object_name: str, url: str, provider: str, linked_user_id: uuid.UUID, project_id: Optional[uuid.UUID], provider_status: Optional[int]):
    status = EventStatus.SUCCESS if provider_status in (200, 201) else EventStatus.FAIL
    return log(
        db,
        type=event_type(vertical, object_name, EventVerb.CREATED),
        method="POST",
        url=url,
        provider=provider,
        linked_user_id=linked_user_id,
        project_id=project_id,
        status=status,
    )


def log_pull(db: Session, *, vertical: str, object_name: str, url: str, provider: str, linked_user_id: uuid.UUID, project_id: Optional[uuid.UUID]):
    return log(
        db,
        type=event_type(vertical, object_name, EventVerb.PULL),
        method="GET",
        url=url,
        provider=provider,
        linked_user_id=linked_user_id,
        project_id=project_id,
    )


def log_pulled(db: Session, *, vertical: str, object_name: str, provider: str, linked_user_id: uuid.UUID, project_id: Optional[uuid.UUID]):
    return log(
        db,
        type=event_type(vertical, object_name, EventVerb.PULLED),
        method="PULL",
        url="/pull",
        provider=provider,
        linked_user_id=linked_user_id,
        project_id=project_id,
    )


__all__ = ["EventVerb", "EventStatus", "EventDirection", "event_type", "log", "log_created", "log_pull", "log_pulled"]
