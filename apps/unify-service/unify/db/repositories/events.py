from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy.orm import Session

from unify.db import models


def create_event(
    db: Session,
    *,
    status: str,
    type: str,
    method: str,
    url: str,
    provider: Optional[str],
    linked_user_id: Optional[uuid.UUID],
    project_id: Optional[uuid.UUID],
    direction: str = "0",
) -> models.Event:
    event = models.Event(
        status=status,
        type=type,
        method=method,
        url=url,
        provider=provider,
        direction=direction,
        linked_user_id=linked_user_id,
        project_id=project_id,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    return event
