from __future__ import annotations

import json
import uuid
from typing import Any, Optional

from sqlalchemy.orm import Session

from unify.db import models
from unify.db.models.base import now_utc


def upsert_remote_data(db: Session, *, resource_owner_id: uuid.UUID, raw: Any) -> models.RemoteData:
    """Store the raw provider object as JSON text. Caller commits."""
    payload = json.dumps(raw, default=str)
    row = db.query(models.RemoteData).filter(models.RemoteData.resource_owner_id == resource_owner_id).first()
    if row is None:
        row = models.RemoteData(resource_owner_id=resource_owner_id, format="json", data=payload)
        db.add(row)
    else:
        row.data = payload
        row.created_at = now_utc()
    db.flush()
    return row


def get_remote_data(db: Session, resource_owner_id: uuid.UUID) -> Optional[Any]:
    row = db.query(models.RemoteData).filter(models.RemoteData.resource_owner_id == resource_owner_id).first()
    if row is None:
        return None
    return json.loads(row.data)
